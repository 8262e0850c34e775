"""Tests for CompanyService — duplicate tax id (including the insert race) and the referential delete guard."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError

from quotedesk.companies.service import CompanyService
from quotedesk.errors import DuplicateError, InvalidStateError, NotFoundError
from quotedesk.models.company import Company
from quotedesk.models.enums import Role
from quotedesk.schemas.company import CompanyCreate
from quotedesk.schemas.principal import Principal

ADMIN = Principal(id="admin-1", role=Role.ADMIN)

# ── Helpers ──────────────────────────────────────────────────────────


def _make_db():
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.delete = AsyncMock()
    return db


def _scalar_one_or_none(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _count(n: int):
    result = MagicMock()
    result.scalar_one.return_value = n
    return result


def _body(**overrides) -> CompanyCreate:
    data = {"legal_name": "Agro Export Ltda", "tax_id": "12.345.678/0001-90", "brand_color": "#1F6FEB"}
    data.update(overrides)
    return CompanyCreate(**data)


# ── create_company ───────────────────────────────────────────────────


class TestCreateCompany:
    @pytest.mark.asyncio()
    async def test_creates_with_normalized_tax_id(self):
        db = _make_db()
        db.execute = AsyncMock(return_value=_scalar_one_or_none(None))

        with patch("quotedesk.companies.service.emit", new_callable=AsyncMock) as mock_emit:
            company = await CompanyService().create_company(db, _body(), ADMIN)

        assert isinstance(company, Company)
        assert company.tax_id == "12345678000190"
        db.add.assert_called_once_with(company)
        assert mock_emit.call_args[0][0].event_type.value == "company.created"

    @pytest.mark.asyncio()
    async def test_duplicate_tax_id(self):
        db = _make_db()
        db.execute = AsyncMock(return_value=_scalar_one_or_none(uuid.uuid4()))

        with pytest.raises(DuplicateError):
            await CompanyService().create_company(db, _body(), ADMIN)
        db.add.assert_not_called()

    @pytest.mark.asyncio()
    async def test_concurrent_insert_maps_to_duplicate(self):
        db = _make_db()
        db.execute = AsyncMock(return_value=_scalar_one_or_none(None))
        db.flush = AsyncMock(side_effect=IntegrityError(
            "INSERT INTO companies ...",
            {},
            Exception('duplicate key value violates unique constraint "ix_companies_tax_id"'),
        ))

        with (
            patch("quotedesk.companies.service.emit", new_callable=AsyncMock) as mock_emit,
            pytest.raises(DuplicateError) as exc_info,
        ):
            await CompanyService().create_company(db, _body(), ADMIN)

        assert exc_info.value.details == {"tax_id": "12345678000190"}
        mock_emit.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_other_integrity_errors_propagate(self):
        db = _make_db()
        db.execute = AsyncMock(return_value=_scalar_one_or_none(None))
        db.flush = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception('violates check constraint "ck_x"')))

        with pytest.raises(IntegrityError):
            await CompanyService().create_company(db, _body(), ADMIN)


class TestCompanySchema:
    def test_bad_brand_color(self):
        with pytest.raises(PydanticValidationError):
            _body(brand_color="blue")

    def test_tax_id_normalized(self):
        assert _body(tax_id="ab-12.3").tax_id == "AB123"


# ── delete_company ───────────────────────────────────────────────────


class TestDeleteCompany:
    @pytest.mark.asyncio()
    async def test_deletes_when_unreferenced(self):
        db = _make_db()
        company = MagicMock()
        db.get = AsyncMock(return_value=company)
        db.execute = AsyncMock(side_effect=[_count(0), _count(0), _count(0)])

        with patch("quotedesk.companies.service.emit", new_callable=AsyncMock):
            await CompanyService().delete_company(db, uuid.uuid4(), ADMIN)

        db.delete.assert_awaited_once_with(company)
        db.flush.assert_awaited_once()

    @pytest.mark.asyncio()
    @pytest.mark.parametrize(
        ("counts", "blocking"),
        [
            ((1, 0, 0), {"representations": 1}),
            ((0, 4, 0), {"products": 4}),
            ((0, 0, 2), {"quotations": 2}),
            ((3, 1, 7), {"representations": 3, "products": 1, "quotations": 7}),
        ],
    )
    async def test_guard_blocks_linked_company(self, counts, blocking):
        db = _make_db()
        db.get = AsyncMock(return_value=MagicMock())
        db.execute = AsyncMock(side_effect=[_count(n) for n in counts])

        with pytest.raises(InvalidStateError) as exc_info:
            await CompanyService().delete_company(db, uuid.uuid4(), ADMIN)

        assert exc_info.value.details == blocking
        db.delete.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_missing_company(self):
        db = _make_db()
        db.get = AsyncMock(return_value=None)
        with pytest.raises(NotFoundError):
            await CompanyService().delete_company(db, uuid.uuid4(), ADMIN)
