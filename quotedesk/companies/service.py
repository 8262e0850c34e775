"""Company administration with a referential delete guard.

A company is never removed while anything still points at it: its
representations (and through them its sellers), its products, or its
quotations. Deactivate it instead.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.errors import DuplicateError, InvalidStateError, NotFoundError
from quotedesk.events import emit
from quotedesk.models.company import Company
from quotedesk.models.product import Product
from quotedesk.models.quotation import Quotation
from quotedesk.models.representation import Representation
from quotedesk.schemas.company import CompanyCreate
from quotedesk.schemas.events import EventType, SystemEvent
from quotedesk.schemas.principal import Principal

logger = logging.getLogger(__name__)

TAX_ID_INDEX = "ix_companies_tax_id"

# Tables whose rows keep a company alive
_DEPENDENTS = (
    ("representations", Representation),
    ("products", Product),
    ("quotations", Quotation),
)


class CompanyService:
    async def create_company(self, db: AsyncSession, data: CompanyCreate, admin: Principal) -> Company:
        existing = await db.execute(select(Company.id).where(Company.tax_id == data.tax_id))
        if existing.scalar_one_or_none() is not None:
            raise DuplicateError("A company with this tax id already exists", details={"tax_id": data.tax_id})

        company = Company(**data.model_dump())
        db.add(company)
        try:
            await db.flush()
        except IntegrityError as exc:
            if TAX_ID_INDEX not in str(exc.orig):
                raise
            # A concurrent create with the same tax id committed first
            raise DuplicateError(
                "A company with this tax id already exists", details={"tax_id": data.tax_id}
            ) from exc

        await emit(SystemEvent(
            event_type=EventType.COMPANY_CREATED,
            actor_id=admin.id,
            actor_role=admin.role.value,
            entity_id=str(company.id),
            data={"tax_id": company.tax_id, "legal_name": company.legal_name},
            source_module="companies.service",
        ))
        logger.info("Company created: %s (%s)", company.legal_name, company.tax_id)
        return company

    async def get_company(self, db: AsyncSession, company_id: uuid.UUID) -> Company:
        company = await db.get(Company, company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    async def list_companies(self, db: AsyncSession, active: bool | None = None) -> list[Company]:
        stmt = select(Company).order_by(Company.legal_name)
        if active is not None:
            stmt = stmt.where(Company.active.is_(active))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def dependent_counts(self, db: AsyncSession, company_id: uuid.UUID) -> dict[str, int]:
        """Rows per dependent table that reference the company."""
        counts: dict[str, int] = {}
        for label, model in _DEPENDENTS:
            result = await db.execute(
                select(func.count()).select_from(model).where(model.company_id == company_id)
            )
            counts[label] = int(result.scalar_one())
        return counts

    async def delete_company(self, db: AsyncSession, company_id: uuid.UUID, admin: Principal) -> None:
        company = await self.get_company(db, company_id)

        counts = await self.dependent_counts(db, company_id)
        blocking = {label: n for label, n in counts.items() if n}
        if blocking:
            raise InvalidStateError(
                "Company still has linked records",
                details=blocking,
            )

        await db.delete(company)
        await db.flush()

        await emit(SystemEvent(
            event_type=EventType.COMPANY_DELETED,
            actor_id=admin.id,
            actor_role=admin.role.value,
            entity_id=str(company_id),
            data={"tax_id": company.tax_id},
            source_module="companies.service",
        ))
        logger.info("Company deleted: %s", company_id)


# Module-level singleton
company_service = CompanyService()
