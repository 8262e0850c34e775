"""Tests for RepresentationRegistry — request/approval workflow and queries.

Covers:
- request: new request, active duplicate, inactive reactivation fast path,
  pending duplicate, rejected re-submission, missing seller/company
- resolve: approve creates or activates the link, reject only stamps,
  already-resolved → InvalidStateError, non-admin → ForbiddenError
- toggle / overrides / is_representing / companies_for
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from quotedesk.errors import DuplicateError, ForbiddenError, InvalidStateError, NotFoundError
from quotedesk.models.enums import RepresentationRequestStatus, ResolutionDecision, Role
from quotedesk.models.representation import Representation, RepresentationRequest
from quotedesk.representation.registry import RepresentationRegistry
from quotedesk.schemas.principal import Principal

ADMIN = Principal(id="admin-1", role=Role.ADMIN)
SELLER_PRINCIPAL = Principal(id="user-9", role=Role.SELLER, seller_id=uuid.uuid4())

# ── Helpers ──────────────────────────────────────────────────────────


def _make_db():
    """Build a mock AsyncSession with common operations."""
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.get = AsyncMock(return_value=MagicMock())
    return db


def _result(value=None, scalars=None, scalar=None):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar.return_value = scalar
    result.scalars.return_value.all.return_value = scalars or []
    return result


def _make_representation(active: bool = True) -> Representation:
    rep = Representation(seller_id=uuid.uuid4(), company_id=uuid.uuid4(), active=active)
    rep.id = uuid.uuid4()
    return rep


def _make_request(status: RepresentationRequestStatus = RepresentationRequestStatus.PENDING) -> RepresentationRequest:
    req = RepresentationRequest(
        seller_id=uuid.uuid4(),
        company_id=uuid.uuid4(),
        status=status.value,
        message="please",
    )
    req.id = uuid.uuid4()
    return req


def _registry() -> RepresentationRegistry:
    return RepresentationRegistry(default_commission=5.0)


# ── request_representation ───────────────────────────────────────────


class TestRequestRepresentation:
    @pytest.mark.asyncio()
    async def test_first_request_is_pending(self):
        db = _make_db()
        # no representation, no prior request
        db.execute = AsyncMock(side_effect=[_result(None), _result(None)])
        seller_id, company_id = uuid.uuid4(), uuid.uuid4()

        with patch("quotedesk.representation.registry.emit", new_callable=AsyncMock) as mock_emit:
            outcome = await _registry().request_representation(db, seller_id, company_id, "hello")

        assert outcome.reactivated is False
        assert outcome.request.status == RepresentationRequestStatus.PENDING.value
        assert outcome.request.seller_id == seller_id
        assert outcome.request.company_id == company_id
        db.add.assert_called_once()
        db.flush.assert_awaited_once()
        assert mock_emit.call_args[0][0].event_type.value == "representation.requested"

    @pytest.mark.asyncio()
    async def test_active_representation_is_duplicate(self):
        db = _make_db()
        db.execute = AsyncMock(return_value=_result(_make_representation(active=True)))

        with pytest.raises(DuplicateError):
            await _registry().request_representation(db, uuid.uuid4(), uuid.uuid4())
        db.add.assert_not_called()

    @pytest.mark.asyncio()
    async def test_inactive_representation_reactivates_without_request(self):
        db = _make_db()
        rep = _make_representation(active=False)
        db.execute = AsyncMock(return_value=_result(rep))

        with patch("quotedesk.representation.registry.emit", new_callable=AsyncMock) as mock_emit:
            outcome = await _registry().request_representation(db, rep.seller_id, rep.company_id)

        assert outcome.reactivated is True
        assert outcome.representation is rep
        assert outcome.request is None
        assert rep.active is True
        db.add.assert_not_called()
        assert mock_emit.call_args[0][0].event_type.value == "representation.reactivated"

    @pytest.mark.asyncio()
    async def test_pending_request_is_duplicate(self):
        db = _make_db()
        db.execute = AsyncMock(side_effect=[_result(None), _result(_make_request())])

        with pytest.raises(DuplicateError):
            await _registry().request_representation(db, uuid.uuid4(), uuid.uuid4())

    @pytest.mark.asyncio()
    async def test_rejected_request_is_reopened(self):
        db = _make_db()
        req = _make_request(RepresentationRequestStatus.REJECTED)
        req.resolved_by = "admin-1"
        req.resolved_at = MagicMock()
        db.execute = AsyncMock(side_effect=[_result(None), _result(req)])

        with patch("quotedesk.representation.registry.emit", new_callable=AsyncMock):
            outcome = await _registry().request_representation(db, req.seller_id, req.company_id, "again")

        assert outcome.request is req
        assert req.status == RepresentationRequestStatus.PENDING.value
        assert req.message == "again"
        assert req.resolved_by is None
        assert req.resolved_at is None
        db.add.assert_not_called()

    @pytest.mark.asyncio()
    async def test_missing_company(self):
        db = _make_db()
        db.get = AsyncMock(side_effect=[MagicMock(), None])

        with pytest.raises(NotFoundError) as exc_info:
            await _registry().request_representation(db, uuid.uuid4(), uuid.uuid4())
        assert exc_info.value.entity == "Company"

    @pytest.mark.asyncio()
    async def test_missing_seller(self):
        db = _make_db()
        db.get = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError) as exc_info:
            await _registry().request_representation(db, uuid.uuid4(), uuid.uuid4())
        assert exc_info.value.entity == "Seller"

    @pytest.mark.asyncio()
    async def test_concurrent_insert_maps_to_duplicate(self):
        db = _make_db()
        db.execute = AsyncMock(side_effect=[_result(None), _result(None)])
        db.flush = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("unique violation")))

        with pytest.raises(DuplicateError):
            await _registry().request_representation(db, uuid.uuid4(), uuid.uuid4())


# ── resolve_request ──────────────────────────────────────────────────


class TestResolveRequest:
    @pytest.mark.asyncio()
    async def test_approve_creates_representation_with_default_commission(self):
        db = _make_db()
        req = _make_request()
        db.execute = AsyncMock(side_effect=[_result(req), _result(None)])

        with patch("quotedesk.representation.registry.emit", new_callable=AsyncMock) as mock_emit:
            resolved = await _registry().resolve_request(db, req.id, ResolutionDecision.APPROVE, ADMIN)

        assert resolved.status == RepresentationRequestStatus.APPROVED.value
        assert resolved.resolved_by == "admin-1"
        assert resolved.resolved_at is not None

        rep = db.add.call_args[0][0]
        assert isinstance(rep, Representation)
        assert rep.seller_id == req.seller_id
        assert rep.company_id == req.company_id
        assert rep.active is True
        assert rep.commission_override == Decimal("5.0")

        # request stamp and representation go out in one flush
        db.flush.assert_awaited_once()
        assert mock_emit.call_args[0][0].event_type.value == "representation.approved"

    @pytest.mark.asyncio()
    async def test_approve_reuses_existing_row(self):
        db = _make_db()
        req = _make_request()
        rep = _make_representation(active=False)
        db.execute = AsyncMock(side_effect=[_result(req), _result(rep)])

        with patch("quotedesk.representation.registry.emit", new_callable=AsyncMock):
            await _registry().resolve_request(db, req.id, ResolutionDecision.APPROVE, ADMIN)

        assert rep.active is True
        db.add.assert_not_called()

    @pytest.mark.asyncio()
    async def test_reject_only_updates_request(self):
        db = _make_db()
        req = _make_request()
        db.execute = AsyncMock(return_value=_result(req))

        with patch("quotedesk.representation.registry.emit", new_callable=AsyncMock) as mock_emit:
            resolved = await _registry().resolve_request(db, req.id, ResolutionDecision.REJECT, ADMIN)

        assert resolved.status == RepresentationRequestStatus.REJECTED.value
        assert resolved.resolved_by == "admin-1"
        db.add.assert_not_called()
        assert db.execute.await_count == 1
        assert mock_emit.call_args[0][0].event_type.value == "representation.rejected"

    @pytest.mark.asyncio()
    @pytest.mark.parametrize(
        "status",
        [RepresentationRequestStatus.APPROVED, RepresentationRequestStatus.REJECTED],
    )
    async def test_already_resolved_fails(self, status):
        db = _make_db()
        req = _make_request(status)
        req.resolved_by = "admin-0"
        db.execute = AsyncMock(return_value=_result(req))

        with pytest.raises(InvalidStateError):
            await _registry().resolve_request(db, req.id, ResolutionDecision.APPROVE, ADMIN)

        assert req.status == status.value
        assert req.resolved_by == "admin-0"
        db.add.assert_not_called()
        db.flush.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_missing_request(self):
        db = _make_db()
        db.execute = AsyncMock(return_value=_result(None))
        with pytest.raises(NotFoundError):
            await _registry().resolve_request(db, uuid.uuid4(), ResolutionDecision.APPROVE, ADMIN)

    @pytest.mark.asyncio()
    async def test_non_admin_refused(self):
        db = _make_db()
        with pytest.raises(ForbiddenError):
            await _registry().resolve_request(db, uuid.uuid4(), ResolutionDecision.APPROVE, SELLER_PRINCIPAL)
        db.execute.assert_not_awaited()


# ── toggle / overrides ───────────────────────────────────────────────


class TestAdminOverrides:
    @pytest.mark.asyncio()
    async def test_toggle_off(self):
        db = _make_db()
        rep = _make_representation(active=True)
        db.get = AsyncMock(return_value=rep)

        with patch("quotedesk.representation.registry.emit", new_callable=AsyncMock) as mock_emit:
            await _registry().toggle_active(db, rep.id, False, ADMIN)

        assert rep.active is False
        event = mock_emit.call_args[0][0]
        assert event.event_type.value == "representation.toggled"
        assert event.data["active"] is False

    @pytest.mark.asyncio()
    async def test_toggle_missing(self):
        db = _make_db()
        db.get = AsyncMock(return_value=None)
        with pytest.raises(NotFoundError):
            await _registry().toggle_active(db, uuid.uuid4(), True, ADMIN)

    @pytest.mark.asyncio()
    async def test_toggle_requires_admin(self):
        with pytest.raises(ForbiddenError):
            await _registry().toggle_active(_make_db(), uuid.uuid4(), True, SELLER_PRINCIPAL)

    @pytest.mark.asyncio()
    async def test_set_overrides_partial(self):
        db = _make_db()
        rep = _make_representation()
        rep.commission_override = Decimal("5.00")
        rep.target_override = Decimal("1000.00")
        db.get = AsyncMock(return_value=rep)

        with patch("quotedesk.representation.registry.emit", new_callable=AsyncMock):
            await _registry().set_overrides(db, rep.id, ADMIN, commission=Decimal("7.5"))

        assert rep.commission_override == Decimal("7.5")
        assert rep.target_override == Decimal("1000.00")


# ── Queries ──────────────────────────────────────────────────────────


class TestQueries:
    @pytest.mark.asyncio()
    async def test_is_representing_true(self):
        db = _make_db()
        db.execute = AsyncMock(return_value=_result(scalar=True))
        assert await _registry().is_representing(db, uuid.uuid4(), uuid.uuid4()) is True

    @pytest.mark.asyncio()
    async def test_is_representing_false(self):
        db = _make_db()
        db.execute = AsyncMock(return_value=_result(scalar=False))
        assert await _registry().is_representing(db, uuid.uuid4(), uuid.uuid4()) is False

    @pytest.mark.asyncio()
    async def test_companies_for_returns_set(self):
        db = _make_db()
        a, b = uuid.uuid4(), uuid.uuid4()
        db.execute = AsyncMock(return_value=_result(scalars=[a, b]))
        assert await _registry().companies_for(db, uuid.uuid4()) == {a, b}

    @pytest.mark.asyncio()
    async def test_list_requests_filters_by_status(self):
        db = _make_db()
        pending = _make_request()
        db.execute = AsyncMock(return_value=_result(scalars=[pending]))

        requests = await _registry().list_requests(db, status=RepresentationRequestStatus.PENDING)

        assert requests == [pending]
        stmt = db.execute.call_args[0][0]
        assert "representation_requests.status" in str(stmt)

    @pytest.mark.asyncio()
    async def test_get_request(self):
        db = _make_db()
        request = _make_request(RepresentationRequestStatus.REJECTED)
        db.get = AsyncMock(return_value=request)

        assert await _registry().get_request(db, request.id) is request

    @pytest.mark.asyncio()
    async def test_get_request_missing(self):
        db = _make_db()
        db.get = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await _registry().get_request(db, uuid.uuid4())
