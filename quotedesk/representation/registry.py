"""Seller ↔ company representation and its approval workflow.

Request states: PENDING → APPROVED | REJECTED. Only admins resolve requests.
Approving creates or reactivates the Representation row and stamps the
request in the same transaction; a flush failure rolls both back.

Business rules:
- the first request for a pair needs approval;
- re-requesting a pair whose Representation is merely inactive reactivates it
  immediately (no approval step);
- a rejected request can be re-submitted, reusing the same request row.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.auth import require_admin
from quotedesk.config import settings
from quotedesk.errors import DuplicateError, InvalidStateError, NotFoundError
from quotedesk.events import emit
from quotedesk.models.company import Company
from quotedesk.models.enums import RepresentationRequestStatus, ResolutionDecision
from quotedesk.models.representation import Representation, RepresentationRequest
from quotedesk.models.seller import Seller
from quotedesk.schemas.events import EventType, SystemEvent
from quotedesk.schemas.principal import Principal

logger = logging.getLogger(__name__)


@dataclass
class RequestResult:
    """Outcome of `request_representation`: exactly one field is set."""

    request: RepresentationRequest | None = None
    representation: Representation | None = None

    @property
    def reactivated(self) -> bool:
        return self.representation is not None


class RepresentationRegistry:
    """Stateless workflow operations — AsyncSession passed per call."""

    def __init__(self, default_commission: float | None = None) -> None:
        commission = default_commission if default_commission is not None else settings.quotation.default_commission
        self._default_commission = Decimal(str(commission))

    # ── Workflow ──────────────────────────────────────────────────────

    async def request_representation(
        self,
        db: AsyncSession,
        seller_id: uuid.UUID,
        company_id: uuid.UUID,
        message: str | None = None,
    ) -> RequestResult:
        """Ask to represent a company, or reactivate a dormant link directly."""
        if await db.get(Seller, seller_id) is None:
            raise NotFoundError("Seller", seller_id)
        if await db.get(Company, company_id) is None:
            raise NotFoundError("Company", company_id)

        representation = await self._find_representation(db, seller_id, company_id)
        if representation is not None:
            if representation.active:
                raise DuplicateError(
                    "Seller already represents this company",
                    details={"representation_id": str(representation.id)},
                )
            representation.active = True
            await db.flush()
            await self._emit(EventType.REPRESENTATION_REACTIVATED, representation.id, seller_id, company_id)
            logger.info("Representation reactivated: seller=%s company=%s", seller_id, company_id)
            return RequestResult(representation=representation)

        request = await self._find_request(db, seller_id, company_id)
        if request is not None and request.status == RepresentationRequestStatus.PENDING.value:
            raise DuplicateError(
                "A pending request already exists for this company",
                details={"request_id": str(request.id)},
            )

        if request is None:
            request = RepresentationRequest(
                seller_id=seller_id,
                company_id=company_id,
                status=RepresentationRequestStatus.PENDING.value,
                message=message,
            )
            db.add(request)
        else:
            # Resolved earlier and no live link: reopen the same row
            request.status = RepresentationRequestStatus.PENDING.value
            request.message = message
            request.resolved_by = None
            request.resolved_at = None

        try:
            await db.flush()
        except IntegrityError as exc:
            # A concurrent first request for the same pair won the insert
            raise DuplicateError("A pending request already exists for this company") from exc

        await self._emit(EventType.REPRESENTATION_REQUESTED, request.id, seller_id, company_id)
        logger.info("Representation requested: seller=%s company=%s", seller_id, company_id)
        return RequestResult(request=request)

    async def resolve_request(
        self,
        db: AsyncSession,
        request_id: uuid.UUID,
        decision: ResolutionDecision,
        admin: Principal,
    ) -> RepresentationRequest:
        """Approve or reject a PENDING request. Resolved requests fail, never no-op."""
        require_admin(admin)

        result = await db.execute(
            select(RepresentationRequest)
            .where(RepresentationRequest.id == request_id)
            .with_for_update()
        )
        request = result.scalar_one_or_none()
        if request is None:
            raise NotFoundError("RepresentationRequest", request_id)

        if request.is_terminal:
            raise InvalidStateError(
                "Request has already been resolved",
                details={"request_id": str(request_id), "status": request.status},
            )

        now = datetime.now(timezone.utc)
        if decision == ResolutionDecision.APPROVE:
            representation = await self._find_representation(db, request.seller_id, request.company_id)
            if representation is None:
                representation = Representation(
                    seller_id=request.seller_id,
                    company_id=request.company_id,
                    active=True,
                    commission_override=self._default_commission,
                )
                db.add(representation)
            else:
                representation.active = True
            request.status = RepresentationRequestStatus.APPROVED.value
            event_type = EventType.REPRESENTATION_APPROVED
        else:
            request.status = RepresentationRequestStatus.REJECTED.value
            event_type = EventType.REPRESENTATION_REJECTED

        request.resolved_by = admin.id
        request.resolved_at = now
        # Representation upsert and request stamp go out in one flush
        await db.flush()

        await self._emit(event_type, request.id, request.seller_id, request.company_id, actor=admin)
        logger.info(
            "Representation request %s: %s (seller=%s company=%s admin=%s)",
            request.status,
            request.id,
            request.seller_id,
            request.company_id,
            admin.id,
        )
        return request

    async def toggle_active(
        self,
        db: AsyncSession,
        representation_id: uuid.UUID,
        active: bool,
        admin: Principal,
    ) -> Representation:
        """Administrative on/off switch, independent of the request workflow."""
        require_admin(admin)
        representation = await self._get_representation(db, representation_id)
        representation.active = active
        await db.flush()

        await self._emit(
            EventType.REPRESENTATION_TOGGLED,
            representation.id,
            representation.seller_id,
            representation.company_id,
            actor=admin,
            extra={"active": active},
        )
        logger.info("Representation %s %s by %s", representation.id, "activated" if active else "deactivated", admin.id)
        return representation

    async def set_overrides(
        self,
        db: AsyncSession,
        representation_id: uuid.UUID,
        admin: Principal,
        commission: Decimal | None = None,
        target: Decimal | None = None,
    ) -> Representation:
        """Adjust per-pair commission and target. None leaves a field unchanged."""
        require_admin(admin)
        representation = await self._get_representation(db, representation_id)
        if commission is not None:
            representation.commission_override = commission
        if target is not None:
            representation.target_override = target
        await db.flush()

        await self._emit(
            EventType.REPRESENTATION_UPDATED,
            representation.id,
            representation.seller_id,
            representation.company_id,
            actor=admin,
            extra={
                "commission": str(commission) if commission is not None else None,
                "target": str(target) if target is not None else None,
            },
        )
        return representation

    # ── Queries ───────────────────────────────────────────────────────

    async def is_representing(self, db: AsyncSession, seller_id: uuid.UUID, company_id: uuid.UUID) -> bool:
        """True iff an active Representation row exists for the pair."""
        result = await db.execute(
            select(
                exists().where(
                    Representation.seller_id == seller_id,
                    Representation.company_id == company_id,
                    Representation.active.is_(True),
                )
            )
        )
        return bool(result.scalar())

    async def companies_for(self, db: AsyncSession, seller_id: uuid.UUID) -> set[uuid.UUID]:
        """Ids of companies the seller actively represents."""
        result = await db.execute(
            select(Representation.company_id).where(
                Representation.seller_id == seller_id,
                Representation.active.is_(True),
            )
        )
        return set(result.scalars().all())

    async def get_request(self, db: AsyncSession, request_id: uuid.UUID) -> RepresentationRequest:
        request = await db.get(RepresentationRequest, request_id)
        if request is None:
            raise NotFoundError("RepresentationRequest", request_id)
        return request

    async def list_requests(
        self,
        db: AsyncSession,
        status: RepresentationRequestStatus | None = None,
    ) -> list[RepresentationRequest]:
        """All requests, newest first, optionally filtered by status."""
        stmt = select(RepresentationRequest).order_by(RepresentationRequest.created_at.desc())
        if status is not None:
            stmt = stmt.where(RepresentationRequest.status == status.value)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def requests_for(self, db: AsyncSession, seller_id: uuid.UUID) -> list[RepresentationRequest]:
        result = await db.execute(
            select(RepresentationRequest)
            .where(RepresentationRequest.seller_id == seller_id)
            .order_by(RepresentationRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_representations(
        self,
        db: AsyncSession,
        active: bool | None = None,
    ) -> list[Representation]:
        stmt = select(Representation).order_by(Representation.created_at.desc())
        if active is not None:
            stmt = stmt.where(Representation.active.is_(active))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    # ── Internals ─────────────────────────────────────────────────────

    async def _find_representation(
        self, db: AsyncSession, seller_id: uuid.UUID, company_id: uuid.UUID
    ) -> Representation | None:
        result = await db.execute(
            select(Representation).where(
                Representation.seller_id == seller_id,
                Representation.company_id == company_id,
            )
        )
        return result.scalar_one_or_none()

    async def _find_request(
        self, db: AsyncSession, seller_id: uuid.UUID, company_id: uuid.UUID
    ) -> RepresentationRequest | None:
        result = await db.execute(
            select(RepresentationRequest).where(
                RepresentationRequest.seller_id == seller_id,
                RepresentationRequest.company_id == company_id,
            )
        )
        return result.scalar_one_or_none()

    async def _get_representation(self, db: AsyncSession, representation_id: uuid.UUID) -> Representation:
        representation = await db.get(Representation, representation_id)
        if representation is None:
            raise NotFoundError("Representation", representation_id)
        return representation

    async def _emit(
        self,
        event_type: EventType,
        entity_id: uuid.UUID,
        seller_id: uuid.UUID,
        company_id: uuid.UUID,
        actor: Principal | None = None,
        extra: dict | None = None,
    ) -> None:
        await emit(SystemEvent(
            event_type=event_type,
            entity_id=str(entity_id),
            actor_id=actor.id if actor else None,
            actor_role=actor.role.value if actor else None,
            data={"seller_id": str(seller_id), "company_id": str(company_id), **(extra or {})},
            source_module="representation.registry",
        ))


# Module-level singleton
representation_registry = RepresentationRegistry()
