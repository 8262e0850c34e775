"""QuotationService — create, read and move quotations through their lifecycle.

Creation order:
1. Authorize the principal against the company (single scope predicate).
2. Resolve the seller the quotation is issued under.
3. Check the client and that every product belongs to the company.
4. Price the lines (base currency) and snapshot the current rate.
5. Allocate a number and insert inside a savepoint. A unique-number conflict
   rolls back only the savepoint and retries with a fresh number, bounded by
   `settings.quotation.sequence_max_attempts`.

Stored amounts are always base currency. Converted views are computed on read
and never written back.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.auth import require_seller_profile
from quotedesk.config import settings
from quotedesk.currency.conversion import convert, round_money
from quotedesk.currency.resolver import RateResolver
from quotedesk.errors import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    SequenceExhaustedError,
    ValidationError,
)
from quotedesk.events import emit
from quotedesk.models.client import Client
from quotedesk.models.enums import QuotationStatus, Role
from quotedesk.models.product import Product
from quotedesk.models.quotation import Quotation, QuotationItem
from quotedesk.models.seller import Seller
from quotedesk.numbering.allocator import SequenceAllocator, sequence_allocator
from quotedesk.quotation.pricing import calculate_totals
from quotedesk.representation.policy import can_act_for_company, ensure_company_scope
from quotedesk.representation.registry import RepresentationRegistry, representation_registry
from quotedesk.schemas.events import EventType, SystemEvent
from quotedesk.schemas.principal import Principal
from quotedesk.schemas.quotation import ConvertedTotals, QuotationCreate, QuotationRead

logger = logging.getLogger(__name__)

# Unique index backing quotations.number
NUMBER_INDEX = "ix_quotations_number"

# Allowed lifecycle moves; APPROVED, REJECTED and EXPIRED are terminal
TRANSITIONS: dict[QuotationStatus, frozenset[QuotationStatus]] = {
    QuotationStatus.DRAFT: frozenset({QuotationStatus.SENT, QuotationStatus.EXPIRED}),
    QuotationStatus.SENT: frozenset({
        QuotationStatus.APPROVED,
        QuotationStatus.REJECTED,
        QuotationStatus.EXPIRED,
    }),
    QuotationStatus.APPROVED: frozenset(),
    QuotationStatus.REJECTED: frozenset(),
    QuotationStatus.EXPIRED: frozenset(),
}


def _is_number_conflict(exc: IntegrityError) -> bool:
    return NUMBER_INDEX in str(exc.orig)


class QuotationService:
    """Orchestrates scope checks, numbering, pricing and rate snapshots."""

    def __init__(
        self,
        registry: RepresentationRegistry = representation_registry,
        allocator: SequenceAllocator = sequence_allocator,
        max_attempts: int | None = None,
    ) -> None:
        self._registry = registry
        self._allocator = allocator
        self._max_attempts = max_attempts or settings.quotation.sequence_max_attempts

    # ── Create ────────────────────────────────────────────────────────

    async def create_quotation(
        self,
        db: AsyncSession,
        principal: Principal,
        data: QuotationCreate,
        resolver: RateResolver,
    ) -> Quotation:
        # Fixes the numbering day before any I/O
        started_at = datetime.now(timezone.utc)

        if principal.role not in (Role.SELLER, Role.ADMIN):
            raise ForbiddenError("Only sellers and administrators can create quotations")
        await ensure_company_scope(db, principal, data.company_id, self._registry)

        seller_id = await self._resolve_seller(db, principal, data)
        await self._check_client(db, principal, data.client_id, seller_id)
        await self._check_products(db, data)

        totals = calculate_totals(data.items, discount=data.discount, freight=data.freight)
        rate = await resolver.resolve(db)

        for attempt in range(1, self._max_attempts + 1):
            number = await self._allocator.next_number(db, now=started_at)
            quotation = Quotation(
                number=number,
                company_id=data.company_id,
                seller_id=seller_id,
                client_id=data.client_id,
                title=data.title,
                description=data.description,
                status=data.status.value,
                valid_until=data.valid_until,
                notes=data.notes,
                payment_terms=data.payment_terms,
                delivery_terms=data.delivery_terms,
                incoterm=data.incoterm,
                destination_port=data.destination_port,
                subtotal=totals.subtotal,
                discount=totals.discount,
                freight=totals.freight,
                total=totals.total,
                exchange_rate=Decimal(str(rate.rate)),
                exchange_rate_source=rate.source.value,
                items=[
                    QuotationItem(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        discount=item.discount,
                        total=item.total,
                    )
                    for item in totals.items
                ],
            )
            try:
                async with db.begin_nested():
                    db.add(quotation)
                    await db.flush()
            except IntegrityError as exc:
                if not _is_number_conflict(exc):
                    raise
                logger.warning(
                    "Document number %s already taken (attempt %d/%d), retrying",
                    number,
                    attempt,
                    self._max_attempts,
                )
                continue
            break
        else:
            logger.error("Could not allocate a unique document number after %d attempts", self._max_attempts)
            raise SequenceExhaustedError(
                "Could not allocate a unique quotation number",
                details={"attempts": self._max_attempts},
            )

        await emit(SystemEvent(
            event_type=EventType.QUOTATION_CREATED,
            actor_id=principal.id,
            actor_role=principal.role.value,
            entity_id=str(quotation.id),
            data={
                "number": quotation.number,
                "company_id": str(data.company_id),
                "seller_id": str(seller_id),
                "total": str(totals.total),
                "rate_source": rate.source.value,
            },
            source_module="quotation.service",
        ))
        logger.info(
            "Quotation %s created: company=%s seller=%s total=%s",
            quotation.number,
            data.company_id,
            seller_id,
            totals.total,
        )
        return quotation

    # ── Read ──────────────────────────────────────────────────────────

    async def list_quotations(self, db: AsyncSession, principal: Principal) -> list[Quotation]:
        """Quotations visible to `principal`, newest first."""
        stmt = select(Quotation).order_by(Quotation.created_at.desc())

        if principal.role == Role.ADMIN:
            pass
        elif principal.role == Role.SELLER:
            if principal.seller_id is None:
                return []
            company_ids = await self._registry.companies_for(db, principal.seller_id)
            if not company_ids:
                return []
            stmt = stmt.where(Quotation.company_id.in_(sorted(company_ids)))
        elif principal.role == Role.CLIENT:
            if principal.client_id is None:
                return []
            stmt = stmt.where(Quotation.client_id == principal.client_id)
        else:
            raise ForbiddenError("Role cannot list quotations")

        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_quotation(
        self,
        db: AsyncSession,
        principal: Principal,
        quotation_id: uuid.UUID,
        convert_to: str | None = None,
        resolver: RateResolver | None = None,
    ) -> QuotationRead:
        """Fetch one quotation, optionally with totals converted at today's rate."""
        quotation = await self._get_visible(db, principal, quotation_id)
        view = QuotationRead.model_validate(quotation)

        if convert_to is not None:
            if resolver is None:
                msg = "A rate resolver is required for converted views"
                raise ValueError(msg)
            view.converted = await self._converted_totals(db, quotation, convert_to, resolver)
        return view

    # ── Lifecycle ─────────────────────────────────────────────────────

    async def update_status(
        self,
        db: AsyncSession,
        principal: Principal,
        quotation_id: uuid.UUID,
        status: QuotationStatus,
    ) -> Quotation:
        """Move a quotation along DRAFT → SENT → APPROVED | REJECTED | EXPIRED."""
        quotation = await db.get(Quotation, quotation_id)
        if quotation is None:
            raise NotFoundError("Quotation", quotation_id)
        if principal.role not in (Role.SELLER, Role.ADMIN):
            raise ForbiddenError("Only sellers and administrators can change quotation status")
        await ensure_company_scope(db, principal, quotation.company_id, self._registry)

        current = QuotationStatus(quotation.status)
        if status not in TRANSITIONS[current]:
            raise InvalidStateError(
                f"Cannot move quotation from {current.value} to {status.value}",
                details={"from": current.value, "to": status.value},
            )

        quotation.status = status.value
        await db.flush()

        await emit(SystemEvent(
            event_type=EventType.QUOTATION_STATUS_CHANGED,
            actor_id=principal.id,
            actor_role=principal.role.value,
            entity_id=str(quotation.id),
            data={"number": quotation.number, "from": current.value, "to": status.value},
            source_module="quotation.service",
        ))
        logger.info("Quotation %s: %s → %s", quotation.number, current.value, status.value)
        return quotation

    # ── Internals ─────────────────────────────────────────────────────

    async def _resolve_seller(self, db: AsyncSession, principal: Principal, data: QuotationCreate) -> uuid.UUID:
        if principal.role == Role.SELLER:
            seller_id = require_seller_profile(principal)
            if data.seller_id is not None and data.seller_id != seller_id:
                raise ForbiddenError("Sellers can only quote under their own profile")
        else:
            seller_id = data.seller_id or principal.seller_id
            if seller_id is None:
                raise ValidationError(
                    "seller_id is required",
                    details={"seller_id": "required when the administrator has no seller profile"},
                )

        if await db.get(Seller, seller_id) is None:
            raise NotFoundError("Seller", seller_id)
        return seller_id

    async def _check_client(
        self,
        db: AsyncSession,
        principal: Principal,
        client_id: uuid.UUID,
        seller_id: uuid.UUID,
    ) -> None:
        client = await db.get(Client, client_id)
        if client is None:
            raise NotFoundError("Client", client_id)
        if principal.role == Role.SELLER and client.seller_id != seller_id:
            raise ForbiddenError("Client belongs to another seller", details={"client_id": str(client_id)})

    async def _check_products(self, db: AsyncSession, data: QuotationCreate) -> None:
        requested = {item.product_id for item in data.items}
        result = await db.execute(select(Product).where(Product.id.in_(list(requested))))
        found = {product.id: product for product in result.scalars().all()}

        missing = requested - found.keys()
        if missing:
            raise NotFoundError("Product", sorted(str(pid) for pid in missing)[0])

        foreign = sorted(str(pid) for pid, product in found.items() if product.company_id != data.company_id)
        if foreign:
            raise ValidationError(
                "Products do not belong to the quoted company",
                details={"product_ids": foreign, "company_id": str(data.company_id)},
            )

    async def _get_visible(self, db: AsyncSession, principal: Principal, quotation_id: uuid.UUID) -> Quotation:
        quotation = await db.get(Quotation, quotation_id)
        if quotation is None:
            raise NotFoundError("Quotation", quotation_id)

        if principal.role == Role.CLIENT:
            allowed = principal.client_id is not None and quotation.client_id == principal.client_id
        else:
            allowed = await can_act_for_company(db, principal, quotation.company_id, self._registry)
        if not allowed:
            raise ForbiddenError("Not authorized for this quotation", details={"id": str(quotation_id)})
        return quotation

    async def _converted_totals(
        self,
        db: AsyncSession,
        quotation: Quotation,
        currency: str,
        resolver: RateResolver,
    ) -> ConvertedTotals:
        target = currency.upper()
        supported = {resolver.base_currency, resolver.local_currency}
        if target not in supported:
            raise ValidationError(
                "Unsupported currency",
                details={"supported": sorted(supported), "to": target},
            )

        resolved = await resolver.resolve(db)
        base = resolver.base_currency

        def _conv(amount: Decimal) -> Decimal:
            return round_money(convert(amount, base, target, resolved.rate, base=base))

        return ConvertedTotals(
            currency=target,
            rate=resolved.rate,
            source=resolved.source,
            subtotal=_conv(quotation.subtotal),
            discount=_conv(quotation.discount),
            freight=_conv(quotation.freight),
            total=_conv(quotation.total),
        )


# Module-level singleton
quotation_service = QuotationService()
