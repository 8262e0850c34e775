"""Representation models — the Seller × Company link and its approval requests.

A Representation row is unique per (seller, company) pair and is reused on
reactivation; it is never cascade-deleted from either side.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quotedesk.models.base import Base, Money, Percent, TimestampMixin
from quotedesk.models.enums import RepresentationRequestStatus

if TYPE_CHECKING:
    from quotedesk.models.company import Company
    from quotedesk.models.seller import Seller


class Representation(TimestampMixin, Base):
    """Active link granting a seller visibility and sell rights over a company."""

    __tablename__ = "representations"
    __table_args__ = (
        UniqueConstraint("seller_id", "company_id", name="uq_representations_seller_company"),
    )

    # Foreign keys
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("sellers.id"), nullable=False, index=True
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False, index=True
    )

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Per-pair overrides of the seller defaults
    commission_override: Mapped[Decimal | None] = mapped_column(Percent, comment="Percent")
    target_override: Mapped[Decimal | None] = mapped_column(Money)

    # Relationships
    seller: Mapped[Seller] = relationship("Seller", back_populates="representations")
    company: Mapped[Company] = relationship("Company", back_populates="representations")

    def __repr__(self) -> str:
        return (
            f"<Representation seller={self.seller_id} company={self.company_id} "
            f"active={self.active}>"
        )


class RepresentationRequest(TimestampMixin, Base):
    """A seller's ask to represent a company, resolved by an administrator."""

    __tablename__ = "representation_requests"
    __table_args__ = (
        UniqueConstraint("seller_id", "company_id", name="uq_representation_requests_seller_company"),
    )

    # Foreign keys
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("sellers.id"), nullable=False, index=True
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False, index=True
    )

    status: Mapped[str] = mapped_column(
        String(20), default=RepresentationRequestStatus.PENDING.value, nullable=False, index=True
    )
    message: Mapped[str | None] = mapped_column(String(1000))

    # Resolution stamps
    resolved_by: Mapped[str | None] = mapped_column(String(100), comment="Admin principal id")
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    seller: Mapped[Seller] = relationship("Seller")
    company: Mapped[Company] = relationship("Company")

    @property
    def is_terminal(self) -> bool:
        return self.status != RepresentationRequestStatus.PENDING.value

    def __repr__(self) -> str:
        return f"<RepresentationRequest seller={self.seller_id} company={self.company_id} status={self.status}>"
