"""Quotation and QuotationItem models.

Monetary fields are stored in the company's base currency. The exchange rate
resolved at creation time is kept as a snapshot; conversions for display are
computed at read time and never written back.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quotedesk.models.base import Base, ExchangeRate, Money, Percent, TimestampMixin
from quotedesk.models.enums import QuotationStatus

if TYPE_CHECKING:
    from quotedesk.models.client import Client
    from quotedesk.models.company import Company
    from quotedesk.models.product import Product
    from quotedesk.models.seller import Seller


class Quotation(TimestampMixin, Base):
    """A numbered quotation issued by a seller on behalf of a company."""

    __tablename__ = "quotations"

    # Human-readable document number, e.g. OPDEXPORT20250917001
    number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)

    # Foreign keys
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False, index=True
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("sellers.id"), nullable=False, index=True
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id"), nullable=False, index=True
    )

    # Content
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        String(20), default=QuotationStatus.SENT.value, nullable=False, index=True
    )
    valid_until: Mapped[date | None] = mapped_column(Date)
    notes: Mapped[str | None] = mapped_column(Text)
    payment_terms: Mapped[str | None] = mapped_column(String(500))
    delivery_terms: Mapped[str | None] = mapped_column(String(500))

    # Export fields
    incoterm: Mapped[str | None] = mapped_column(String(10))
    destination_port: Mapped[str | None] = mapped_column(String(200))

    # Totals, base currency
    subtotal: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    freight: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    # Rate snapshot at creation
    exchange_rate: Mapped[Decimal | None] = mapped_column(ExchangeRate)
    exchange_rate_source: Mapped[str | None] = mapped_column(String(30))

    # Relationships
    company: Mapped[Company] = relationship("Company", back_populates="quotations")
    seller: Mapped[Seller] = relationship("Seller")
    client: Mapped[Client] = relationship("Client")
    items: Mapped[list[QuotationItem]] = relationship(
        "QuotationItem", back_populates="quotation", cascade="all, delete-orphan", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Quotation number={self.number} status={self.status}>"


class QuotationItem(TimestampMixin, Base):
    """One priced line of a quotation."""

    __tablename__ = "quotation_items"

    quotation_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("quotations.id"), nullable=False, index=True
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=False
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    discount: Mapped[Decimal] = mapped_column(Percent, nullable=False, default=Decimal("0"), comment="Percent")
    total: Mapped[Decimal] = mapped_column(Money, nullable=False)

    # Relationships
    quotation: Mapped[Quotation] = relationship("Quotation", back_populates="items")
    product: Mapped[Product] = relationship("Product")

    def __repr__(self) -> str:
        return f"<QuotationItem product={self.product_id} qty={self.quantity}>"
