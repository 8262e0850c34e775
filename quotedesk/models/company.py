"""Company model — the tenant whose catalog sellers represent."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quotedesk.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from quotedesk.models.product import Product
    from quotedesk.models.quotation import Quotation
    from quotedesk.models.representation import Representation


class Company(TimestampMixin, Base):
    """A tenant company. Never deleted while it owns sellers, products, or quotations."""

    __tablename__ = "companies"

    # Identity
    legal_name: Mapped[str] = mapped_column(String(200), nullable=False)
    trade_name: Mapped[str | None] = mapped_column(String(200))
    tax_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)

    # Contact and address
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(30))
    address: Mapped[str | None] = mapped_column(String(500))

    # Banking info for quotation footers: {"bank": ..., "agency": ..., "account": ..., "swift": ...}
    banking_info: Mapped[dict[str, Any] | None] = mapped_column(JSONB, default=dict)

    # Branding
    brand_color: Mapped[str | None] = mapped_column(String(7), comment="Hex color, e.g. #1F6FEB")

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    representations: Mapped[list[Representation]] = relationship(
        "Representation", back_populates="company"
    )
    products: Mapped[list[Product]] = relationship("Product", back_populates="company")
    quotations: Mapped[list[Quotation]] = relationship("Quotation", back_populates="company")

    def __repr__(self) -> str:
        return f"<Company tax_id={self.tax_id} active={self.active}>"
