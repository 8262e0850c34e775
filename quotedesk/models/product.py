"""Product model — catalog entry owned by a single company."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quotedesk.models.base import Base, Money, TimestampMixin

if TYPE_CHECKING:
    from quotedesk.models.company import Company


class Product(TimestampMixin, Base):
    """A sellable product. Only quotable under its own company."""

    __tablename__ = "products"

    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(64), index=True)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    company: Mapped[Company] = relationship("Company", back_populates="products")

    def __repr__(self) -> str:
        return f"<Product name={self.name} company={self.company_id}>"
