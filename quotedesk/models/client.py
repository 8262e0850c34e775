"""Client model — the buyer a quotation is addressed to."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quotedesk.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from quotedesk.models.seller import Seller


class Client(TimestampMixin, Base):
    """A client account, optionally owned by the seller who registered it."""

    __tablename__ = "clients"

    user_id: Mapped[str | None] = mapped_column(String(100), unique=True, index=True)
    seller_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("sellers.id"), index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    company_name: Mapped[str | None] = mapped_column(String(200))
    email: Mapped[str | None] = mapped_column(String(255))
    country: Mapped[str | None] = mapped_column(String(2), comment="ISO 3166-1 alpha-2")

    # Relationships
    seller: Mapped[Seller | None] = relationship("Seller", back_populates="clients")

    def __repr__(self) -> str:
        return f"<Client name={self.name} seller={self.seller_id}>"
