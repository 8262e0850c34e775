"""Seller model — a user acting as sales agent for one or more companies."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quotedesk.models.base import Base, Money, Percent, TimestampMixin

if TYPE_CHECKING:
    from quotedesk.models.client import Client
    from quotedesk.models.representation import Representation


class Seller(TimestampMixin, Base):
    """Seller profile attached to an identity-provider user."""

    __tablename__ = "sellers"

    user_id: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True, comment="Identity provider user id"
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))

    # Defaults applied when a representation has no override
    default_commission: Mapped[Decimal | None] = mapped_column(Percent, comment="Percent")
    default_target: Mapped[Decimal | None] = mapped_column(Money, comment="Monthly sales target")

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    representations: Mapped[list[Representation]] = relationship(
        "Representation", back_populates="seller"
    )
    clients: Mapped[list[Client]] = relationship("Client", back_populates="seller")

    def __repr__(self) -> str:
        return f"<Seller name={self.name} active={self.active}>"
