"""ConfigEntry model — generic key/value settings row editable by admins."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quotedesk.models.base import Base, TimestampMixin


class ConfigEntry(TimestampMixin, Base):
    """A persisted setting. `value` holds a string, usually JSON-encoded."""

    __tablename__ = "config_entries"

    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    value_type: Mapped[str] = mapped_column(String(20), nullable=False, default="JSON")
    description: Mapped[str | None] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"<ConfigEntry key={self.key}>"
