"""DocumentDailySequence model — one counter row per (prefix, calendar day)."""

from __future__ import annotations

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from quotedesk.models.base import Base, TimestampMixin


class DocumentDailySequence(TimestampMixin, Base):
    """Last issued ordinal for a document prefix on a given day.

    Incremented atomically with INSERT ... ON CONFLICT DO UPDATE inside the
    allocating transaction; the row lock serializes concurrent allocators.
    """

    __tablename__ = "document_daily_sequences"
    __table_args__ = (
        UniqueConstraint("prefix", "day", name="uq_document_daily_sequences_prefix_day"),
    )

    prefix: Mapped[str] = mapped_column(String(20), nullable=False)
    day: Mapped[str] = mapped_column(String(8), nullable=False, comment="YYYYMMDD")
    last_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<DocumentDailySequence {self.prefix}{self.day} last={self.last_seq}>"
