"""AuditLog model — append-only trail of every emitted SystemEvent."""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from quotedesk.models.base import Base, TimestampMixin


class AuditLog(TimestampMixin, Base):
    """One persisted event. Rows are never updated or deleted."""

    __tablename__ = "audit_log"

    event_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Who did it and to what
    actor_id: Mapped[str | None] = mapped_column(String(100), comment="Principal id or 'system'")
    actor_role: Mapped[str | None] = mapped_column(String(20), comment="ADMIN, SELLER, CLIENT, system")
    entity_id: Mapped[str | None] = mapped_column(String(100), index=True)

    data: Mapped[dict[str, Any] | None] = mapped_column(JSONB)

    def __repr__(self) -> str:
        return f"<AuditLog event={self.event_type} entity={self.entity_id}>"
