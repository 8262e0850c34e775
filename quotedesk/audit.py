"""Audit subscriber — persists every SystemEvent to the audit_log table.

Registered as a global subscriber at startup. Never raises: a failed write
is logged and dropped so the event worker keeps running.
"""

from __future__ import annotations

import logging

from quotedesk.db.engine import async_session_factory
from quotedesk.models.audit import AuditLog
from quotedesk.schemas.events import SystemEvent

logger = logging.getLogger(__name__)


async def audit_on_event(event: SystemEvent) -> None:
    """Write a SystemEvent to audit_log in its own short transaction."""
    try:
        async with async_session_factory() as db:
            db.add(AuditLog(
                event_type=event.event_type.value,
                actor_id=event.actor_id,
                actor_role=event.actor_role,
                entity_id=event.entity_id,
                data={**event.data, "source_module": event.source_module},
            ))
            await db.commit()
    except Exception:
        logger.exception(
            "Failed to persist audit event: %s (entity=%s)",
            event.event_type.value,
            event.entity_id,
        )
