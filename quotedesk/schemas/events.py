"""SystemEvent schema — the event type emitted by every state change.

Subscribers (the audit logger, and anything registered at startup) consume
these events asynchronously.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """All event types emitted by the system."""

    # Representation workflow
    REPRESENTATION_REQUESTED = "representation.requested"
    REPRESENTATION_REACTIVATED = "representation.reactivated"
    REPRESENTATION_APPROVED = "representation.approved"
    REPRESENTATION_REJECTED = "representation.rejected"
    REPRESENTATION_TOGGLED = "representation.toggled"
    REPRESENTATION_UPDATED = "representation.updated"

    # Quotations
    QUOTATION_CREATED = "quotation.created"
    QUOTATION_STATUS_CHANGED = "quotation.status_changed"

    # Exchange rate
    RATE_RESOLVED = "rate.resolved"
    RATE_PROVIDER_FAILED = "rate.provider_failed"
    RATE_CONFIG_UPDATED = "rate.config_updated"

    # Companies
    COMPANY_CREATED = "company.created"
    COMPANY_DELETED = "company.deleted"

    # Admin
    ADMIN_ACCESS = "admin.access"

    # System
    SYSTEM_STARTUP = "system.startup"
    SYSTEM_SHUTDOWN = "system.shutdown"
    SYSTEM_ERROR = "system.error"


class SystemEvent(BaseModel):
    """Immutable record of something that happened.

    Consumed by:
    - audit_on_event → writes to the audit_log table
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Context (optional: system events have no actor)
    actor_id: str | None = None
    actor_role: str | None = None
    entity_id: str | None = None

    # Flexible payload
    data: dict[str, Any] = Field(default_factory=dict)

    source_module: str | None = Field(default=None, description="Module that emitted this event")

    model_config = {"frozen": True}
