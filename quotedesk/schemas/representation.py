"""Pydantic schemas for the representation workflow."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from quotedesk.models.enums import RepresentationRequestStatus, ResolutionDecision


class RepresentationRequestCreate(BaseModel):
    company_id: uuid.UUID
    message: str | None = Field(default=None, max_length=1000)


class ResolveRequestBody(BaseModel):
    request_id: uuid.UUID
    decision: ResolutionDecision


class ToggleRepresentationBody(BaseModel):
    representation_id: uuid.UUID
    active: bool


class RepresentationOverridesBody(BaseModel):
    commission: Decimal | None = Field(default=None, ge=0, le=100)
    target: Decimal | None = Field(default=None, ge=0)


class RepresentationRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    seller_id: uuid.UUID
    company_id: uuid.UUID
    status: RepresentationRequestStatus
    message: str | None = None
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None


class RepresentationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    seller_id: uuid.UUID
    company_id: uuid.UUID
    active: bool
    commission_override: Decimal | None = None
    target_override: Decimal | None = None


class RequestOutcome(BaseModel):
    """What `request_representation` did: opened a request or reactivated a link."""

    reactivated: bool
    request: RepresentationRequestRead | None = None
    representation: RepresentationRead | None = None
