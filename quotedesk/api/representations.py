"""Representation endpoints — seller requests and the admin approval surface."""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.api.deps import get_admin, get_principal
from quotedesk.auth import require_seller_profile
from quotedesk.db.engine import get_session
from quotedesk.models.enums import RepresentationRequestStatus
from quotedesk.representation.registry import representation_registry
from quotedesk.schemas.principal import Principal
from quotedesk.schemas.representation import (
    RepresentationOverridesBody,
    RepresentationRead,
    RepresentationRequestCreate,
    RepresentationRequestRead,
    RequestOutcome,
    ResolveRequestBody,
    ToggleRepresentationBody,
)

router = APIRouter(tags=["representations"])


# ── Seller ───────────────────────────────────────────────────────────


@router.post("/representations/requests", response_model=RequestOutcome, status_code=201)
async def request_representation(
    body: RepresentationRequestCreate,
    db: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_principal),
) -> RequestOutcome:
    seller_id = require_seller_profile(principal)
    result = await representation_registry.request_representation(db, seller_id, body.company_id, body.message)
    return RequestOutcome(
        reactivated=result.reactivated,
        request=RepresentationRequestRead.model_validate(result.request) if result.request else None,
        representation=(
            RepresentationRead.model_validate(result.representation) if result.representation else None
        ),
    )


@router.get("/representations/requests", response_model=list[RepresentationRequestRead])
async def my_requests(
    db: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_principal),
) -> list[RepresentationRequestRead]:
    seller_id = require_seller_profile(principal)
    requests = await representation_registry.requests_for(db, seller_id)
    return [RepresentationRequestRead.model_validate(r) for r in requests]


@router.get("/representations/companies")
async def my_companies(
    db: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_principal),
) -> dict[str, list[str]]:
    seller_id = require_seller_profile(principal)
    company_ids = await representation_registry.companies_for(db, seller_id)
    return {"company_ids": sorted(str(cid) for cid in company_ids)}


# ── Admin ────────────────────────────────────────────────────────────


@router.get("/admin/representation-requests", response_model=list[RepresentationRequestRead])
async def list_requests(
    status: RepresentationRequestStatus | None = Query(RepresentationRequestStatus.PENDING),
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> list[RepresentationRequestRead]:
    """Pending requests by default; pass another status to audit past decisions."""
    requests = await representation_registry.list_requests(db, status=status)
    return [RepresentationRequestRead.model_validate(r) for r in requests]


@router.get("/admin/representation-requests/{request_id}", response_model=RepresentationRequestRead)
async def get_request(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> RepresentationRequestRead:
    request = await representation_registry.get_request(db, request_id)
    return RepresentationRequestRead.model_validate(request)


@router.post("/admin/representation-requests/resolve", response_model=RepresentationRequestRead)
async def resolve_request(
    body: ResolveRequestBody,
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> RepresentationRequestRead:
    request = await representation_registry.resolve_request(db, body.request_id, body.decision, admin)
    return RepresentationRequestRead.model_validate(request)


@router.get("/admin/representations", response_model=list[RepresentationRead])
async def list_representations(
    active: bool | None = Query(None),
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> list[RepresentationRead]:
    representations = await representation_registry.list_representations(db, active=active)
    return [RepresentationRead.model_validate(r) for r in representations]


@router.post("/admin/representations/toggle", response_model=RepresentationRead)
async def toggle_representation(
    body: ToggleRepresentationBody,
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> RepresentationRead:
    representation = await representation_registry.toggle_active(
        db, body.representation_id, body.active, admin
    )
    return RepresentationRead.model_validate(representation)


@router.patch("/admin/representations/{representation_id}", response_model=RepresentationRead)
async def update_overrides(
    representation_id: uuid.UUID,
    body: RepresentationOverridesBody,
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> RepresentationRead:
    representation = await representation_registry.set_overrides(
        db, representation_id, admin, commission=body.commission, target=body.target
    )
    return RepresentationRead.model_validate(representation)
