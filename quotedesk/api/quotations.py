"""Quotation endpoints."""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.api.deps import get_principal, get_rate_resolver
from quotedesk.currency import RateResolver
from quotedesk.db.engine import get_session
from quotedesk.quotation.service import quotation_service
from quotedesk.schemas.principal import Principal
from quotedesk.schemas.quotation import QuotationCreate, QuotationRead, QuotationStatusUpdate

router = APIRouter(prefix="/quotations", tags=["quotations"])


@router.post("", response_model=QuotationRead, status_code=201)
async def create_quotation(
    body: QuotationCreate,
    db: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_principal),
    resolver: RateResolver = Depends(get_rate_resolver),
) -> QuotationRead:
    quotation = await quotation_service.create_quotation(db, principal, body, resolver)
    return QuotationRead.model_validate(quotation)


@router.get("", response_model=list[QuotationRead])
async def list_quotations(
    db: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_principal),
) -> list[QuotationRead]:
    quotations = await quotation_service.list_quotations(db, principal)
    return [QuotationRead.model_validate(q) for q in quotations]


@router.get("/{quotation_id}", response_model=QuotationRead)
async def get_quotation(
    quotation_id: uuid.UUID,
    convert_to: str | None = Query(None, min_length=3, max_length=3),
    db: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_principal),
    resolver: RateResolver = Depends(get_rate_resolver),
) -> QuotationRead:
    """One quotation; `convert_to` attaches totals in that currency at today's rate."""
    return await quotation_service.get_quotation(
        db, principal, quotation_id, convert_to=convert_to, resolver=resolver
    )


@router.patch("/{quotation_id}/status", response_model=QuotationRead)
async def update_status(
    quotation_id: uuid.UUID,
    body: QuotationStatusUpdate,
    db: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_principal),
) -> QuotationRead:
    quotation = await quotation_service.update_status(db, principal, quotation_id, body.status)
    return QuotationRead.model_validate(quotation)
