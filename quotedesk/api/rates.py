"""Exchange-rate endpoints: conversion query, forced refresh, admin override."""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.api.deps import get_admin, get_principal, get_rate_resolver
from quotedesk.currency import RateResolver
from quotedesk.currency.config_store import rate_config_store
from quotedesk.db.engine import get_session
from quotedesk.events import emit
from quotedesk.schemas.currency import ConversionResult, ExchangeRateConfig, ExchangeRateConfigUpdate
from quotedesk.schemas.events import EventType, SystemEvent
from quotedesk.schemas.principal import Principal

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rates"])


@router.get("/rate", response_model=ConversionResult)
async def convert_amount(
    amount: float = Query(1.0),
    from_currency: str = Query("BRL", alias="from"),
    to_currency: str = Query("USD", alias="to"),
    custom_rate: float | None = Query(None, alias="customRate"),
    db: AsyncSession = Depends(get_session),
    resolver: RateResolver = Depends(get_rate_resolver),
    principal: Principal = Depends(get_principal),
) -> ConversionResult:
    """Convert `amount` (default 1 BRL to USD) at the current rate, or at `customRate` when given."""
    return await resolver.convert(db, amount, from_currency, to_currency, custom_rate=custom_rate)


@router.post("/rate")
async def refresh_rate(
    resolver: RateResolver = Depends(get_rate_resolver),
    principal: Principal = Depends(get_principal),
) -> dict[str, Any]:
    """Drop the cached rate and fetch it again."""
    resolved = await resolver.refresh()
    return {
        "message": "Exchange rate refreshed",
        "rate": resolved.rate,
        "source": resolved.source.value,
        "timestamp": resolved.resolved_at.isoformat(),
    }


# ── Admin override ───────────────────────────────────────────────────


@router.get("/admin/rate-config")
async def get_rate_config(
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> dict[str, Any]:
    config = await rate_config_store.load(db)
    return config.model_dump(by_alias=True, mode="json")


@router.put("/admin/rate-config")
async def update_rate_config(
    body: ExchangeRateConfigUpdate,
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> dict[str, Any]:
    config: ExchangeRateConfig = await rate_config_store.save(db, body.to_config())
    await emit(SystemEvent(
        event_type=EventType.RATE_CONFIG_UPDATED,
        actor_id=admin.id,
        actor_role=admin.role.value,
        data={"fixed_rate": config.fixed_rate, "use_fixed_rate": config.use_fixed_rate},
        source_module="api.rates",
    ))
    return config.model_dump(by_alias=True, mode="json")


@router.delete("/admin/rate-config")
async def clear_rate_config(
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> dict[str, Any]:
    await rate_config_store.clear(db)
    await emit(SystemEvent(
        event_type=EventType.RATE_CONFIG_UPDATED,
        actor_id=admin.id,
        actor_role=admin.role.value,
        data={"cleared": True},
        source_module="api.rates",
    ))
    return {
        "message": "Exchange rate override removed",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
