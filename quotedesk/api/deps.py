"""Shared FastAPI dependencies.

Identity is resolved upstream. The gateway forwards the authenticated user as
headers and this module only turns them into a `Principal`.
"""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import uuid
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status

from quotedesk.auth import require_admin
from quotedesk.currency import RateResolver, build_rate_resolver
from quotedesk.events import emit
from quotedesk.models.enums import Role
from quotedesk.schemas.events import EventType, SystemEvent
from quotedesk.schemas.principal import Principal


def _parse_uuid(value: str | None, header: str) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Malformed {header} header",
        ) from None


async def get_principal(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
    x_seller_id: str | None = Header(None),
    x_client_id: str | None = Header(None),
) -> Principal:
    """Build the caller's Principal, or 401 when the gateway sent none."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        role = Role(x_user_role.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown role",
        ) from None

    return Principal(
        id=x_user_id,
        role=role,
        seller_id=_parse_uuid(x_seller_id, "X-Seller-Id"),
        client_id=_parse_uuid(x_client_id, "X-Client-Id"),
    )


async def get_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Principal that must be an administrator. Each access is audited."""
    require_admin(principal)
    await emit(SystemEvent(
        event_type=EventType.ADMIN_ACCESS,
        actor_id=principal.id,
        actor_role=principal.role.value,
        source_module="api.deps",
    ))
    return principal


@lru_cache(maxsize=1)
def get_rate_resolver() -> RateResolver:
    """Process-wide resolver; its cache lives as long as the app."""
    return build_rate_resolver()
