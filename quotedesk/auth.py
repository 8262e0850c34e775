"""Role guards on the authenticated Principal.

Company scope (which companies a seller may act for) lives in
`quotedesk.representation.policy`; these checks only look at the principal.
"""

from __future__ import annotations

import uuid

from quotedesk.errors import ForbiddenError
from quotedesk.schemas.principal import Principal


def require_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise ForbiddenError("Administrator role required")


def require_seller_profile(principal: Principal) -> uuid.UUID:
    """Seller-scoped actions need a seller profile, even for admins."""
    if not principal.has_seller_profile:
        raise ForbiddenError("A seller profile is required for this action")
    return principal.seller_id  # type: ignore[return-value]
