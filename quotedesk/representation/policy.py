"""Company-scope authorization.

Every read or write that touches company-scoped data goes through
`ensure_company_scope`. Admins pass for any company; sellers pass only for
companies they actively represent; every other role is refused.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.errors import ForbiddenError
from quotedesk.models.enums import Role
from quotedesk.representation.registry import RepresentationRegistry, representation_registry
from quotedesk.schemas.principal import Principal

logger = logging.getLogger(__name__)


async def can_act_for_company(
    db: AsyncSession,
    principal: Principal,
    company_id: uuid.UUID,
    registry: RepresentationRegistry = representation_registry,
) -> bool:
    if principal.role == Role.ADMIN:
        return True
    if principal.role == Role.SELLER and principal.seller_id is not None:
        return await registry.is_representing(db, principal.seller_id, company_id)
    return False


async def ensure_company_scope(
    db: AsyncSession,
    principal: Principal,
    company_id: uuid.UUID,
    registry: RepresentationRegistry = representation_registry,
) -> None:
    """Raise ForbiddenError unless `principal` may act on `company_id`."""
    if not await can_act_for_company(db, principal, company_id, registry):
        logger.info(
            "Company scope denied: principal=%s role=%s company=%s",
            principal.id,
            principal.role.value,
            company_id,
        )
        raise ForbiddenError(
            "Not authorized for this company",
            details={"company_id": str(company_id)},
        )

