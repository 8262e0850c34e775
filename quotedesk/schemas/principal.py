"""Principal — the authenticated caller as handed over by the identity layer."""

from __future__ import annotations

import uuid

from pydantic import BaseModel

from quotedesk.models.enums import Role


class Principal(BaseModel):
    """Identity + role + optional profile ids. Trusted as given."""

    id: str
    role: Role
    seller_id: uuid.UUID | None = None
    client_id: uuid.UUID | None = None

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def has_seller_profile(self) -> bool:
        return self.seller_id is not None
