"""Pydantic schemas for company administration."""

from __future__ import annotations

import re
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class CompanyCreate(BaseModel):
    legal_name: str = Field(min_length=1, max_length=200)
    trade_name: str | None = Field(default=None, max_length=200)
    tax_id: str = Field(min_length=1, max_length=32)
    email: str | None = None
    phone: str | None = None
    address: str | None = Field(default=None, max_length=500)
    banking_info: dict[str, Any] = Field(default_factory=dict)
    brand_color: str | None = None

    @field_validator("tax_id")
    @classmethod
    def normalize_tax_id(cls, v: str) -> str:
        """Keep digits and letters only, so '12.345.678/0001-90' and '12345678000190' collide."""
        return re.sub(r"[^0-9A-Za-z]", "", v).upper()

    @field_validator("brand_color")
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        if v is not None and not _HEX_COLOR.match(v):
            msg = "brand_color must look like #RRGGBB"
            raise ValueError(msg)
        return v


class CompanyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    legal_name: str
    trade_name: str | None = None
    tax_id: str
    brand_color: str | None = None
    active: bool
