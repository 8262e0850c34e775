"""Pydantic schemas for exchange-rate configuration, resolution, and conversion.

Wire field names (`cotacaoDolar`, `usarCotacaoCustomizada`, `ultimaAtualizacao`)
are kept as aliases because the persisted config row and the admin UI use them.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from quotedesk.models.enums import RateSource

# Decimal internally, plain JSON number on the wire
JsonNumber = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ExchangeRateConfig(BaseModel):
    """Admin override for the USD rate. Authoritative when `use_fixed_rate` is set."""

    model_config = ConfigDict(populate_by_name=True)

    fixed_rate: float | None = Field(default=None, alias="cotacaoDolar")
    use_fixed_rate: bool = Field(default=False, alias="usarCotacaoCustomizada")
    last_updated: datetime | None = Field(default=None, alias="ultimaAtualizacao")

    @field_validator("fixed_rate")
    @classmethod
    def positive_rate(cls, v: float | None) -> float | None:
        if v is not None and (not math.isfinite(v) or v <= 0):
            msg = "cotacaoDolar must be a positive finite number"
            raise ValueError(msg)
        return v

    @property
    def is_active(self) -> bool:
        """True when the fixed rate should short-circuit the providers."""
        return self.use_fixed_rate and self.fixed_rate is not None


class ExchangeRateConfigUpdate(BaseModel):
    """PUT body for the admin rate configuration."""

    cotacaoDolar: float = Field(gt=0, allow_inf_nan=False)
    usarCotacaoCustomizada: bool
    ultimaAtualizacao: datetime | None = None

    def to_config(self) -> ExchangeRateConfig:
        return ExchangeRateConfig(
            fixed_rate=self.cotacaoDolar,
            use_fixed_rate=self.usarCotacaoCustomizada,
            last_updated=self.ultimaAtualizacao or datetime.now(timezone.utc),
        )


class ResolvedRate(BaseModel):
    """Units of local currency per 1 USD, and where the number came from."""

    rate: float = Field(gt=0, allow_inf_nan=False)
    source: RateSource
    resolved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class ConversionResult(BaseModel):
    """Response of the rate query endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field(alias="from")
    to_currency: str = Field(alias="to")
    originalAmount: JsonNumber
    convertedAmount: JsonNumber
    exchangeRate: JsonNumber
    usdToLocalRate: JsonNumber
    lastUpdated: datetime
    source: RateSource
    isCustom: bool
