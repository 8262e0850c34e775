"""Persistence of the admin exchange-rate override in the key/value table.

The row keyed ``cotacao_dolar_config`` holds JSON:
``{"cotacaoDolar": 5.0, "usarCotacaoCustomizada": true, "ultimaAtualizacao": "..."}``.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.models.config_entry import ConfigEntry
from quotedesk.schemas.currency import ExchangeRateConfig

logger = logging.getLogger(__name__)

CONFIG_KEY = "cotacao_dolar_config"
_DESCRIPTION = "USD exchange rate override (USD/local)"


class RateConfigStore:
    """Typed access to the rate override. AsyncSession passed per call."""

    async def load(self, db: AsyncSession) -> ExchangeRateConfig:
        """Return the stored config, or the default (no override) when absent or unreadable."""
        result = await db.execute(select(ConfigEntry).where(ConfigEntry.key == CONFIG_KEY))
        entry = result.scalar_one_or_none()
        if entry is None:
            return ExchangeRateConfig()

        try:
            return ExchangeRateConfig.model_validate(json.loads(entry.value))
        except (ValueError, PydanticValidationError):
            logger.warning("Ignoring malformed %s row: %r", CONFIG_KEY, entry.value[:200])
            return ExchangeRateConfig()

    async def save(self, db: AsyncSession, config: ExchangeRateConfig) -> ExchangeRateConfig:
        """Upsert the config row."""
        value = config.model_dump_json(by_alias=True)

        result = await db.execute(select(ConfigEntry).where(ConfigEntry.key == CONFIG_KEY))
        entry = result.scalar_one_or_none()
        if entry is None:
            db.add(ConfigEntry(key=CONFIG_KEY, value=value, value_type="JSON", description=_DESCRIPTION))
        else:
            entry.value = value
        await db.flush()

        logger.info(
            "Rate config saved: fixed_rate=%s use_fixed_rate=%s",
            config.fixed_rate,
            config.use_fixed_rate,
        )
        return config

    async def clear(self, db: AsyncSession) -> None:
        """Remove the override so live rates apply again."""
        await db.execute(delete(ConfigEntry).where(ConfigEntry.key == CONFIG_KEY))
        await db.flush()
        logger.info("Rate config cleared")


# Module-level singleton
rate_config_store = RateConfigStore()
