"""RateResolver — the USD/local rate to use right now.

Priority:
1. Admin fixed rate (config row with usarCotacaoCustomizada=true) → CUSTOM
2. Cached primary rate younger than the TTL → CACHE
3. Primary provider → PROVIDER_PRIMARY (cached)
4. Secondary provider → PROVIDER_FALLBACK (not cached, primary is retried next time)
5. Hard-coded last-known-good rate → STATIC_DEFAULT

`resolve()` never raises: callers always get a positive rate.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.config import settings
from quotedesk.currency.cache import RateCache
from quotedesk.currency.config_store import RateConfigStore, rate_config_store
from quotedesk.currency.conversion import conversion_factor, convert, round_money, round_rate
from quotedesk.errors import RateProviderError, ValidationError
from quotedesk.events import emit
from quotedesk.models.enums import RateSource
from quotedesk.schemas.currency import ConversionResult, ExchangeRateConfig, ResolvedRate
from quotedesk.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)


class RateProvider(Protocol):
    name: str

    async def fetch(self, currency: str) -> float: ...


class RateResolver:
    """Combines the admin override, a TTL cache, and two providers."""

    def __init__(
        self,
        cache: RateCache,
        primary: RateProvider,
        fallback: RateProvider,
        config_store: RateConfigStore = rate_config_store,
        static_default: float | None = None,
        base_currency: str | None = None,
        local_currency: str | None = None,
    ) -> None:
        self._cache = cache
        self._primary = primary
        self._fallback = fallback
        self._config_store = config_store
        self._static_default = static_default if static_default is not None else settings.rates.static_default_rate
        self.base_currency = (base_currency or settings.rates.base_currency).upper()
        self.local_currency = (local_currency or settings.rates.local_currency).upper()
        self._pair = RateCache.key(self.base_currency, self.local_currency)

    async def resolve(self, db: AsyncSession) -> ResolvedRate:
        """Return the rate to price with now. Never raises."""
        config = await self._load_config(db)
        if config.is_active:
            return ResolvedRate(rate=config.fixed_rate, source=RateSource.CUSTOM)
        return await self.resolve_market()

    async def resolve_market(self) -> ResolvedRate:
        """Steps 2–5: ignore the admin override."""
        cached = self._cache.get(self._pair)
        if cached is not None:
            return ResolvedRate(rate=cached, source=RateSource.CACHE)

        try:
            rate = await self._primary.fetch(self.local_currency)
        except RateProviderError as exc:
            await self._report_failure(exc.provider, exc.reason)
        except Exception:
            logger.exception("Unexpected error from primary rate provider")
            await self._report_failure(self._primary.name, "unexpected error")
        else:
            self._cache.set(self._pair, rate)
            return ResolvedRate(rate=rate, source=RateSource.PROVIDER_PRIMARY)

        try:
            rate = await self._fallback.fetch(self.local_currency)
        except RateProviderError as exc:
            await self._report_failure(exc.provider, exc.reason)
        except Exception:
            logger.exception("Unexpected error from fallback rate provider")
            await self._report_failure(self._fallback.name, "unexpected error")
        else:
            return ResolvedRate(rate=rate, source=RateSource.PROVIDER_FALLBACK)

        logger.error(
            "All rate providers failed for %s; using static default %.4f",
            self._pair,
            self._static_default,
        )
        return ResolvedRate(rate=self._static_default, source=RateSource.STATIC_DEFAULT)

    async def refresh(self) -> ResolvedRate:
        """Drop the cached pair and fetch a market rate again."""
        self._cache.invalidate(self._pair)
        resolved = await self.resolve_market()
        logger.info("Rate refreshed: %.4f (%s)", resolved.rate, resolved.source.value)
        await emit(SystemEvent(
            event_type=EventType.RATE_RESOLVED,
            data={"pair": self._pair, "rate": resolved.rate, "source": resolved.source.value},
            source_module="currency.resolver",
        ))
        return resolved

    async def convert(
        self,
        db: AsyncSession,
        amount: Decimal | float,
        from_currency: str,
        to_currency: str,
        custom_rate: float | None = None,
    ) -> ConversionResult:
        """Convert `amount`, using `custom_rate` instead of the resolver when given."""
        amount = Decimal(str(amount))
        if not amount.is_finite() or amount <= 0:
            raise ValidationError("Invalid amount", details={"amount": "must be a positive number"})
        if custom_rate is not None and (not math.isfinite(custom_rate) or custom_rate <= 0):
            raise ValidationError("Invalid custom rate", details={"customRate": "must be a positive number"})

        supported = {self.base_currency, self.local_currency}
        src, dst = from_currency.upper(), to_currency.upper()
        if src not in supported or dst not in supported:
            raise ValidationError(
                "Unsupported currency",
                details={"supported": sorted(supported), "from": src, "to": dst},
            )

        if custom_rate is not None:
            resolved = ResolvedRate(rate=custom_rate, source=RateSource.CUSTOM)
        else:
            resolved = await self.resolve(db)

        converted = convert(amount, src, dst, resolved.rate, base=self.base_currency)
        factor = conversion_factor(src, dst, resolved.rate, base=self.base_currency)

        return ConversionResult(
            from_currency=src,
            to_currency=dst,
            originalAmount=amount,
            convertedAmount=round_money(converted),
            exchangeRate=round_rate(factor),
            usdToLocalRate=round_rate(resolved.rate),
            lastUpdated=datetime.now(timezone.utc),
            source=resolved.source,
            isCustom=custom_rate is not None,
        )

    async def _load_config(self, db: AsyncSession) -> ExchangeRateConfig:
        try:
            return await self._config_store.load(db)
        except Exception:
            # An unreadable override must not block pricing
            logger.exception("Failed to load rate config, falling back to market rates")
            return ExchangeRateConfig()

    async def _report_failure(self, provider: str, reason: str) -> None:
        logger.warning("Rate provider %s failed: %s", provider, reason)
        await emit(SystemEvent(
            event_type=EventType.RATE_PROVIDER_FAILED,
            data={"provider": provider, "reason": reason, "pair": self._pair},
            source_module="currency.resolver",
        ))
