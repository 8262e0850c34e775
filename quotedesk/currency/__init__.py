"""Exchange-rate resolution and currency conversion."""

from __future__ import annotations

from quotedesk.config import settings
from quotedesk.currency.cache import RateCache
from quotedesk.currency.providers import build_fallback_provider, build_primary_provider
from quotedesk.currency.resolver import RateResolver

__all__ = ["RateCache", "RateResolver", "build_rate_resolver"]


def build_rate_resolver() -> RateResolver:
    """Wire a resolver with a fresh cache and the configured providers."""
    return RateResolver(
        cache=RateCache(ttl_seconds=settings.rates.rate_cache_ttl),
        primary=build_primary_provider(),
        fallback=build_fallback_provider(),
    )
