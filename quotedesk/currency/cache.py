"""TTL cache for exchange rates, keyed by currency pair.

The clock is injected so tests can move time without sleeping. Concurrent
writers simply overwrite each other; a rate stale by a few seconds is fine.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntry:
    rate: float
    stored_at: float


class RateCache:
    """Process-local rate cache. One instance is shared by reference."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @staticmethod
    def key(base: str, quote: str) -> str:
        return f"{base.upper()}/{quote.upper()}"

    def get(self, pair: str) -> float | None:
        """Return the cached rate if it is younger than the TTL."""
        entry = self._entries.get(pair)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self._ttl:
            return None
        return entry.rate

    def set(self, pair: str, rate: float) -> None:
        self._entries[pair] = CacheEntry(rate=rate, stored_at=self._clock())

    def invalidate(self, pair: str | None = None) -> None:
        """Drop one pair, or everything when `pair` is None."""
        if pair is None:
            self._entries.clear()
        else:
            self._entries.pop(pair, None)
