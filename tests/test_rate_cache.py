"""Tests for RateCache — TTL expiry with an injected clock."""

from __future__ import annotations

from quotedesk.currency.cache import RateCache


class _FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestRateCache:
    def test_key_is_upper_pair(self):
        assert RateCache.key("usd", "brl") == "USD/BRL"

    def test_miss_on_empty(self):
        cache = RateCache(ttl_seconds=300, clock=_FakeClock())
        assert cache.get("USD/BRL") is None

    def test_hit_within_ttl(self):
        clock = _FakeClock()
        cache = RateCache(ttl_seconds=300, clock=clock)
        cache.set("USD/BRL", 5.42)
        clock.now += 299
        assert cache.get("USD/BRL") == 5.42

    def test_expires_at_ttl(self):
        clock = _FakeClock()
        cache = RateCache(ttl_seconds=300, clock=clock)
        cache.set("USD/BRL", 5.42)
        clock.now += 300
        assert cache.get("USD/BRL") is None

    def test_set_overwrites_and_restarts_ttl(self):
        clock = _FakeClock()
        cache = RateCache(ttl_seconds=300, clock=clock)
        cache.set("USD/BRL", 5.42)
        clock.now += 200
        cache.set("USD/BRL", 5.50)
        clock.now += 200
        assert cache.get("USD/BRL") == 5.50

    def test_invalidate_one_pair(self):
        cache = RateCache(ttl_seconds=300, clock=_FakeClock())
        cache.set("USD/BRL", 5.42)
        cache.set("USD/EUR", 0.92)
        cache.invalidate("USD/BRL")
        assert cache.get("USD/BRL") is None
        assert cache.get("USD/EUR") == 0.92

    def test_invalidate_all(self):
        cache = RateCache(ttl_seconds=300, clock=_FakeClock())
        cache.set("USD/BRL", 5.42)
        cache.set("USD/EUR", 0.92)
        cache.invalidate()
        assert cache.get("USD/BRL") is None
        assert cache.get("USD/EUR") is None

    def test_invalidate_missing_pair_is_noop(self):
        cache = RateCache(ttl_seconds=300, clock=_FakeClock())
        cache.invalidate("USD/BRL")
        assert cache.get("USD/BRL") is None

    def test_instances_do_not_share_state(self):
        clock = _FakeClock()
        first = RateCache(ttl_seconds=300, clock=clock)
        second = RateCache(ttl_seconds=300, clock=clock)
        first.set("USD/BRL", 5.42)
        assert second.get("USD/BRL") is None
