"""
Unit tests for the app-owned TTL cache.
"""

import pytest

from viralforge.infrastructure.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(ttl_seconds=60, clock=clock)


class TestTTLCache:

    def test_get_missing(self, cache):
        assert cache.get("creator") is None

    def test_expiry(self, cache, clock):
        cache.set("creator", ["fitness"])
        clock.advance(59)
        assert cache.get("creator") == ["fitness"]
        clock.advance(1)
        assert cache.get("creator") is None
        assert len(cache) == 0

    def test_invalidate_one(self, cache):
        cache.set("creator", [1])
        cache.set("business", [2])
        cache.invalidate("creator")
        assert cache.get("creator") is None
        assert cache.get("business") == [2]

    def test_invalidate_all(self, cache):
        cache.set("creator", [1])
        cache.set("all", [1, 2])
        cache.invalidate()
        assert len(cache) == 0


class TestGetOrLoad:

    async def test_loads_once_until_expired(self, cache, clock):
        calls = []

        async def loader():
            calls.append(1)
            return [f"load-{len(calls)}"]

        assert await cache.get_or_load("all", loader) == ["load-1"]
        assert await cache.get_or_load("all", loader) == ["load-1"]
        assert len(calls) == 1

        clock.advance(61)
        assert await cache.get_or_load("all", loader) == ["load-2"]
        assert len(calls) == 2

    async def test_reload_after_invalidate(self, cache):
        values = iter([["old"], ["new"]])

        async def loader():
            return next(values)

        assert await cache.get_or_load("all", loader) == ["old"]
        cache.invalidate()
        assert await cache.get_or_load("all", loader) == ["new"]

    async def test_loader_error_is_not_cached(self, cache):
        async def failing():
            raise RuntimeError("database down")

        async def working():
            return ["ok"]

        with pytest.raises(RuntimeError):
            await cache.get_or_load("all", failing)
        assert await cache.get_or_load("all", working) == ["ok"]
