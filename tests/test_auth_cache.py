"""InMemoryAuthCache — TTL expiry with an injected clock."""

import pytest

from holoforms.auth_cache import InMemoryAuthCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return InMemoryAuthCache(ttl_seconds=60, clock=clock)


class TestAuthCache:
    def test_miss(self, cache):
        assert cache.get("form-owner:1") is None

    def test_put_then_get(self, cache):
        entry = cache.put("form-owner:1", "user-a")
        assert entry.expires_at == 1060.0
        assert cache.get("form-owner:1").principal == "user-a"

    def test_expires_at_ttl(self, cache, clock):
        cache.put("k", "user-a")
        clock.now = 1059.9
        assert cache.get("k") is not None
        clock.now = 1060.0
        assert cache.get("k") is None, "Entry must be stale exactly at expires_at"
        assert len(cache) == 0, "Stale entries are evicted on read"

    def test_put_refreshes(self, cache, clock):
        cache.put("k", "user-a")
        clock.now = 1050.0
        cache.put("k", "user-b")
        clock.now = 1100.0
        assert cache.get("k").principal == "user-b"

    def test_invalidate(self, cache):
        cache.put("k", "user-a")
        cache.invalidate("k")
        cache.invalidate("never-there")
        assert cache.get("k") is None

    def test_default_ttl_is_a_day(self):
        clock = FakeClock(0.0)
        entry = InMemoryAuthCache(clock=clock).put("k", "u")
        assert entry.expires_at == 24 * 60 * 60
