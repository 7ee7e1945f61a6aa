from django.core.cache import cache as django_cache

from core.cache import ReadThroughCache, make_cache_key


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_make_cache_key_is_canonical():
    first = make_cache_key("admin:stats", {"range": "week", "currency": "USD"})
    second = make_cache_key("admin:stats", {"currency": "USD", "range": "week"})

    assert first == second
    assert first.startswith("admin:stats:")
    assert first != make_cache_key("admin:stats", {"range": "month"})


def test_get_or_compute_serves_cached_value_until_expiry():
    clock = FakeClock()
    cache = ReadThroughCache(backend=django_cache, ttl=120, clock=clock)
    calls = []

    def compute():
        calls.append(clock())
        return {"total": len(calls)}

    assert cache.get_or_compute("stats", compute) == {"total": 1}
    clock.advance(119)
    assert cache.get_or_compute("stats", compute) == {"total": 1}
    clock.advance(1)
    assert cache.get_or_compute("stats", compute) == {"total": 2}
    assert len(calls) == 2


def test_get_returns_default_for_missing_and_expired_keys():
    clock = FakeClock()
    cache = ReadThroughCache(backend=django_cache, ttl=10, clock=clock, prefix="t:")

    assert cache.get("missing", "fallback") == "fallback"
    cache.set("k", "v")
    assert cache.get("k") == "v"
    clock.advance(10)
    assert cache.get("k") is None


def test_delete_and_per_call_ttl():
    clock = FakeClock()
    cache = ReadThroughCache(backend=django_cache, ttl=10, clock=clock)

    cache.set("short", 1, ttl=1)
    cache.set("gone", 2)
    cache.delete("gone")
    clock.advance(2)

    assert cache.get("short") is None
    assert cache.get("gone") is None
