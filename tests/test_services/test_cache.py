"""Tests for TTLCache."""

import threading

import pytest

from deal_analyzer.services.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture()
def clock():
    return FakeClock()


class TestTTLCache:
    def test_get_missing_returns_none(self, clock):
        assert TTLCache(60, clock=clock).get("nope") is None

    def test_hit_within_ttl(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.set("k", "v")
        clock.now = 59.9
        assert cache.get("k") == "v"

    def test_expired_at_ttl_boundary(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.set("k", "v")
        clock.now = 60.0
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_overwrite_resets_timestamp(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.set("k", "old")
        clock.now = 50
        cache.set("k", "new")
        clock.now = 100
        assert cache.get("k") == "new"

    def test_max_size_evicts_oldest(self, clock):
        cache = TTLCache(60, max_size=2, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        cache.set("c", 3)
        assert cache.get("b") is None
        assert cache.get("a") == 10
        assert cache.get("c") == 3

    def test_clear_and_stats(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.set("x", 1)
        cache.set("y", 2)
        assert cache.stats() == {"size": 2, "keys": ["x", "y"]}
        cache.clear()
        assert cache.stats() == {"size": 0, "keys": []}

    @pytest.mark.parametrize("ttl, max_size", [(0, 10), (-1, 10), (60, 0)])
    def test_invalid_parameters(self, ttl, max_size):
        with pytest.raises(ValueError):
            TTLCache(ttl, max_size=max_size)

    def test_concurrent_writes_are_not_lost(self):
        cache = TTLCache(60, max_size=10_000)

        def writer(offset):
            for i in range(500):
                cache.set(f"{offset}-{i}", i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(cache) == 4000


class TestGetOrCompute:
    def test_computes_once_then_hits(self, clock):
        cache = TTLCache(60, clock=clock)
        calls = []

        def compute():
            calls.append(1)
            return {"value": len(calls)}

        first = cache.get_or_compute("k", compute)
        second = cache.get_or_compute("k", compute)
        assert first is second
        assert len(calls) == 1

    def test_recomputes_after_expiry(self, clock):
        cache = TTLCache(60, clock=clock)
        first = cache.get_or_compute("k", lambda: object())
        clock.now = 60.0
        assert cache.get_or_compute("k", lambda: object()) is not first

    def test_error_is_not_cached(self, clock):
        cache = TTLCache(60, clock=clock)

        def failing():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            cache.get_or_compute("k", failing)
        assert cache.get("k") is None
        assert cache.get_or_compute("k", lambda: "ok") == "ok"

    def test_concurrent_misses_share_one_result(self):
        cache = TTLCache(60)
        entered = threading.Event()
        release = threading.Event()
        calls = []
        results = []

        def slow_compute():
            calls.append(1)
            entered.set()
            release.wait(timeout=5)
            return object()

        def worker():
            results.append(cache.get_or_compute("same-key", slow_compute))

        first = threading.Thread(target=worker)
        first.start()
        assert entered.wait(timeout=5)
        second = threading.Thread(target=worker)
        second.start()
        release.set()
        first.join()
        second.join()

        assert len(calls) == 1
        assert len(results) == 2
        assert results[0] is results[1]
