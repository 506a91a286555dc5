import pytest

from shuttle_pricing.geo.ttl_cache import TTLCache


@pytest.mark.unit
@pytest.mark.critical
class TestTTLCache:
    def test_get_returns_live_entry(self, clock):
        cache: TTLCache[str] = TTLCache(ttl_seconds=300, clock=clock)
        cache.set("k", "v")

        clock.advance(299)

        assert cache.get("k") == "v"

    def test_entry_expires_at_ttl(self, clock):
        cache: TTLCache[str] = TTLCache(ttl_seconds=300, clock=clock)
        cache.set("k", "v")

        clock.advance(300)

        assert cache.get("k") is None
        assert "k" not in cache
        assert len(cache) == 0

    def test_reset_on_set_restarts_ttl(self, clock):
        cache: TTLCache[str] = TTLCache(ttl_seconds=300, clock=clock)
        cache.set("k", "old")
        clock.advance(200)
        cache.set("k", "new")
        clock.advance(200)

        assert cache.get("k") == "new"

    def test_no_ttl_never_expires(self, clock):
        cache: TTLCache[int] = TTLCache(clock=clock)
        cache.set("k", 1)

        clock.advance(10**9)

        assert cache.get("k") == 1

    def test_oldest_entry_evicted_first(self, clock):
        cache: TTLCache[int] = TTLCache(maxsize=2, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert "a" not in cache
        assert cache.get("b") == 2
        assert cache.get("c") == 3
        assert cache.evictions == 1

    def test_stats(self, clock):
        cache: TTLCache[int] = TTLCache(ttl_seconds=60, clock=clock)
        cache.set("a", 1)
        cache.get("a")
        cache.get("missing")

        stats = cache.stats()

        assert stats["requests"] == 2
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == pytest.approx(0.5)
        assert stats["cache_size"] == 1

    def test_evict_and_clear(self, clock):
        cache: TTLCache[int] = TTLCache(clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.evict("a") is True
        assert cache.evict("a") is False

        cache.clear()
        assert len(cache) == 0
        assert cache.stats()["requests"] == 0

    def test_empty_cache_is_falsy_but_usable(self):
        cache: TTLCache[int] = TTLCache()
        assert not cache
        assert cache.get("a") is None

    @pytest.mark.parametrize("kwargs", [{"ttl_seconds": 0}, {"maxsize": 0}])
    def test_invalid_bounds_rejected(self, kwargs):
        with pytest.raises(ValueError):
            TTLCache(**kwargs)
