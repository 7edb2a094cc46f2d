"""Unit tests for the TTL result cache."""

from lolcatalog.core.ttl_cache import TTLCache


class TestTTLCache:
    """Test expiry, eviction and statistics."""

    def test_get_and_set(self, clock):
        cache = TTLCache(60, clock)
        cache.set("key", {"value": 1})

        assert cache.get("key") == {"value": 1}
        assert cache.get("missing") is None
        assert len(cache) == 1

    def test_entry_expires_at_ttl(self, clock):
        cache = TTLCache(60, clock)
        cache.set("key", "value")

        clock.advance(59)
        assert cache.get("key") == "value"

        clock.advance(1)
        assert cache.get("key") is None
        assert len(cache) == 0

    def test_overwrite_refreshes_timestamp(self, clock):
        cache = TTLCache(60, clock)
        cache.set("key", "old")
        clock.advance(50)
        cache.set("key", "new")
        clock.advance(50)

        assert cache.get("key") == "new"

    def test_lru_eviction(self, clock):
        cache = TTLCache(60, clock, max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3
        assert cache.get_stats()["evictions"] == 1

    def test_clear(self, clock):
        cache = TTLCache(60, clock)
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.clear() == 2
        assert len(cache) == 0

    def test_stats(self, clock):
        cache = TTLCache(60, clock, max_size=10, name="search")
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")

        stats = cache.get_stats()
        assert stats["name"] == "search"
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5
        assert stats["size"] == 1
