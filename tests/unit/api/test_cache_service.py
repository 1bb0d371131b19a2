"""
Tests for the vendor search cache.
"""

import fnmatch

from haystackfi.api.services.cache_service import CacheConfig, CacheService, make_cache_key


class InMemoryRedisCache:
    """Dict-backed object with the RedisCache interface."""

    def __init__(self, healthy=True):
        self.data = {}
        self.ttls = {}
        self.healthy = healthy

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ttl=None):
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def delete_pattern(self, pattern):
        keys = [k for k in self.data if fnmatch.fnmatch(k, pattern)]
        for key in keys:
            del self.data[key]
        return len(keys)

    def ping(self):
        return self.healthy


def test_cache_key_is_order_independent():
    first = make_cache_key(CacheConfig.SEARCH_PREFIX, {"q": "core", "page": 1})
    second = make_cache_key(CacheConfig.SEARCH_PREFIX, {"page": 1, "q": "core"})

    assert first == second
    assert first.startswith("vendor:search:")
    assert first != make_cache_key(CacheConfig.SEARCH_PREFIX, {"q": "core", "page": 2})


def test_search_results_round_trip_and_stats(api_env):
    backend = InMemoryRedisCache()
    service = CacheService(cache=backend, enabled=True)
    params = {"q": "core", "page": 1}

    assert service.get_search_results(params) is None
    assert service.set_search_results(params, {"vendors": [], "total": 0})
    assert service.get_search_results(params) == {"vendors": [], "total": 0}

    stats = service.get_statistics()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["sets"] == 1
    assert stats["hit_rate_percent"] == 50.0
    assert list(backend.ttls.values()) == [120]


def test_invalidate_drops_only_search_keys(api_env):
    backend = InMemoryRedisCache()
    backend.data["other:key"] = 1
    service = CacheService(cache=backend, enabled=True)
    service.set_search_results({"page": 1}, {"total": 1})
    service.set_search_results({"page": 2}, {"total": 1})

    assert service.invalidate_vendor_caches() == 2
    assert list(backend.data) == ["other:key"]
    assert service.get_statistics()["deletes"] == 2


def test_disabled_cache_never_touches_backend(api_env):
    backend = InMemoryRedisCache(healthy=False)
    service = CacheService(cache=backend, enabled=False)

    assert service.set_search_results({"page": 1}, {"total": 1}) is False
    assert service.get_search_results({"page": 1}) is None
    assert service.invalidate_vendor_caches() == 0
    assert service.is_healthy() is True
    assert backend.data == {}
    assert service.get_statistics()["misses"] == 0


def test_health_reflects_backend(api_env):
    assert CacheService(cache=InMemoryRedisCache(healthy=False), enabled=True).is_healthy() is False
