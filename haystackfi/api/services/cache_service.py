"""
Cache Service
Response caching for vendor search, with statistics and invalidation.
"""

import hashlib
import json
import logging
import time
from collections import defaultdict
from typing import Any, Dict, Optional

from ..config import get_settings
from .redis_cache import RedisCache

logger = logging.getLogger(__name__)


class CacheConfig:
    """Cache key namespaces."""

    SEARCH_PREFIX = "vendor:search:"


class CacheStatistics:
    """Track cache performance metrics."""

    def __init__(self):
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0
        self.errors = 0

        # Per-key-type stats
        self.hits_by_type: Dict[str, int] = defaultdict(int)
        self.misses_by_type: Dict[str, int] = defaultdict(int)

        self.total_get_time_ms = 0.0

        self.start_time = time.time()

    def record_hit(self, key_type: str):
        self.hits += 1
        self.hits_by_type[key_type] += 1

    def record_miss(self, key_type: str):
        self.misses += 1
        self.misses_by_type[key_type] += 1

    def record_set(self):
        self.sets += 1

    def record_delete(self, count: int = 1):
        self.deletes += count

    def record_error(self):
        self.errors += 1

    def get_hit_rate(self) -> float:
        """Calculate overall hit rate."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def get_stats(self) -> Dict[str, Any]:
        """Get all statistics."""
        lookups = self.hits + self.misses
        return {
            "uptime_seconds": time.time() - self.start_time,
            "total_operations": lookups + self.sets + self.deletes,
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "errors": self.errors,
            "hit_rate_percent": self.get_hit_rate(),
            "hits_by_type": dict(self.hits_by_type),
            "misses_by_type": dict(self.misses_by_type),
            "avg_get_time_ms": self.total_get_time_ms / lookups if lookups > 0 else 0,
        }


def make_cache_key(prefix: str, params: Dict[str, Any]) -> str:
    """Build a stable cache key from request parameters."""
    canonical = json.dumps(params, sort_keys=True, default=str)
    digest = hashlib.md5(canonical.encode("utf-8")).hexdigest()
    return f"{prefix}{digest}"


class CacheService:
    """
    Caching for public vendor search responses.

    When caching is disabled (API_ENABLE_CACHE=false) every lookup is a miss
    and no Redis connection is attempted.
    """

    def __init__(self, cache: Optional[RedisCache] = None, enabled: Optional[bool] = None):
        settings = get_settings()
        self.enabled = settings.enable_cache if enabled is None else enabled
        self.cache = cache
        if self.enabled and self.cache is None:
            self.cache = RedisCache(settings)
        self.ttl_search = settings.cache_ttl_search
        self.config = CacheConfig()
        self.stats = CacheStatistics()

        logger.info(f"Cache service initialized (enabled={self.enabled})")

    def _get(self, key: str, key_type: str) -> Optional[Any]:
        if not self.enabled:
            return None

        start_time = time.time()
        result = self.cache.get(key)
        elapsed_ms = (time.time() - start_time) * 1000
        self.stats.total_get_time_ms += elapsed_ms

        if result is not None:
            self.stats.record_hit(key_type)
            logger.debug(f"{key_type} cache HIT: {key} ({elapsed_ms:.2f}ms)")
        else:
            self.stats.record_miss(key_type)
            logger.debug(f"{key_type} cache MISS: {key}")
        return result

    def _set(self, key: str, value: Any, ttl: int) -> bool:
        if not self.enabled:
            return False

        if self.cache.set(key, value, ttl=ttl):
            self.stats.record_set()
            return True

        self.stats.record_error()
        return False

    def get_search_results(self, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Get a cached vendor search page."""
        return self._get(make_cache_key(self.config.SEARCH_PREFIX, params), "search")

    def set_search_results(self, params: Dict[str, Any], results: Dict[str, Any]) -> bool:
        """Cache a vendor search page (already serialized)."""
        return self._set(make_cache_key(self.config.SEARCH_PREFIX, params), results, self.ttl_search)

    def invalidate_vendor_caches(self) -> int:
        """
        Drop cached search pages after a vendor write.

        Returns:
            Number of keys deleted
        """
        if not self.enabled:
            return 0

        deleted = self.cache.delete_pattern(f"{self.config.SEARCH_PREFIX}*")
        self.stats.record_delete(deleted)
        logger.info(f"Invalidated {deleted} cached vendor search pages")
        return deleted

    def is_healthy(self) -> bool:
        if not self.enabled:
            return True
        return self.cache.ping()

    def get_statistics(self) -> Dict[str, Any]:
        stats = self.stats.get_stats()
        stats["enabled"] = self.enabled
        return stats


# Singleton instance
_cache_service: Optional[CacheService] = None


def get_cache_service() -> CacheService:
    """Get global cache service instance."""
    global _cache_service
    if _cache_service is None:
        _cache_service = CacheService()
    return _cache_service


def reset_cache_service() -> None:
    """Reset the cache service (useful for testing)."""
    global _cache_service
    _cache_service = None
