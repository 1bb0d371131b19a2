"""
API Services
Business logic services for API endpoints.
"""

from .cache_service import CacheService, get_cache_service
from .redis_cache import RedisCache, RedisCacheError

__all__ = [
    "CacheService",
    "get_cache_service",
    "RedisCache",
    "RedisCacheError",
]
