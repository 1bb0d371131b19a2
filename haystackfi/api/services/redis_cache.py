"""
Redis Cache Client
Thread-safe Redis client with connection pooling and JSON values.
"""

import json
import logging
import threading
from typing import Any, Optional

import redis
from redis.connection import ConnectionPool

from ..config import APISettings, get_settings

logger = logging.getLogger(__name__)


class RedisCacheError(Exception):
    """Exception raised for Redis cache errors."""

    pass


class RedisCache:
    """
    Redis cache client with connection pooling.

    Values are stored as JSON. Every operation degrades to a miss/no-op when
    Redis is unreachable so the API keeps serving from the database.
    """

    def __init__(self, settings: Optional[APISettings] = None):
        self.settings = settings or get_settings()

        self.pool = ConnectionPool(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            decode_responses=True,
            max_connections=20,
            socket_timeout=2,
            socket_connect_timeout=2,
        )

        self.client: Optional[redis.Redis] = None
        self._lock = threading.Lock()

        logger.info(
            f"Redis cache initialized: {self.settings.redis_host}:"
            f"{self.settings.redis_port} (db={self.settings.redis_db})"
        )

    def _get_client(self) -> redis.Redis:
        """
        Get Redis client (lazy initialization).

        Raises:
            RedisCacheError: If connection fails
        """
        if self.client is None:
            with self._lock:
                if self.client is None:
                    client = redis.Redis(connection_pool=self.pool)
                    try:
                        client.ping()
                    except redis.RedisError as e:
                        raise RedisCacheError(f"Failed to connect to Redis: {e}") from e
                    self.client = client
                    logger.info("Redis connection established")

        return self.client

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found
        """
        try:
            data = self._get_client().get(key)
        except (redis.RedisError, RedisCacheError) as e:
            logger.warning(f"Redis GET error for key '{key}': {e}")
            return None

        if data is None:
            return None

        try:
            return json.loads(data)
        except ValueError as e:
            logger.error(f"Error deserializing cached data for key '{key}': {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time-to-live in seconds (None = no expiration)

        Returns:
            True if successful, False otherwise
        """
        try:
            data = json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            logger.error(f"Error serializing data for key '{key}': {e}")
            return False

        try:
            client = self._get_client()
            if ttl is not None:
                client.setex(key, ttl, data)
            else:
                client.set(key, data)
            return True
        except (redis.RedisError, RedisCacheError) as e:
            logger.warning(f"Redis SET error for key '{key}': {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a pattern.

        Args:
            pattern: Key pattern (e.g., "vendor:search:*")

        Returns:
            Number of keys deleted
        """
        try:
            client = self._get_client()
            keys = list(client.scan_iter(match=pattern, count=500))
            if not keys:
                return 0
            return client.delete(*keys)
        except (redis.RedisError, RedisCacheError) as e:
            logger.warning(f"Redis DELETE PATTERN error for pattern '{pattern}': {e}")
            return 0

    def ping(self) -> bool:
        """Test Redis connection."""
        try:
            return bool(self._get_client().ping())
        except (redis.RedisError, RedisCacheError) as e:
            logger.warning(f"Redis PING error: {e}")
            return False

