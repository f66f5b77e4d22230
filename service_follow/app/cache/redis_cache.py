"""
Redis caching layer for the Follow Service.
"""

import json
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from shared.logging import get_logger
from ..errors import CacheUnavailable


class RedisCache:
    """JSON values in Redis with per-key TTL."""

    def __init__(self, host: str = "localhost", port: int = 6379,
                 password: Optional[str] = None, db: int = 0):
        self.host = host
        self.port = port
        self.password = password
        self.db = db
        self.logger = get_logger("follow.cache.redis")
        self.redis: Optional[redis.Redis] = None

    async def start(self):
        """Start the Redis cache."""
        try:
            self.redis = redis.Redis(
                host=self.host,
                port=self.port,
                password=self.password or None,
                db=self.db,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                health_check_interval=30
            )

            await self.redis.ping()

            self.logger.info("Redis cache started", host=self.host, port=self.port)

        except (RedisError, OSError) as e:
            self.logger.error("Failed to start Redis cache", error=str(e))
            raise CacheUnavailable("Failed to start Redis cache", {"error": str(e)}) from e

    async def stop(self):
        """Stop the Redis cache."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    def _require_client(self) -> redis.Redis:
        if self.redis is None:
            raise CacheUnavailable("Redis cache not started")
        return self.redis

    async def get(self, key: str) -> Optional[Any]:
        """Return the decoded value under `key`, or None when absent."""
        client = self._require_client()
        try:
            cached_data = await client.get(key)
        except (RedisError, OSError) as e:
            raise CacheUnavailable("Redis GET failed", {"key": key, "error": str(e)}) from e

        if cached_data is None:
            return None

        try:
            return json.loads(cached_data)
        except ValueError as e:
            raise CacheUnavailable("Cached value is not valid JSON", {"key": key}) from e

    async def set(self, key: str, value: Any, ttl_seconds: int):
        """Store `value` as JSON under `key` for `ttl_seconds`."""
        client = self._require_client()
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheUnavailable("Value is not JSON serializable", {"key": key}) from e

        try:
            await client.setex(key, ttl_seconds, payload)
        except (RedisError, OSError) as e:
            raise CacheUnavailable("Redis SETEX failed", {"key": key, "error": str(e)}) from e

        self.logger.debug("Cached value", cache_key=key, ttl=ttl_seconds)

    async def health_check(self) -> bool:
        """Check Redis health."""
        if self.redis is None:
            return False
        try:
            await self.redis.ping()
            return True
        except (RedisError, OSError):
            return False
