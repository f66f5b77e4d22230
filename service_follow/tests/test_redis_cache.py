"""
Unit tests for the Redis cache adapter.
"""

import json

import pytest
from unittest.mock import AsyncMock, patch
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from service_follow.app.cache.redis_cache import RedisCache
from service_follow.app.errors import CacheUnavailable


class TestRedisCache:
    """Test cases for RedisCache."""

    @pytest.fixture
    def redis_client(self):
        return AsyncMock()

    @pytest.fixture
    def cache(self, redis_client):
        cache = RedisCache(host="cache.local", port=6380, password="pw")
        cache.redis = redis_client
        return cache

    @pytest.mark.asyncio
    async def test_get_decodes_json(self, cache, redis_client):
        redis_client.get.return_value = json.dumps([{"userId": "user2"}])

        assert await cache.get("following:user1") == [{"userId": "user2"}]
        redis_client.get.assert_awaited_once_with("following:user1")

    @pytest.mark.asyncio
    async def test_get_absent_returns_none(self, cache, redis_client):
        redis_client.get.return_value = None

        assert await cache.get("following:user1") is None

    @pytest.mark.asyncio
    async def test_get_connection_error_raises_cache_unavailable(self, cache, redis_client):
        redis_client.get.side_effect = RedisConnectionError("refused")

        with pytest.raises(CacheUnavailable):
            await cache.get("following:user1")

    @pytest.mark.asyncio
    async def test_get_corrupt_payload_raises_cache_unavailable(self, cache, redis_client):
        redis_client.get.return_value = "{not json"

        with pytest.raises(CacheUnavailable):
            await cache.get("following:user1")

    @pytest.mark.asyncio
    async def test_set_uses_setex(self, cache, redis_client):
        await cache.set("followers:user1", [{"userId": "user3"}], 60)

        redis_client.setex.assert_awaited_once_with(
            "followers:user1", 60, json.dumps([{"userId": "user3"}])
        )

    @pytest.mark.asyncio
    async def test_set_timeout_raises_cache_unavailable(self, cache, redis_client):
        redis_client.setex.side_effect = RedisTimeoutError("slow")

        with pytest.raises(CacheUnavailable):
            await cache.set("followers:user1", [], 60)

    @pytest.mark.asyncio
    async def test_set_unserializable_raises_cache_unavailable(self, cache, redis_client):
        with pytest.raises(CacheUnavailable):
            await cache.set("followers:user1", {object()}, 60)

        redis_client.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_use_before_start_raises_cache_unavailable(self):
        cache = RedisCache()

        with pytest.raises(CacheUnavailable):
            await cache.get("following:user1")

    @pytest.mark.asyncio
    async def test_health_check(self, cache, redis_client):
        assert await cache.health_check() is True

        redis_client.ping.side_effect = RedisConnectionError("down")
        assert await cache.health_check() is False

    @pytest.mark.asyncio
    async def test_start_builds_client_from_settings(self, redis_client):
        with patch("service_follow.app.cache.redis_cache.redis.Redis", return_value=redis_client) as factory:
            cache = RedisCache(host="cache.local", port=6380, password="pw", db=2)
            await cache.start()

        kwargs = factory.call_args.kwargs
        assert kwargs["host"] == "cache.local"
        assert kwargs["port"] == 6380
        assert kwargs["password"] == "pw"
        assert kwargs["db"] == 2
        redis_client.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_start_failure_raises_cache_unavailable(self, redis_client):
        redis_client.ping.side_effect = RedisConnectionError("refused")

        with patch("service_follow.app.cache.redis_cache.redis.Redis", return_value=redis_client):
            with pytest.raises(CacheUnavailable):
                await RedisCache().start()

    @pytest.mark.asyncio
    async def test_stop_closes_client(self, cache, redis_client):
        await cache.stop()

        redis_client.aclose.assert_awaited_once()
        assert cache.redis is None
