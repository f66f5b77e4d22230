"""
Unit tests for the cache-aside layer.
"""

import pytest
from unittest.mock import AsyncMock

from service_follow.app.cache.cache_aside import CacheAside, DEFAULT_TTL_SECONDS
from service_follow.app.errors import StoreUnavailable


def counting_loader(value):
    """AsyncMock loader returning `value`, exposing await_count."""
    return AsyncMock(return_value=value)


def sample(metrics, name, **labels):
    labels.setdefault("cache_type", "follow_lists")
    return metrics.registry.get_sample_value(name, labels) or 0.0


class TestCacheAside:
    """Test cases for CacheAside."""

    @pytest.mark.asyncio
    async def test_miss_loads_and_populates(self, cache_aside, cache):
        loader = counting_loader([{"userId": "user2"}])

        result = await cache_aside.get_or_populate("following:user1", loader)

        assert result == [{"userId": "user2"}]
        assert loader.await_count == 1
        assert "following:user1" in cache.entries

    @pytest.mark.asyncio
    async def test_hit_within_ttl_skips_loader(self, cache_aside, clock):
        loader = counting_loader(["a", "b"])

        first = await cache_aside.get_or_populate("k", loader, ttl=60)
        clock.advance(59)
        second = await cache_aside.get_or_populate("k", loader, ttl=60)

        assert first == second == ["a", "b"]
        assert loader.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_entry_reloads(self, cache_aside, clock):
        loader = counting_loader(["a"])

        await cache_aside.get_or_populate("k", loader, ttl=60)
        clock.advance(60)
        await cache_aside.get_or_populate("k", loader, ttl=60)

        assert loader.await_count == 2

    @pytest.mark.asyncio
    async def test_default_ttl_applies(self, cache, clock):
        aside = CacheAside(cache)
        loader = counting_loader([])

        await aside.get_or_populate("k", loader)

        _, expires_at = cache.entries["k"]
        assert expires_at == clock.now + DEFAULT_TTL_SECONDS == 60

    @pytest.mark.asyncio
    async def test_empty_list_is_a_hit(self, cache_aside):
        loader = counting_loader([])

        await cache_aside.get_or_populate("k", loader)
        result = await cache_aside.get_or_populate("k", loader)

        assert result == []
        assert loader.await_count == 1

    @pytest.mark.asyncio
    async def test_cache_read_failure_is_a_miss(self, cache_aside, cache, metrics):
        cache.fail_get = True
        loader = counting_loader(["fresh"])

        result = await cache_aside.get_or_populate("k", loader)

        assert result == ["fresh"]
        assert loader.await_count == 1
        assert sample(metrics, "cache_errors_total", operation="get") == 1

    @pytest.mark.asyncio
    async def test_cache_write_failure_still_returns_value(self, cache_aside, cache, metrics):
        cache.fail_set = True
        loader = counting_loader(["fresh"])

        result = await cache_aside.get_or_populate("k", loader)

        assert result == ["fresh"]
        assert cache.entries == {}
        assert sample(metrics, "cache_errors_total", operation="set") == 1

    @pytest.mark.asyncio
    async def test_write_back_reports_outcome(self, cache_aside, cache):
        assert await cache_aside.write_back("k", [1], 30) is True

        cache.fail_set = True
        assert await cache_aside.write_back("k", [1], 30) is False

    @pytest.mark.asyncio
    async def test_loader_error_propagates_and_caches_nothing(self, cache_aside, cache):
        loader = AsyncMock(side_effect=StoreUnavailable("Failed to list edges"))

        with pytest.raises(StoreUnavailable):
            await cache_aside.get_or_populate("k", loader)

        assert cache.set_calls == 0

    @pytest.mark.asyncio
    async def test_hits_and_misses_are_counted(self, cache_aside, metrics):
        loader = counting_loader(["a"])

        await cache_aside.get_or_populate("k", loader)
        await cache_aside.get_or_populate("k", loader)
        await cache_aside.get_or_populate("k", loader)

        assert sample(metrics, "cache_misses_total") == 1
        assert sample(metrics, "cache_hits_total") == 2

    @pytest.mark.asyncio
    async def test_decode_applies_to_loaded_and_cached_values(self, cache_aside):
        loader = counting_loader([1, 2])

        loaded = await cache_aside.get_or_populate("k", loader, decode=tuple)
        cached = await cache_aside.get_or_populate("k", loader, decode=tuple)

        assert loaded == cached == (1, 2)
        assert loader.await_count == 1

    @pytest.mark.asyncio
    async def test_undecodable_cached_value_is_a_miss(self, cache_aside, cache, clock, metrics):
        cache.entries["k"] = ('{"unexpected": true}', clock.now + 60)

        def decode(value):
            if not isinstance(value, list):
                raise TypeError("not a list")
            return value

        loader = counting_loader(["fresh"])

        result = await cache_aside.get_or_populate("k", loader, decode=decode)

        assert result == ["fresh"]
        assert loader.await_count == 1
        assert cache.entries["k"][0] == '["fresh"]'
        assert sample(metrics, "cache_errors_total", operation="decode") == 1
        assert sample(metrics, "cache_misses_total") == 1
