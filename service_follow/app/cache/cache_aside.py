"""
Cache-aside reads over the Redis cache.

`get_or_populate` serves a key from the cache when present and otherwise
loads it from the source of truth, writes it back with a TTL, and returns
it. Cache trouble never fails a read: a failed lookup or an undecodable
cached value counts as a miss, and a failed write-back is reported, logged
and dropped. Loader errors propagate unchanged. There is no per-key
coordination, so concurrent misses may each load and write; the last write
wins.
"""

from typing import Any, Awaitable, Callable, Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..errors import CacheUnavailable

DEFAULT_TTL_SECONDS = 60

Loader = Callable[[], Awaitable[Any]]
Decoder = Callable[[Any], Any]


class CacheAside:
    """Get-or-populate policy over a TTL-capable key-value cache.

    The cache must provide ``async get(key)`` returning None on absence and
    ``async set(key, value, ttl_seconds)``, both raising CacheUnavailable on
    failure.
    """

    def __init__(self, cache, default_ttl: int = DEFAULT_TTL_SECONDS,
                 metrics: Optional[MetricsCollector] = None, cache_type: str = "follow_lists"):
        self.cache = cache
        self.default_ttl = default_ttl
        self.metrics = metrics
        self.cache_type = cache_type
        self.logger = get_logger("follow.cache.aside")

    async def get_or_populate(self, key: str, loader: Loader, ttl: Optional[int] = None,
                              decode: Optional[Decoder] = None) -> Any:
        """Return the cached value for `key`, loading and caching it on a miss.

        `decode` turns the stored JSON value into the caller's type. It is
        applied to cached and freshly loaded values alike; when it rejects a
        cached value (ValueError or TypeError) the entry is treated as a miss
        and overwritten by the reload.
        """
        cached = await self._lookup(key, decode)
        if cached is not None:
            self._count("cache_hits_total")
            self.logger.debug("Cache hit", cache_key=key)
            return cached

        self._count("cache_misses_total")
        value = await loader()

        await self.write_back(key, value, ttl if ttl is not None else self.default_ttl)
        return decode(value) if decode is not None else value

    async def _lookup(self, key: str, decode: Optional[Decoder] = None) -> Optional[Any]:
        try:
            cached = await self.cache.get(key)
        except CacheUnavailable as e:
            self.logger.warning("Cache read failed, treating as miss", cache_key=key, error=e.message)
            self._count("cache_errors_total", operation="get")
            return None

        if cached is None or decode is None:
            return cached

        try:
            return decode(cached)
        except (ValueError, TypeError) as e:
            # pydantic's ValidationError is a ValueError
            self.logger.warning("Cached value undecodable, treating as miss", cache_key=key, error=str(e))
            self._count("cache_errors_total", operation="decode")
            return None

    async def write_back(self, key: str, value: Any, ttl: int) -> bool:
        """Best-effort cache write. Returns whether the value was stored."""
        try:
            await self.cache.set(key, value, ttl)
        except CacheUnavailable as e:
            self.logger.warning("Cache write skipped", cache_key=key, error=e.message)
            self._count("cache_errors_total", operation="set")
            return False
        return True

    def _count(self, metric_name: str, **labels):
        if self.metrics is not None:
            self.metrics.increment_counter(metric_name, cache_type=self.cache_type, **labels)
