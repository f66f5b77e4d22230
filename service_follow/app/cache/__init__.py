"""
Cache package for the Follow Service.

Provides a Redis-backed JSON cache and the cache-aside policy used by the
following/followers reads. Entries expire by TTL only; writes to the
follow graph never touch the cache.
"""

from .cache_aside import CacheAside
from .redis_cache import RedisCache

__all__ = ["CacheAside", "RedisCache"]
