"""
Follow graph orchestration.
"""

from contextlib import nullcontext
from typing import List, Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..cache.cache_aside import CacheAside
from ..errors import AlreadyFollowing, EdgeConflict, SelfFollowForbidden
from .models import (
    Edge, FollowDirection, FollowEntry, FollowStats, entries_from_cache, entries_to_cache,
)


class FollowService:
    """Follow, unfollow and list operations over the store and the list cache.

    Writes go straight to the store and leave cached lists alone; a cached
    list reflects a write only once its TTL runs out.
    """

    def __init__(self, store, cache_aside: CacheAside, cache_ttl: Optional[int] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.store = store
        self.cache_aside = cache_aside
        self.cache_ttl = cache_ttl
        self.metrics = metrics
        self.logger = get_logger("follow.service")

    async def follow(self, requester_id: str, target_id: str) -> Edge:
        """Create the edge requester -> target."""
        if requester_id == target_id:
            self._count("follow", "self_follow")
            raise SelfFollowForbidden(requester_id)

        try:
            with self._timed("create_edge"):
                edge = await self.store.create_edge(requester_id, target_id)
        except EdgeConflict:
            self._count("follow", "already_following")
            raise AlreadyFollowing(requester_id, target_id)

        self._count("follow", "created")
        self.logger.info("User followed", follower_id=requester_id, followee_id=target_id)
        return edge

    async def unfollow(self, requester_id: str, target_id: str) -> bool:
        """Remove the edge requester -> target if it exists."""
        with self._timed("delete_edge"):
            existed = await self.store.delete_edge(requester_id, target_id)

        self._count("unfollow", "deleted" if existed else "absent")
        self.logger.info("User unfollowed", follower_id=requester_id,
                         followee_id=target_id, existed=existed)
        return existed

    async def list_following(self, requester_id: str) -> List[FollowEntry]:
        """Users the requester follows."""
        return await self._list(FollowDirection.FOLLOWING, requester_id)

    async def list_followers(self, requester_id: str) -> List[FollowEntry]:
        """Users following the requester."""
        return await self._list(FollowDirection.FOLLOWERS, requester_id)

    async def is_following(self, requester_id: str, target_id: str) -> bool:
        """Whether requester -> target exists. Read from the store, never cached."""
        with self._timed("edge_exists"):
            exists = await self.store.edge_exists(requester_id, target_id)

        self._count("is_following", "yes" if exists else "no")
        return exists

    async def stats(self, user_id: str) -> FollowStats:
        """Follower and following counts for `user_id`, read from the store."""
        with self._timed("count_by_followee"):
            followers = await self.store.count_by_followee(user_id)
        with self._timed("count_by_follower"):
            following = await self.store.count_by_follower(user_id)

        self._count("stats", "ok")
        return FollowStats(user_id=user_id, followers_count=followers, following_count=following)

    async def _list(self, direction: FollowDirection, user_id: str) -> List[FollowEntry]:
        async def load():
            if direction is FollowDirection.FOLLOWING:
                with self._timed("list_by_follower"):
                    edges = await self.store.list_by_follower(user_id)
            else:
                with self._timed("list_by_followee"):
                    edges = await self.store.list_by_followee(user_id)
            return entries_to_cache([edge.peer_entry(direction) for edge in edges])

        entries = await self.cache_aside.get_or_populate(
            direction.cache_key(user_id), load, ttl=self.cache_ttl, decode=entries_from_cache
        )
        self._count(f"list_{direction.value}", "ok")
        return entries

    def _timed(self, operation: str):
        if self.metrics is None:
            return nullcontext()
        return self.metrics.time_operation("store_operation_duration_seconds", operation=operation)

    def _count(self, operation: str, outcome: str):
        if self.metrics is not None:
            self.metrics.increment_counter("follow_operations_total", operation=operation, outcome=outcome)
