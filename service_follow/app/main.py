"""
Follow service application.
"""

from typing import List, Optional

from fastapi import Header

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.logging import set_user_context

from .auth.identity import IdentityResolver
from .cache.cache_aside import CacheAside
from .cache.redis_cache import RedisCache
from .errors import CacheUnavailable
from .follows.models import FollowEntry, FollowRelation, FollowStats, MessageResponse
from .follows.service import FollowService
from .persistence.postgres import PostgresRelationshipStore


class FollowApiService(BaseService):
    """Follow service implementation.

    Components can be injected for tests or embedding; anything not supplied
    is built from configuration and owned (started and stopped) by the
    service.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        store=None,
        cache=None,
        identity_resolver: Optional[IdentityResolver] = None,
    ):
        super().__init__("follow", 8020, config=config)

        self.store = store or PostgresRelationshipStore(
            self.config.postgres_dsn,
            table=self.config.follow_table,
            min_size=self.config.postgres_pool_min_size,
            max_size=self.config.postgres_pool_max_size,
        )
        self.cache = cache or RedisCache(
            host=self.config.redis_host,
            port=self.config.redis_port,
            password=self.config.redis_password,
            db=self.config.redis_db,
        )
        self.identity_resolver = identity_resolver or IdentityResolver(
            self.config.jwt_secret,
            algorithms=self.config.jwt_algorithms,
        )
        self.follow_service = FollowService(
            self.store,
            CacheAside(self.cache, default_ttl=self.config.follow_cache_ttl_seconds, metrics=self.metrics),
            metrics=self.metrics,
        )

        self._setup_follow_routes()

    def _authenticate(self, authorization: Optional[str]) -> str:
        user_id = self.identity_resolver.authenticate(authorization)
        set_user_context(user_id=user_id)
        return user_id

    def _setup_follow_routes(self):
        """Set up follow-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "follow",
                "message": "Follow Service",
                "version": "1.0.0",
                "capabilities": ["follow_graph", "caching", "persistence"]
            }

        @self.app.post("/follow/{user_id}", response_model=MessageResponse)
        async def follow_user(user_id: str, authorization: Optional[str] = Header(None)):
            """Follow `user_id` as the caller."""
            requester_id = self._authenticate(authorization)
            await self.follow_service.follow(requester_id, user_id)
            self.metrics.record_business_event("user_followed")
            return MessageResponse(message="Successfully followed user", user_id=user_id)

        @self.app.delete("/follow/{user_id}", response_model=MessageResponse)
        @self.app.post("/unfollow/{user_id}", response_model=MessageResponse)
        async def unfollow_user(user_id: str, authorization: Optional[str] = Header(None)):
            """Stop following `user_id`. Succeeds whether or not an edge existed."""
            requester_id = self._authenticate(authorization)
            await self.follow_service.unfollow(requester_id, user_id)
            self.metrics.record_business_event("user_unfollowed")
            return MessageResponse(message="Successfully unfollowed user", user_id=user_id)

        @self.app.get("/following", response_model=List[FollowEntry])
        async def get_following(authorization: Optional[str] = Header(None)):
            """Users the caller follows."""
            requester_id = self._authenticate(authorization)
            return await self.follow_service.list_following(requester_id)

        @self.app.get("/followers", response_model=List[FollowEntry])
        async def get_followers(authorization: Optional[str] = Header(None)):
            """Users following the caller."""
            requester_id = self._authenticate(authorization)
            return await self.follow_service.list_followers(requester_id)

        @self.app.get("/following/{user_id}", response_model=FollowRelation)
        async def get_follow_relation(user_id: str, authorization: Optional[str] = Header(None)):
            """Whether the caller follows `user_id`."""
            requester_id = self._authenticate(authorization)
            following = await self.follow_service.is_following(requester_id, user_id)
            return FollowRelation(user_id=user_id, following=following)

        @self.app.get("/stats", response_model=FollowStats)
        async def get_own_stats(authorization: Optional[str] = Header(None)):
            """Follower and following counts for the caller."""
            requester_id = self._authenticate(authorization)
            return await self.follow_service.stats(requester_id)

        @self.app.get("/stats/{user_id}", response_model=FollowStats)
        async def get_user_stats(user_id: str, authorization: Optional[str] = Header(None)):
            """Follower and following counts for `user_id`."""
            self._authenticate(authorization)
            return await self.follow_service.stats(user_id)

    async def _check_dependencies(self):
        """Check follow service dependencies."""
        return {
            "postgres": "ok" if await self.store.health_check() else "error",
            "redis": "ok" if await self.cache.health_check() else "error",
        }

    async def start(self):
        """Start follow service components."""
        await self.store.start()
        try:
            await self.cache.start()
        except CacheUnavailable:
            # Reads fall back to the store until Redis is reachable.
            self.logger.warning("Starting without Redis cache")

        self.logger.info("Follow service started")

    async def stop(self):
        """Stop follow service components."""
        await self.store.stop()
        await self.cache.stop()

        self.logger.info("Follow service stopped")


def create_app(**kwargs):
    """Create follow service application."""
    service = FollowApiService(**kwargs)
    return service.app


if __name__ == "__main__":
    service = FollowApiService()
    service.run()
