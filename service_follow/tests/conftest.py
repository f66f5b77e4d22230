"""
Shared fixtures for Follow Service tests.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import pytest

from shared.config import get_config
from shared.metrics import MetricsCollector
from shared.test_helpers import MOCK_SECRET, MockTokenGenerator, test_data_factory
from service_follow.app.cache.cache_aside import CacheAside
from service_follow.app.errors import CacheUnavailable, EdgeConflict, StoreUnavailable
from service_follow.app.follows.models import Edge
from service_follow.app.follows.service import FollowService

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self):
        self.now = 0.0

    def advance(self, seconds: float):
        self.now += seconds


class InMemoryCache:
    """TTL key-value cache driven by a FakeClock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.entries: Dict[str, Tuple[str, float]] = {}
        self.get_calls = 0
        self.set_calls = 0
        self.fail_get = False
        self.fail_set = False
        self.healthy = True
        self.started = False
        self.stopped = False

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True

    async def get(self, key: str) -> Optional[Any]:
        self.get_calls += 1
        if self.fail_get:
            raise CacheUnavailable("Redis GET failed", {"key": key})
        entry = self.entries.get(key)
        if entry is None:
            return None
        payload, expires_at = entry
        if self.clock.now >= expires_at:
            del self.entries[key]
            return None
        return json.loads(payload)

    async def set(self, key: str, value: Any, ttl_seconds: int):
        self.set_calls += 1
        if self.fail_set:
            raise CacheUnavailable("Redis SETEX failed", {"key": key})
        self.entries[key] = (json.dumps(value), self.clock.now + ttl_seconds)

    async def health_check(self) -> bool:
        return self.healthy


class InMemoryStore:
    """Relationship store keeping edges in a dict."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.edges: Dict[Tuple[str, str], Edge] = {}
        self.calls: Dict[str, int] = {
            "create_edge": 0,
            "delete_edge": 0,
            "list_by_follower": 0,
            "list_by_followee": 0,
            "edge_exists": 0,
            "count_by_follower": 0,
            "count_by_followee": 0,
        }
        self.fail = False
        self.healthy = True
        self.started = False
        self.stopped = False

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def seed(self, edges):
        for item in edges:
            edge = Edge(**item)
            self.edges[(edge.follower_id, edge.followee_id)] = edge

    def _enter(self, operation: str):
        self.calls[operation] += 1
        if self.fail:
            raise StoreUnavailable("Failed to reach store", {"error": "connection refused: secret-host:5432"})

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True

    async def create_edge(self, follower_id: str, followee_id: str) -> Edge:
        self._enter("create_edge")
        if (follower_id, followee_id) in self.edges:
            raise EdgeConflict(follower_id, followee_id)
        edge = Edge(
            follower_id=follower_id,
            followee_id=followee_id,
            created_at=BASE_TIME + timedelta(seconds=self.clock.now),
        )
        self.edges[(follower_id, followee_id)] = edge
        return edge

    async def delete_edge(self, follower_id: str, followee_id: str) -> bool:
        self._enter("delete_edge")
        return self.edges.pop((follower_id, followee_id), None) is not None

    async def list_by_follower(self, follower_id: str):
        self._enter("list_by_follower")
        edges = [e for e in self.edges.values() if e.follower_id == follower_id]
        return sorted(edges, key=lambda e: e.followee_id)

    async def list_by_followee(self, followee_id: str):
        self._enter("list_by_followee")
        edges = [e for e in self.edges.values() if e.followee_id == followee_id]
        return sorted(edges, key=lambda e: e.follower_id)

    async def edge_exists(self, follower_id: str, followee_id: str) -> bool:
        self._enter("edge_exists")
        return (follower_id, followee_id) in self.edges

    async def count_by_follower(self, follower_id: str) -> int:
        self._enter("count_by_follower")
        return sum(1 for e in self.edges.values() if e.follower_id == follower_id)

    async def count_by_followee(self, followee_id: str) -> int:
        self._enter("count_by_followee")
        return sum(1 for e in self.edges.values() if e.followee_id == followee_id)

    async def health_check(self) -> bool:
        return self.healthy


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return InMemoryCache(clock)


@pytest.fixture
def store(clock):
    return InMemoryStore(clock)


@pytest.fixture
def seeded_store(store):
    store.seed(test_data_factory.create_test_edges(BASE_TIME))
    return store


@pytest.fixture
def metrics():
    return MetricsCollector("follow")


@pytest.fixture
def cache_aside(cache, metrics):
    return CacheAside(cache, default_ttl=60, metrics=metrics)


@pytest.fixture
def follow_service(store, cache_aside, metrics):
    return FollowService(store, cache_aside, metrics=metrics)


@pytest.fixture
def tokens():
    return MockTokenGenerator()


@pytest.fixture
def service_config():
    return get_config("follow", 8020, env="test", jwt_secret=MOCK_SECRET, follow_cache_ttl_seconds=60)
