"""
Data models for the Follow Service.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class FollowDirection(str, Enum):
    """Which side of the edge a list is keyed on."""
    FOLLOWING = "following"
    FOLLOWERS = "followers"

    def cache_key(self, user_id: str) -> str:
        return f"{self.value}:{user_id}"


class Edge(BaseModel):
    """A directed follow relationship."""
    follower_id: str
    followee_id: str
    created_at: datetime

    def peer_entry(self, direction: FollowDirection) -> "FollowEntry":
        """Project the edge onto the other user as seen from `direction`."""
        peer = self.followee_id if direction is FollowDirection.FOLLOWING else self.follower_id
        return FollowEntry(user_id=peer, followed_at=self.created_at)


class FollowEntry(BaseModel):
    """One row of a following/followers list."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    followed_at: datetime = Field(alias="followedAt")

    def to_cache(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def entries_to_cache(entries: List[FollowEntry]) -> List[Dict[str, Any]]:
    return [entry.to_cache() for entry in entries]


def entries_from_cache(payload: Any) -> List[FollowEntry]:
    """Decode a cached list. Raises TypeError or ValidationError on a bad shape."""
    if not isinstance(payload, list):
        raise TypeError(f"Expected a list of follow entries, got {type(payload).__name__}")
    return [FollowEntry.model_validate(item) for item in payload]


class MessageResponse(BaseModel):
    """Acknowledgement for write operations."""
    message: str
    user_id: str


class FollowRelation(BaseModel):
    """Whether the caller follows `userId`."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    following: bool


class FollowStats(BaseModel):
    """Follower and following counts for a user."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    followers_count: int = Field(alias="followersCount")
    following_count: int = Field(alias="followingCount")
