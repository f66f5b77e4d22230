"""
Domain errors for the Follow Service.
"""

from typing import Any, Dict, Optional

from shared.errors import ConflictError, ExternalServiceError, ValidationError


class SelfFollowForbidden(ValidationError):
    """A user tried to follow themselves."""

    def __init__(self, user_id: str):
        super().__init__(
            "Users cannot follow themselves",
            details={"user_id": user_id},
            code="SELF_FOLLOW_FORBIDDEN",
        )


class EdgeConflict(ConflictError):
    """The store already holds an edge for the ordered pair."""

    def __init__(self, follower_id: str, followee_id: str):
        super().__init__(
            "Follow edge already exists",
            details={"follower_id": follower_id, "followee_id": followee_id},
            code="EDGE_CONFLICT",
        )


class AlreadyFollowing(ConflictError):
    """The requester already follows the target."""

    def __init__(self, requester_id: str, target_id: str):
        super().__init__(
            "Already following this user",
            details={"user_id": target_id},
            code="ALREADY_FOLLOWING",
        )
        self.requester_id = requester_id


class StoreUnavailable(ExternalServiceError):
    """The relationship store could not complete an operation."""

    status_code = 500

    def __init__(self, message: str = "Store operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("postgres", message, details, code="STORE_UNAVAILABLE")


class CacheUnavailable(ExternalServiceError):
    """The cache store failed a read or write."""

    def __init__(self, message: str = "Cache operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("redis", message, details, code="CACHE_UNAVAILABLE")
