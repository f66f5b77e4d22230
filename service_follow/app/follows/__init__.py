"""
Follow graph domain: models and the FollowService orchestration.
"""

from .models import Edge, FollowDirection, FollowEntry, FollowRelation, FollowStats
from .service import FollowService

__all__ = ["Edge", "FollowDirection", "FollowEntry", "FollowRelation", "FollowStats", "FollowService"]
