"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ErrorResponse, PageInfo
from .post import PostCreate, PostResponse
from .reaction import (
    BulkRemovalResponse,
    PostCountsResponse,
    ReactionCreate,
    ReactionListResponse,
    ReactionOutcomeResponse,
    ReactionResponse,
    ReactionStatsResponse,
)
from .thread import ThreadParticipantResponse, ThreadPostResponse, ThreadResponse, ThreadViewResponse
from .trending import TrendingPostResponse
from .user import ReactorResponse, UserCreate, UserResponse

__all__ = [
    "ErrorResponse", "PageInfo",
    "PostCreate", "PostResponse",
    "BulkRemovalResponse", "PostCountsResponse", "ReactionCreate", "ReactionListResponse",
    "ReactionOutcomeResponse", "ReactionResponse", "ReactionStatsResponse",
    "ThreadParticipantResponse", "ThreadPostResponse", "ThreadResponse", "ThreadViewResponse",
    "TrendingPostResponse",
    "ReactorResponse", "UserCreate", "UserResponse",
]
