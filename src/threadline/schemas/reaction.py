"""Reaction-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from threadline.models import ReactionType

from .common import PageInfo


class ReactionCreate(BaseModel):
    """Schema for reacting to a post."""

    user_id: str = Field(..., description="Reacting user ID")
    type: str = Field(..., description="LIKE, REPOST, BOOKMARK or REPORT (any case)")
    strict: bool = Field(
        False,
        description="Reject a resubmission of the held type instead of toggling it off",
    )


class ReactionResponse(BaseModel):
    """A single reaction."""

    id: str
    user_id: str
    post_id: str
    type: ReactionType
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostCountsResponse(BaseModel):
    """Public counters of a post after a mutation settled."""

    like_count: int
    repost_count: int

    model_config = ConfigDict(from_attributes=True)


class ReactionOutcomeResponse(BaseModel):
    """Result of applying or removing a reaction."""

    outcome: str = Field(..., description="created, removed or replaced")
    reaction: ReactionResponse
    previous: ReactionResponse | None = None
    counts: PostCountsResponse | None = None


class ReactionListResponse(BaseModel):
    """One page of reactions, newest first."""

    items: list[ReactionResponse]
    page_info: PageInfo


class ReactionStatsResponse(BaseModel):
    """Per-type reaction counts for a post."""

    like_count: int
    repost_count: int
    bookmark_count: int
    report_count: int
    total_engagement: int


class BulkRemovalResponse(BaseModel):
    """Result of removing every reaction a user holds."""

    removed: int
    posts_recomputed: list[str]
    threads_recomputed: list[str]
    failed_posts: list[str]
    failed_threads: list[str]

    model_config = ConfigDict(from_attributes=True)
