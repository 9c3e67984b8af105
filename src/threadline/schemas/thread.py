"""Thread-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .post import PostResponse


class ThreadResponse(BaseModel):
    """Thread metadata and derived metrics."""

    id: str
    original_post_id: str
    title: str | None
    is_locked: bool
    participant_count: int
    post_count: int
    max_depth: int
    total_likes: int
    total_reshares: int
    last_activity_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ThreadPostResponse(PostResponse):
    """A post placed in conversation order."""

    depth: int


class ThreadViewResponse(BaseModel):
    """A thread with its posts in conversation order."""

    thread: ThreadResponse
    posts: list[ThreadPostResponse]


class ThreadParticipantResponse(BaseModel):
    """One author's contribution to a thread."""

    user_id: str
    username: str
    display_name: str | None
    post_count: int
    total_likes: int
    total_replies: int
    first_post_at: datetime
    last_post_at: datetime

    model_config = ConfigDict(from_attributes=True)
