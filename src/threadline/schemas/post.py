"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Schema for creating a new post or reply."""

    author_id: str = Field(..., description="Authoring user ID")
    content: str = Field(..., min_length=1, description="Post text")
    parent_post_id: str | None = Field(None, description="Parent post ID for replies")
    repost_of_id: str | None = Field(None, description="Post being reposted")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    author_id: str
    thread_id: str | None
    parent_post_id: str | None
    repost_of_id: str | None
    content: str
    is_hidden: bool
    like_count: int
    repost_count: int
    comment_count: int
    created_at: datetime
    published_at: datetime

    model_config = ConfigDict(from_attributes=True)
