"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Schema for registering a user with the engagement core."""

    username: str = Field(..., min_length=1, max_length=64)
    display_name: str | None = Field(None, max_length=200)


class UserResponse(BaseModel):
    """Schema for user information returned by the API."""

    id: str
    username: str
    display_name: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReactorResponse(BaseModel):
    """A user who reacted to a post."""

    user_id: str
    username: str
    display_name: str | None
    reacted_at: datetime

    model_config = ConfigDict(from_attributes=True)
