"""Trending-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class TrendingPostResponse(BaseModel):
    """A post's standing in the trending ranking."""

    post_id: str
    reaction_velocity: float
    total_reactions: int
    recent_reactions: int

    model_config = ConfigDict(from_attributes=True)
