# src/threadline/models/__init__.py
"""SQLAlchemy models for the Threadline application."""

from .post import Post
from .reaction import PUBLIC_REACTION_TYPES, Reaction, ReactionType
from .thread import Thread
from .user import User

__all__ = [
    "Post",
    "PUBLIC_REACTION_TYPES", "Reaction", "ReactionType",
    "Thread",
    "User",
]
