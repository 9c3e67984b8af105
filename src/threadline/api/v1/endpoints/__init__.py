"""API endpoint modules for version 1."""

from .posts import router as posts_router
from .reactions import router as reactions_router
from .threads import router as threads_router
from .trending import router as trending_router
from .users import router as users_router

__all__ = [
    "posts_router",
    "reactions_router",
    "threads_router",
    "trending_router",
    "users_router",
]
