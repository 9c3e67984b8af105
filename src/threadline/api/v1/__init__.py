"""Version 1 API endpoints."""

from .endpoints import (
    posts_router,
    reactions_router,
    threads_router,
    trending_router,
    users_router,
)

__all__ = [
    "posts_router",
    "reactions_router",
    "threads_router",
    "trending_router",
    "users_router",
]
