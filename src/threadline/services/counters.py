"""Denormalized counter maintenance for posts and threads.

Counters are always rebuilt from scratch from the live reaction set and the
post graph. Thread sizes are bounded, so a full pass per mutation is cheap
and leaves no room for drift from missed deltas.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, replace
from datetime import datetime

from threadline.models import Post, ReactionType
from threadline.repositories.engagement_repo import EngagementRepository
from threadline.services.errors import CounterIntegrityError

logger = logging.getLogger(__name__)

__all__ = [
    "CounterMaintainer",
    "PostCounts",
    "ThreadMetrics",
    "comment_counts",
    "max_thread_depth",
]


@dataclass(frozen=True)
class PostCounts:
    """Public counters derived for a single post."""

    like_count: int
    repost_count: int


@dataclass(frozen=True)
class ThreadMetrics:
    """Aggregates derived for a thread from its member posts."""

    post_count: int
    participant_count: int
    max_depth: int
    total_likes: int
    total_reshares: int
    last_activity_at: datetime | None


def _clamp(field: str, owner_id: str, value: int) -> int:
    if value < 0:
        logger.warning(
            "%s",
            CounterIntegrityError(f"{field} for {owner_id} computed as {value}; clamped to 0"),
        )
        return 0
    return value


def _parent_links(posts: Iterable[Post]) -> dict[str, str | None]:
    return {post.id: post.parent_post_id for post in posts}


def max_thread_depth(posts: Iterable[Post]) -> int:
    """Return the longest parent chain among ``posts``.

    The walk from each post follows ``parent_post_id`` until it reaches a
    post with no parent or a parent outside the set. A post whose parent
    lies outside the set still counts that last hop. Revisiting a post
    ends the walk, so malformed cyclic links cannot loop.
    """
    parents = _parent_links(posts)
    deepest = 0
    for post_id in parents:
        depth = 0
        seen = {post_id}
        current: str | None = post_id
        while current is not None:
            parent_id = parents.get(current)
            if parent_id is None:
                break
            depth += 1
            if parent_id in seen:
                break
            seen.add(parent_id)
            current = parent_id if parent_id in parents else None
        deepest = max(deepest, depth)
    return deepest


def comment_counts(posts: Iterable[Post]) -> dict[str, int]:
    """Return, for each post, how many of the given posts descend from it."""
    parents = _parent_links(posts)
    counts = dict.fromkeys(parents, 0)
    for post_id in parents:
        seen = {post_id}
        ancestor = parents[post_id]
        while ancestor is not None and ancestor in parents and ancestor not in seen:
            counts[ancestor] += 1
            seen.add(ancestor)
            ancestor = parents[ancestor]
    return counts


class CounterMaintainer:
    """Keeps post and thread counters equal to a function of live data."""

    def __init__(self, repo: EngagementRepository) -> None:
        self.repo = repo

    def recompute_post_counts(self, post_id: str) -> PostCounts | None:
        """Rebuild ``like_count`` and ``repost_count`` for a post.

        Bookmarks and reports stay out of the public counters.

        Returns:
            The written counts, or None when the post no longer exists.
        """
        by_type = self.repo.count_reactions_by_type(post_id)
        counts = PostCounts(
            like_count=_clamp("like_count", post_id, by_type.get(ReactionType.LIKE, 0)),
            repost_count=_clamp("repost_count", post_id, by_type.get(ReactionType.REPOST, 0)),
        )
        if not self.repo.update_post_counters(post_id, asdict(counts)):
            logger.debug("Skipping post count update; post %s no longer exists", post_id)
            return None
        return counts

    def compute_thread_metrics(self, posts: list[Post]) -> ThreadMetrics:
        """Derive thread aggregates from a list of member posts."""
        return ThreadMetrics(
            post_count=len(posts),
            participant_count=len({post.author_id for post in posts}),
            max_depth=max_thread_depth(posts),
            total_likes=sum(post.like_count for post in posts),
            total_reshares=sum(post.repost_count for post in posts),
            last_activity_at=max((post.published_at for post in posts), default=None),
        )

    def recompute_thread_metrics(self, thread_id: str) -> ThreadMetrics | None:
        """Rebuild every derived column of a thread from its member posts.

        Returns:
            The written metrics, or None when the thread no longer exists.
        """
        if self.repo.find_thread(thread_id) is None:
            logger.debug("Skipping thread metrics; thread %s no longer exists", thread_id)
            return None

        posts = self.repo.list_posts_by_thread(thread_id)
        metrics = self.compute_thread_metrics(posts)
        values: dict[str, object] = {
            "post_count": metrics.post_count,
            "participant_count": metrics.participant_count,
            "max_depth": metrics.max_depth,
            "total_likes": _clamp("total_likes", thread_id, metrics.total_likes),
            "total_reshares": _clamp("total_reshares", thread_id, metrics.total_reshares),
        }
        # An empty thread keeps its previous activity time.
        if metrics.last_activity_at is not None:
            values["last_activity_at"] = metrics.last_activity_at

        if not self.repo.update_thread_metrics(thread_id, values):
            return None
        return replace(
            metrics,
            total_likes=values["total_likes"],
            total_reshares=values["total_reshares"],
        )

    def recompute_comment_counts(self, thread_id: str) -> Mapping[str, int]:
        """Rebuild ``comment_count`` for every member post of a thread."""
        posts = self.repo.list_posts_by_thread(thread_id)
        counts = comment_counts(posts)
        for post in posts:
            if post.comment_count != counts[post.id]:
                self.repo.update_post_counters(post.id, {"comment_count": counts[post.id]})
        return counts

    def refresh_thread(self, thread_id: str) -> ThreadMetrics | None:
        """Rebuild comment counts and thread metrics after a new reply."""
        self.recompute_comment_counts(thread_id)
        metrics = self.recompute_thread_metrics(thread_id)
        if metrics is not None:
            logger.debug(
                "Refreshed thread %s: %d posts, depth %d",
                thread_id,
                metrics.post_count,
                metrics.max_depth,
            )
        return metrics
