"""Thread assembly and read-only thread projections."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from threadline.core.settings import settings
from threadline.db.time import hours_before, utcnow
from threadline.models import Post, Thread
from threadline.repositories.engagement_repo import EngagementRepository
from threadline.services.errors import NotFound, ValidationError
from threadline.services.validation import parse_identifier

logger = logging.getLogger(__name__)

__all__ = [
    "ThreadEntry",
    "ThreadParticipant",
    "ThreadService",
    "ThreadView",
    "assemble_thread",
]

ACTIVE_PREVIEW_POSTS = 5
TRENDING_PREVIEW_POSTS = 10


@dataclass(frozen=True)
class ThreadEntry:
    """A post placed in conversation order with its display depth."""

    post: Post
    depth: int


@dataclass(frozen=True)
class ThreadView:
    """A thread together with its posts in conversation order."""

    thread: Thread
    entries: list[ThreadEntry]


@dataclass(frozen=True)
class ThreadParticipant:
    """One author's contribution to a thread."""

    user_id: str
    username: str
    display_name: str | None
    post_count: int
    total_likes: int
    total_replies: int
    first_post_at: datetime
    last_post_at: datetime


def assemble_thread(posts: Sequence[Post]) -> list[ThreadEntry]:
    """Order a thread's posts for linear display.

    The root is the first post without a parent. From it the walk is
    depth-first pre-order: a post is emitted, then each of its replies in
    ascending ``created_at`` order together with that reply's own subtree.
    A post is never emitted twice. Posts that cannot be reached from the
    root are left out.

    When no root exists the posts come back in their given order, all at
    depth 0.
    """
    lookup: dict[str, Post] = {}
    for post in posts:
        lookup.setdefault(post.id, post)

    root = next((post for post in posts if post.parent_post_id is None), None)
    if root is None:
        logger.warning("No root among %d thread posts; keeping input order", len(posts))
        return [ThreadEntry(post=post, depth=0) for post in posts]

    replies: defaultdict[str, list[str]] = defaultdict(list)
    for post_id, post in lookup.items():
        if post.parent_post_id is not None:
            replies[post.parent_post_id].append(post_id)
    for siblings in replies.values():
        siblings.sort(key=lambda post_id: lookup[post_id].created_at)

    ordered: list[ThreadEntry] = []
    visited: set[str] = set()
    stack: list[tuple[str, int]] = [(root.id, 0)]
    while stack:
        post_id, depth = stack.pop()
        if post_id in visited:
            continue
        visited.add(post_id)
        ordered.append(ThreadEntry(post=lookup[post_id], depth=depth))
        # Reversed so the earliest reply is popped first.
        for reply_id in reversed(replies.get(post_id, [])):
            if reply_id not in visited:
                stack.append((reply_id, depth + 1))

    orphaned = len(lookup) - len(visited)
    if orphaned:
        logger.warning(
            "Dropped %d post(s) unreachable from root %s",
            orphaned,
            root.id,
        )
    return ordered


class ThreadService:
    """Read-only access to threads in conversation order."""

    def __init__(self, repo: EngagementRepository) -> None:
        self.repo = repo

    def get_thread_view(self, thread_id: str, *, include_hidden: bool = False) -> ThreadView | None:
        """Return a thread with its posts ordered for display.

        Returns:
            None when the thread does not exist.
        """
        thread_id = parse_identifier(thread_id, "thread_id")
        thread = self.repo.find_thread(thread_id)
        if thread is None:
            return None
        return self._view(thread, include_hidden=include_hidden)

    def get_thread_view_by_original_post(self, post_id: str) -> ThreadView | None:
        """Return the thread rooted at ``post_id`` ordered for display."""
        post_id = parse_identifier(post_id, "post_id")
        thread = self.repo.find_thread_by_original_post(post_id)
        if thread is None:
            return None
        return self._view(thread, include_hidden=False)

    def active_threads(
        self,
        limit: int = 20,
        hours_back: int | None = None,
        *,
        now: datetime | None = None,
    ) -> list[ThreadView]:
        """Return visible threads with recent activity, most recent first."""
        since = self._since(limit, hours_back, now)
        threads = self.repo.list_active_threads(since=since, limit=limit)
        return [self._view(thread, preview=ACTIVE_PREVIEW_POSTS) for thread in threads]

    def trending_threads(
        self,
        limit: int = 10,
        hours_back: int | None = None,
        *,
        now: datetime | None = None,
    ) -> list[ThreadView]:
        """Return open, visible threads with recent activity by engagement."""
        since = self._since(limit, hours_back, now)
        threads = self.repo.list_trending_threads(since=since, limit=limit)
        return [self._view(thread, preview=TRENDING_PREVIEW_POSTS) for thread in threads]

    def thread_participants(self, thread_id: str) -> list[ThreadParticipant]:
        """Return per-author contribution stats, most prolific first.

        Raises:
            NotFound: If the thread does not exist.
        """
        thread_id = parse_identifier(thread_id, "thread_id")
        if self.repo.find_thread(thread_id) is None:
            raise NotFound("Thread", thread_id)
        participants = [
            ThreadParticipant(
                user_id=row.author_id,
                username=row.username,
                display_name=row.display_name,
                post_count=int(row.post_count),
                total_likes=int(row.total_likes),
                total_replies=int(row.total_replies),
                first_post_at=row.first_post_at,
                last_post_at=row.last_post_at,
            )
            for row in self.repo.thread_participant_rows(thread_id)
        ]
        participants.sort(key=lambda participant: participant.post_count, reverse=True)
        return participants

    def _view(
        self,
        thread: Thread,
        *,
        include_hidden: bool = False,
        preview: int | None = None,
    ) -> ThreadView:
        posts = self.repo.list_posts_by_thread(thread.id, include_hidden=include_hidden)
        if preview is not None:
            posts = posts[:preview]
        return ThreadView(thread=thread, entries=assemble_thread(posts))

    @staticmethod
    def _since(limit: int, hours_back: int | None, now: datetime | None) -> datetime:
        if hours_back is None:
            hours_back = settings.active_threads_hours_back
        if limit < 1:
            raise ValidationError("limit must be >= 1")
        if hours_back < 1:
            raise ValidationError("hours_back must be >= 1")
        return hours_before(now or utcnow(), hours_back)
