"""Service-level helpers for authoring posts and opening threads."""
from __future__ import annotations

import logging
from datetime import datetime

from threadline.core.settings import settings
from threadline.models import Post, Thread
from threadline.repositories.engagement_repo import EngagementRepository
from threadline.services.counters import CounterMaintainer
from threadline.services.errors import ConflictError, NotFound, ValidationError
from threadline.services.validation import parse_identifier

logger = logging.getLogger(__name__)

__all__ = ["PostService", "thread_title"]


def thread_title(content: str) -> str:
    """Derive a thread title from the opening post's text."""
    return content.strip()[: settings.thread_title_length]


class PostService:
    """Creates posts and keeps thread membership consistent."""

    def __init__(
        self,
        repo: EngagementRepository,
        counters: CounterMaintainer | None = None,
    ) -> None:
        self.repo = repo
        self.counters = counters or CounterMaintainer(repo)

    def create_post(
        self,
        author_id: str,
        content: str,
        parent_post_id: str | None = None,
        repost_of_id: str | None = None,
        *,
        created_at: datetime | None = None,
    ) -> Post:
        """Create a post and attach it to a thread.

        A post without a parent opens a new thread. A reply joins its
        parent's thread, after which the thread's comment counts and
        metrics are rebuilt under the thread row lock.

        Args:
            author_id: Authoring user.
            content: Post body; must be non-blank and within the length limit.
            parent_post_id: Post being replied to, if any.
            repost_of_id: Post being reposted, if any.
            created_at: Authoring time for imported posts; defaults to now.

        Returns:
            The persisted post with ``thread_id`` set.

        Raises:
            ValidationError: For malformed identifiers or content.
            NotFound: If the author, parent or repost target does not exist.
            ConflictError: If the parent's thread is locked.
        """
        author_id = parse_identifier(author_id, "author_id")
        if parent_post_id is not None:
            parent_post_id = parse_identifier(parent_post_id, "parent_post_id")
        if repost_of_id is not None:
            repost_of_id = parse_identifier(repost_of_id, "repost_of_id")
        if not content or not content.strip():
            raise ValidationError("Post content must not be empty")
        if len(content) > settings.post_max_length:
            raise ValidationError(
                f"Post content exceeds {settings.post_max_length} characters"
            )

        with self.repo.unit_of_work():
            if self.repo.find_user(author_id) is None:
                raise NotFound("User", author_id)
            if repost_of_id is not None and self.repo.find_post(repost_of_id) is None:
                raise NotFound("Post", repost_of_id)

            if parent_post_id is None:
                post = self.repo.create_post(
                    author_id=author_id,
                    content=content,
                    repost_of_id=repost_of_id,
                    created_at=created_at,
                )
                thread = self.repo.create_thread(original_post=post, title=thread_title(content))
                post.thread_id = thread.id
                self.repo.flush()
            else:
                thread = self._thread_for_reply(parent_post_id)
                post = self.repo.create_post(
                    author_id=author_id,
                    content=content,
                    thread_id=thread.id,
                    parent_post_id=parent_post_id,
                    repost_of_id=repost_of_id,
                    created_at=created_at,
                )
                self.counters.refresh_thread(thread.id)

        logger.info(
            "Post created: id=%s author=%s thread=%s reply=%s",
            post.id,
            author_id,
            post.thread_id,
            parent_post_id is not None,
        )
        return post

    def promote_to_thread(self, post_id: str, title: str | None = None) -> Thread:
        """Open a thread for an existing root post.

        Raises:
            NotFound: If the post does not exist.
            ConflictError: If the post is a reply or already has a thread.
        """
        post_id = parse_identifier(post_id, "post_id")
        with self.repo.unit_of_work():
            post = self.repo.lock_post(post_id)
            if post is None:
                raise NotFound("Post", post_id)
            thread = self._open_thread(post, title)

        logger.info("Thread %s opened for post %s", thread.id, post_id)
        return thread

    def _open_thread(self, post: Post, title: str | None) -> Thread:
        if post.parent_post_id is not None:
            raise ConflictError(f"Post {post.id} is a reply and cannot start a thread")
        if post.thread_id is not None or self.repo.find_thread_by_original_post(post.id):
            raise ConflictError(f"Post {post.id} already has a thread")
        thread = self.repo.create_thread(
            original_post=post,
            title=title if title is not None else thread_title(post.content),
        )
        post.thread_id = thread.id
        self.repo.flush()
        return thread

    def _thread_for_reply(self, parent_post_id: str) -> Thread:
        parent = self.repo.find_post(parent_post_id)
        if parent is None:
            raise NotFound("Post", parent_post_id)
        # The new reply changes comment counts along its ancestor chain.
        # Those rows are locked in id order, always before the thread row.
        for post_id in sorted(self._ancestor_ids(parent)):
            self.repo.lock_post(post_id)
        if parent.thread_id is None:
            # Root posts written before threading get their thread on first reply.
            if parent.parent_post_id is not None:
                raise ConflictError(f"Parent post {parent_post_id} is not part of a thread")
            self._open_thread(parent, None)

        thread = self.repo.lock_thread(parent.thread_id)
        if thread is None:
            raise NotFound("Thread", parent.thread_id)
        if thread.is_locked:
            raise ConflictError(f"Thread {thread.id} is locked")
        return thread

    def _ancestor_ids(self, post: Post) -> list[str]:
        ids: list[str] = []
        current: Post | None = post
        while current is not None and current.id not in ids:
            ids.append(current.id)
            parent_id = current.parent_post_id
            current = self.repo.find_post(parent_id) if parent_id is not None else None
        return ids
