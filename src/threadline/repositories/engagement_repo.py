"""Data access for posts, threads and reactions.

Every component of the engagement core receives an ``EngagementRepository``
explicitly; nothing in the core reaches for a module-level session.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.orm import Session

from threadline.db.time import utcnow
from threadline.models import PUBLIC_REACTION_TYPES, Post, Reaction, ReactionType, Thread, User

__all__ = ["EngagementRepository", "ReactionFilter"]


@dataclass(frozen=True)
class ReactionFilter:
    """Criteria for listing reactions; unset fields do not filter."""

    post_id: str | None = None
    user_id: str | None = None
    type: ReactionType | None = None


class EngagementRepository:
    """Thin wrapper around database access for the engagement entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    # -- transactional boundary -------------------------------------------

    @contextmanager
    def unit_of_work(self) -> Iterator[EngagementRepository]:
        """Run the enclosed block as one transaction.

        Commits when the block exits normally; rolls back and re-raises
        otherwise. Row locks taken inside the block are held until then.
        """
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def flush(self) -> None:
        """Flush pending changes so following queries observe them."""
        self.session.flush()

    # -- users --------------------------------------------------------------

    def find_user(self, user_id: str) -> User | None:
        """Return a user by identifier."""
        return self.session.get(User, user_id)

    def create_user(self, *, username: str, display_name: str | None = None) -> User:
        """Insert a new user and return the persisted ORM instance."""
        user = User(username=username, display_name=display_name)
        self.session.add(user)
        self.session.flush()
        return user

    # -- posts --------------------------------------------------------------

    def find_post(self, post_id: str) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def lock_post(self, post_id: str) -> Post | None:
        """Return a post with its row locked for the current transaction.

        The instance is refreshed from the database so counters read under
        the lock are current.
        """
        result = self.session.execute(
            select(Post)
            .where(Post.id == post_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    def create_post(
        self,
        *,
        author_id: str,
        content: str,
        thread_id: str | None = None,
        parent_post_id: str | None = None,
        repost_of_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Post:
        """Insert a new post and return the persisted ORM instance.

        Args:
            author_id: Identifier of the authoring user.
            content: Post body.
            thread_id: Thread the post belongs to, if already known.
            parent_post_id: Post being replied to.
            repost_of_id: Post being reposted.
            created_at: Explicit authoring time; defaults to now.
        """
        moment = created_at or utcnow()
        post = Post(
            author_id=author_id,
            content=content,
            thread_id=thread_id,
            parent_post_id=parent_post_id,
            repost_of_id=repost_of_id,
            created_at=moment,
            published_at=moment,
        )
        self.session.add(post)
        self.session.flush()
        return post

    def list_posts_by_thread(self, thread_id: str, *, include_hidden: bool = True) -> list[Post]:
        """Return the member posts of a thread in creation order."""
        stmt = select(Post).where(Post.thread_id == thread_id)
        if not include_hidden:
            stmt = stmt.where(Post.is_hidden.is_(False))
        stmt = stmt.order_by(Post.created_at.asc())
        return list(self.session.execute(stmt).scalars())

    def update_post_counters(self, post_id: str, counts: Mapping[str, int]) -> bool:
        """Write denormalized counters onto a post.

        Returns:
            False when the post no longer exists.
        """
        result = self.session.execute(
            update(Post).where(Post.id == post_id).values(**counts)
        )
        return bool(result.rowcount)

    # -- threads ------------------------------------------------------------

    def find_thread(self, thread_id: str) -> Thread | None:
        """Return a thread by identifier."""
        return self.session.get(Thread, thread_id)

    def find_thread_by_original_post(self, post_id: str) -> Thread | None:
        """Return the thread rooted at ``post_id``, if any."""
        result = self.session.execute(select(Thread).where(Thread.original_post_id == post_id))
        return result.scalars().first()

    def lock_thread(self, thread_id: str) -> Thread | None:
        """Return a thread with its row locked for the current transaction."""
        result = self.session.execute(
            select(Thread)
            .where(Thread.id == thread_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    def create_thread(self, *, original_post: Post, title: str | None) -> Thread:
        """Insert a thread seeded from its root post."""
        thread = Thread(
            original_post_id=original_post.id,
            title=title,
            participant_count=1,
            post_count=1,
            max_depth=0,
            total_likes=original_post.like_count,
            total_reshares=original_post.repost_count,
            last_activity_at=original_post.published_at,
        )
        self.session.add(thread)
        self.session.flush()
        return thread

    def update_thread_metrics(self, thread_id: str, metrics: Mapping[str, Any]) -> bool:
        """Write derived metrics onto a thread.

        Returns:
            False when the thread no longer exists.
        """
        result = self.session.execute(
            update(Thread).where(Thread.id == thread_id).values(**metrics)
        )
        return bool(result.rowcount)

    def list_active_threads(self, *, since: datetime, limit: int) -> list[Thread]:
        """Return visible threads active since ``since``, most recent first."""
        stmt = (
            select(Thread)
            .where(Thread.last_activity_at >= since, Thread.is_hidden.is_(False))
            .order_by(Thread.last_activity_at.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def list_trending_threads(self, *, since: datetime, limit: int) -> list[Thread]:
        """Return visible, unlocked threads active since ``since`` by engagement."""
        stmt = (
            select(Thread)
            .where(
                Thread.last_activity_at >= since,
                Thread.is_hidden.is_(False),
                Thread.is_locked.is_(False),
            )
            .order_by(
                Thread.total_likes.desc(),
                Thread.total_reshares.desc(),
                Thread.post_count.desc(),
                Thread.last_activity_at.desc(),
            )
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def thread_participant_rows(self, thread_id: str) -> list[Any]:
        """Aggregate visible member posts of a thread per author."""
        stmt = (
            select(
                Post.author_id,
                User.username,
                User.display_name,
                func.count(Post.id).label("post_count"),
                func.coalesce(func.sum(Post.like_count), 0).label("total_likes"),
                func.coalesce(func.sum(Post.comment_count), 0).label("total_replies"),
                func.min(Post.published_at).label("first_post_at"),
                func.max(Post.published_at).label("last_post_at"),
            )
            .join(User, User.id == Post.author_id)
            .where(Post.thread_id == thread_id, Post.is_hidden.is_(False))
            .group_by(Post.author_id, User.username, User.display_name)
        )
        return list(self.session.execute(stmt))

    # -- reactions ----------------------------------------------------------

    def find_reaction(self, user_id: str, post_id: str) -> Reaction | None:
        """Return the user's live reaction on a post, if any."""
        result = self.session.execute(
            select(Reaction).where(Reaction.user_id == user_id, Reaction.post_id == post_id)
        )
        return result.scalars().first()

    def get_reaction(self, reaction_id: str) -> Reaction | None:
        """Return a reaction by identifier."""
        return self.session.get(Reaction, reaction_id)

    def lock_reaction(self, reaction_id: str) -> Reaction | None:
        """Re-read a reaction from the database with its row locked.

        Returns None when the row has been deleted, even if a stale
        instance is still held by the session.
        """
        result = self.session.execute(
            select(Reaction)
            .where(Reaction.id == reaction_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    def insert_reaction(
        self,
        *,
        user_id: str,
        post_id: str,
        reaction_type: ReactionType,
        created_at: datetime | None = None,
    ) -> Reaction:
        """Insert a reaction row and flush it."""
        reaction = Reaction(user_id=user_id, post_id=post_id, type=reaction_type)
        if created_at is not None:
            reaction.created_at = created_at
        self.session.add(reaction)
        self.session.flush()
        return reaction

    def delete_reaction(self, reaction: Reaction) -> None:
        """Delete a reaction row and flush the deletion."""
        self.session.delete(reaction)
        self.session.flush()

    def list_reactions(
        self,
        criteria: ReactionFilter,
        *,
        page: int,
        limit: int,
    ) -> tuple[list[Reaction], int]:
        """Return one page of matching reactions, newest first, plus the total."""
        conditions = []
        if criteria.post_id is not None:
            conditions.append(Reaction.post_id == criteria.post_id)
        if criteria.user_id is not None:
            conditions.append(Reaction.user_id == criteria.user_id)
        if criteria.type is not None:
            conditions.append(Reaction.type == criteria.type)

        total = self.session.execute(
            select(func.count(Reaction.id)).where(*conditions)
        ).scalar_one()
        rows = self.session.execute(
            select(Reaction)
            .where(*conditions)
            .order_by(Reaction.created_at.desc(), Reaction.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()
        return list(rows), int(total)

    def count_reactions_by_type(self, post_id: str) -> dict[ReactionType, int]:
        """Group the live reactions on a post by type."""
        rows = self.session.execute(
            select(Reaction.type, func.count(Reaction.id))
            .where(Reaction.post_id == post_id)
            .group_by(Reaction.type)
        )
        return {reaction_type: int(count) for reaction_type, count in rows}

    def list_reactors(
        self,
        post_id: str,
        reaction_type: ReactionType,
        limit: int,
    ) -> list[tuple[Reaction, User]]:
        """Return reactions of one type on a post with their users, newest first."""
        rows = self.session.execute(
            select(Reaction, User)
            .join(User, User.id == Reaction.user_id)
            .where(Reaction.post_id == post_id, Reaction.type == reaction_type)
            .order_by(Reaction.created_at.desc())
            .limit(limit)
        )
        return [(reaction, user) for reaction, user in rows]

    def reaction_targets_for_user(self, user_id: str) -> list[tuple[str, str | None]]:
        """Return the distinct (post_id, thread_id) pairs a user has reacted to."""
        rows = self.session.execute(
            select(Reaction.post_id, Post.thread_id)
            .join(Post, Post.id == Reaction.post_id)
            .where(Reaction.user_id == user_id)
            .distinct()
        )
        return [(post_id, thread_id) for post_id, thread_id in rows]

    def delete_reactions_for_user(self, user_id: str) -> int:
        """Delete every reaction held by a user and return how many went."""
        result = self.session.execute(
            delete(Reaction).where(Reaction.user_id == user_id)
        )
        return int(result.rowcount or 0)

    def reaction_velocity_rows(
        self,
        *,
        window_start: datetime,
        recent_start: datetime,
        limit: int,
    ) -> list[Any]:
        """Aggregate public reactions per visible post for trending.

        Each row carries ``post_id``, ``total_reactions`` (inside the window)
        and ``recent_reactions`` (since ``recent_start``). Posts without
        recent reactions are excluded.
        """
        recent = func.sum(case((Reaction.created_at >= recent_start, 1), else_=0))
        stmt = (
            select(
                Reaction.post_id,
                func.count(Reaction.id).label("total_reactions"),
                recent.label("recent_reactions"),
            )
            .join(Post, Post.id == Reaction.post_id)
            .where(
                Post.is_hidden.is_(False),
                Reaction.type.in_(PUBLIC_REACTION_TYPES),
                Reaction.created_at >= window_start,
            )
            .group_by(Reaction.post_id)
            .having(recent > 0)
            .order_by(recent.desc(), func.count(Reaction.id).desc(), Reaction.post_id.asc())
            .limit(limit)
        )
        return list(self.session.execute(stmt))
