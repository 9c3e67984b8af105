"""Reaction ledger: the source of truth for who reacted to what.

The ledger enforces one live reaction per (user, post) and settles the
affected counters inside the same unit of work as every mutation, with the
post row (and then the thread row) locked so concurrent reactions on one
post serialize instead of losing updates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar

from sqlalchemy.exc import SQLAlchemyError

from threadline.core.settings import settings
from threadline.models import Reaction, ReactionType
from threadline.repositories.engagement_repo import EngagementRepository, ReactionFilter
from threadline.services.counters import CounterMaintainer, PostCounts
from threadline.services.errors import ConflictError, NotFound
from threadline.services.validation import parse_identifier, parse_page, parse_reaction_type

logger = logging.getLogger(__name__)

__all__ = [
    "BulkRemovalResult",
    "Created",
    "ReactionLedger",
    "ReactionOutcome",
    "ReactionPage",
    "ReactionRecord",
    "ReactionStats",
    "Reactor",
    "Removed",
    "Replaced",
]


@dataclass(frozen=True)
class ReactionRecord:
    """Immutable snapshot of a reaction row."""

    id: str
    user_id: str
    post_id: str
    type: ReactionType
    created_at: datetime

    @classmethod
    def from_model(cls, reaction: Reaction) -> ReactionRecord:
        """Capture a reaction's columns before the row can change or go away."""
        return cls(
            id=reaction.id,
            user_id=reaction.user_id,
            post_id=reaction.post_id,
            type=reaction.type,
            created_at=reaction.created_at,
        )


@dataclass(frozen=True)
class Created:
    """A new reaction was recorded where the user had none."""

    kind: ClassVar[str] = "created"

    reaction: ReactionRecord
    counts: PostCounts | None = None


@dataclass(frozen=True)
class Removed:
    """The user's reaction was removed (toggle-off or explicit removal)."""

    kind: ClassVar[str] = "removed"

    reaction: ReactionRecord
    counts: PostCounts | None = None


@dataclass(frozen=True)
class Replaced:
    """The user's reaction changed type: old row removed, new row created."""

    kind: ClassVar[str] = "replaced"

    previous: ReactionRecord
    reaction: ReactionRecord
    counts: PostCounts | None = None


ReactionOutcome = Created | Removed | Replaced


@dataclass(frozen=True)
class ReactionPage:
    """One page of reactions, newest first."""

    items: list[ReactionRecord]
    total: int
    page: int
    limit: int

    @property
    def has_more(self) -> bool:
        """Return True when later pages exist."""
        return (self.page - 1) * self.limit + len(self.items) < self.total


@dataclass(frozen=True)
class ReactionStats:
    """Per-type reaction counts for a post, private kinds included."""

    like_count: int
    repost_count: int
    bookmark_count: int
    report_count: int

    @property
    def total_engagement(self) -> int:
        """Return the public engagement total (likes plus reposts)."""
        return self.like_count + self.repost_count


@dataclass(frozen=True)
class Reactor:
    """A user who reacted to a post with a given type."""

    user_id: str
    username: str
    display_name: str | None
    reacted_at: datetime


@dataclass
class BulkRemovalResult:
    """Outcome of removing every reaction held by one user."""

    removed: int = 0
    posts_recomputed: list[str] = field(default_factory=list)
    threads_recomputed: list[str] = field(default_factory=list)
    failed_posts: list[str] = field(default_factory=list)
    failed_threads: list[str] = field(default_factory=list)


class ReactionLedger:
    """Creates, replaces and removes reactions and settles counters."""

    def __init__(
        self,
        repo: EngagementRepository,
        counters: CounterMaintainer | None = None,
    ) -> None:
        self.repo = repo
        self.counters = counters or CounterMaintainer(repo)

    # -- mutations ------------------------------------------------------------

    def apply_reaction(
        self,
        user_id: str,
        post_id: str,
        reaction_type: ReactionType | str,
        *,
        strict: bool = False,
    ) -> ReactionOutcome:
        """Record a user's reaction on a post.

        Args:
            user_id: Reacting user.
            post_id: Target post.
            reaction_type: One of the known reaction types.
            strict: When True, resubmitting the type the user already holds
                raises ConflictError instead of toggling it off.

        Returns:
            Created when the user had no reaction, Removed when the same
            type was resubmitted, Replaced when the type changed.

        Raises:
            ValidationError: For malformed identifiers or type.
            NotFound: If the user or post does not exist.
            ConflictError: In strict mode on a same-type resubmission.
        """
        user_id = parse_identifier(user_id, "user_id")
        post_id = parse_identifier(post_id, "post_id")
        kind = parse_reaction_type(reaction_type)

        with self.repo.unit_of_work():
            if self.repo.find_user(user_id) is None:
                raise NotFound("User", user_id)
            post = self.repo.lock_post(post_id)
            if post is None:
                raise NotFound("Post", post_id)

            existing = self.repo.find_reaction(user_id, post_id)
            if existing is None:
                current = self.repo.insert_reaction(
                    user_id=user_id,
                    post_id=post_id,
                    reaction_type=kind,
                )
                record = ReactionRecord.from_model(current)
                counts = self._settle(post_id, post.thread_id)
                outcome: ReactionOutcome = Created(reaction=record, counts=counts)
            elif existing.type == kind:
                if strict:
                    raise ConflictError(
                        f"User {user_id} already reacted to post {post_id} with {kind.value}"
                    )
                previous = ReactionRecord.from_model(existing)
                self.repo.delete_reaction(existing)
                counts = self._settle(post_id, post.thread_id)
                outcome = Removed(reaction=previous, counts=counts)
            else:
                previous = ReactionRecord.from_model(existing)
                self.repo.delete_reaction(existing)
                current = self.repo.insert_reaction(
                    user_id=user_id,
                    post_id=post_id,
                    reaction_type=kind,
                )
                record = ReactionRecord.from_model(current)
                counts = self._settle(post_id, post.thread_id)
                outcome = Replaced(previous=previous, reaction=record, counts=counts)

        logger.info(
            "Reaction %s: user=%s post=%s type=%s",
            outcome.kind,
            user_id,
            post_id,
            kind.value,
        )
        return outcome

    def remove_reaction(self, reaction_id: str) -> Removed:
        """Delete a specific reaction and settle the counters it fed.

        Raises:
            NotFound: If the reaction does not exist.
        """
        reaction_id = parse_identifier(reaction_id, "reaction_id")
        with self.repo.unit_of_work():
            reaction = self.repo.get_reaction(reaction_id)
            if reaction is None:
                raise NotFound("Reaction", reaction_id)
            post = self.repo.lock_post(reaction.post_id)
            # The row may have gone while the post lock was awaited.
            reaction = self.repo.lock_reaction(reaction_id)
            if reaction is None:
                raise NotFound("Reaction", reaction_id)
            previous = ReactionRecord.from_model(reaction)
            self.repo.delete_reaction(reaction)
            thread_id = post.thread_id if post is not None else None
            counts = self._settle(previous.post_id, thread_id)

        logger.info("Reaction removed: id=%s post=%s", reaction_id, previous.post_id)
        return Removed(reaction=previous, counts=counts)

    def remove_all_for_user(self, user_id: str) -> BulkRemovalResult:
        """Delete every reaction a user holds and recompute what they fed.

        Each affected post is recomputed once, then each affected thread
        once, each in its own unit of work. A failure on one item is logged
        and recorded without stopping the rest; recomputation is idempotent,
        so a partial run can simply be repeated.

        Raises:
            NotFound: If the user does not exist.
        """
        user_id = parse_identifier(user_id, "user_id")
        with self.repo.unit_of_work():
            if self.repo.find_user(user_id) is None:
                raise NotFound("User", user_id)
            targets = self.repo.reaction_targets_for_user(user_id)
            removed = self.repo.delete_reactions_for_user(user_id)

        result = BulkRemovalResult(removed=removed)
        post_ids = sorted({post_id for post_id, _ in targets})
        thread_ids = sorted({thread_id for _, thread_id in targets if thread_id})

        for post_id in post_ids:
            try:
                with self.repo.unit_of_work():
                    self.repo.lock_post(post_id)
                    self.counters.recompute_post_counts(post_id)
            except SQLAlchemyError as e:
                logger.error("Failed to recompute counts for post %s: %s", post_id, e, exc_info=True)
                result.failed_posts.append(post_id)
            else:
                result.posts_recomputed.append(post_id)

        for thread_id in thread_ids:
            try:
                with self.repo.unit_of_work():
                    self.repo.lock_thread(thread_id)
                    self.counters.recompute_thread_metrics(thread_id)
            except SQLAlchemyError as e:
                logger.error(
                    "Failed to recompute metrics for thread %s: %s", thread_id, e, exc_info=True
                )
                result.failed_threads.append(thread_id)
            else:
                result.threads_recomputed.append(thread_id)

        logger.info(
            "Removed %d reactions for user %s across %d posts and %d threads",
            removed,
            user_id,
            len(post_ids),
            len(thread_ids),
        )
        return result

    def _settle(self, post_id: str, thread_id: str | None) -> PostCounts | None:
        counts = self.counters.recompute_post_counts(post_id)
        if thread_id is not None:
            self.repo.lock_thread(thread_id)
            self.counters.recompute_thread_metrics(thread_id)
        return counts

    # -- read-only projections -------------------------------------------------

    def reaction_for(self, user_id: str, post_id: str) -> ReactionRecord | None:
        """Return the user's current reaction on a post, if any."""
        user_id = parse_identifier(user_id, "user_id")
        post_id = parse_identifier(post_id, "post_id")
        reaction = self.repo.find_reaction(user_id, post_id)
        return ReactionRecord.from_model(reaction) if reaction is not None else None

    def reactions_for_post(
        self,
        post_id: str,
        *,
        page: int = 1,
        limit: int | None = None,
    ) -> ReactionPage:
        """Return a page of reactions on a post, newest first."""
        post_id = parse_identifier(post_id, "post_id")
        page, limit = parse_page(
            page,
            settings.reactions_page_size if limit is None else limit,
            settings.reactions_max_page_size,
        )
        if self.repo.find_post(post_id) is None:
            raise NotFound("Post", post_id)
        return self._page(ReactionFilter(post_id=post_id), page, limit)

    def reactions_for_user(
        self,
        user_id: str,
        reaction_type: ReactionType | str | None = None,
        *,
        page: int = 1,
        limit: int | None = None,
    ) -> ReactionPage:
        """Return a page of a user's reactions, optionally of one type."""
        user_id = parse_identifier(user_id, "user_id")
        kind = parse_reaction_type(reaction_type) if reaction_type is not None else None
        page, limit = parse_page(
            page,
            settings.reactions_page_size if limit is None else limit,
            settings.reactions_max_page_size,
        )
        if self.repo.find_user(user_id) is None:
            raise NotFound("User", user_id)
        return self._page(ReactionFilter(user_id=user_id, type=kind), page, limit)

    def post_reaction_stats(self, post_id: str) -> ReactionStats:
        """Return counts of every reaction type on a post."""
        post_id = parse_identifier(post_id, "post_id")
        if self.repo.find_post(post_id) is None:
            raise NotFound("Post", post_id)
        by_type = self.repo.count_reactions_by_type(post_id)
        return ReactionStats(
            like_count=by_type.get(ReactionType.LIKE, 0),
            repost_count=by_type.get(ReactionType.REPOST, 0),
            bookmark_count=by_type.get(ReactionType.BOOKMARK, 0),
            report_count=by_type.get(ReactionType.REPORT, 0),
        )

    def post_reactors(
        self,
        post_id: str,
        reaction_type: ReactionType | str,
        limit: int = 50,
    ) -> list[Reactor]:
        """Return users who reacted to a post with ``reaction_type``.

        Raises:
            NotFound: If the post does not exist.
        """
        post_id = parse_identifier(post_id, "post_id")
        kind = parse_reaction_type(reaction_type)
        _, limit = parse_page(1, limit, settings.reactions_max_page_size)
        if self.repo.find_post(post_id) is None:
            raise NotFound("Post", post_id)
        return [
            Reactor(
                user_id=user.id,
                username=user.username,
                display_name=user.display_name,
                reacted_at=reaction.created_at,
            )
            for reaction, user in self.repo.list_reactors(post_id, kind, limit)
        ]

    def _page(self, criteria: ReactionFilter, page: int, limit: int) -> ReactionPage:
        rows, total = self.repo.list_reactions(criteria, page=page, limit=limit)
        return ReactionPage(
            items=[ReactionRecord.from_model(row) for row in rows],
            total=total,
            page=page,
            limit=limit,
        )
