"""Trending posts ranked by recent reaction velocity."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from threadline.core.settings import settings
from threadline.db.time import hours_before, utcnow
from threadline.repositories.engagement_repo import EngagementRepository
from threadline.services.errors import ValidationError

logger = logging.getLogger(__name__)

__all__ = ["TrendingEstimator", "TrendingPost"]


@dataclass(frozen=True)
class TrendingPost:
    """A post's standing in the trending ranking."""

    post_id: str
    reaction_velocity: float
    total_reactions: int
    recent_reactions: int


class TrendingEstimator:
    """Ranks posts by likes and reposts received recently.

    Only reactions inside the trending window (24 hours by default) count.
    Ranking uses raw counts: recent reactions first, window total second.
    Velocity is reported for display and never used to rank, so a very
    short ``hours_back`` cannot distort the order.
    """

    def __init__(self, repo: EngagementRepository, window_hours: int | None = None) -> None:
        self.repo = repo
        if window_hours is None:
            window_hours = settings.trending_window_hours
        self.window_hours = window_hours

    def trending_posts(
        self,
        hours_back: int | None = None,
        limit: int | None = None,
        *,
        now: datetime | None = None,
    ) -> list[TrendingPost]:
        """Return the top ``limit`` posts by recent reaction count.

        Args:
            hours_back: Length of the "recent" window in hours.
            limit: Maximum number of posts returned.
            now: Reference time; defaults to the current UTC time.

        Raises:
            ValidationError: If ``hours_back`` or ``limit`` is not positive.
        """
        if hours_back is None:
            hours_back = settings.trending_default_hours_back
        if limit is None:
            limit = settings.trending_default_limit
        if hours_back <= 0:
            raise ValidationError("hours_back must be positive")
        if limit <= 0:
            raise ValidationError("limit must be positive")

        reference = now or utcnow()
        rows = self.repo.reaction_velocity_rows(
            window_start=hours_before(reference, self.window_hours),
            recent_start=hours_before(reference, hours_back),
            limit=limit,
        )
        ranked = [
            TrendingPost(
                post_id=row.post_id,
                reaction_velocity=int(row.recent_reactions) / hours_back,
                total_reactions=int(row.total_reactions),
                recent_reactions=int(row.recent_reactions),
            )
            for row in rows
        ]
        logger.debug("Trending over %dh: %d posts", hours_back, len(ranked))
        return ranked
