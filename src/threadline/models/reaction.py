# src/threadline/models/reaction.py
"""Models capturing reactions on posts."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base
from threadline.db.time import utcnow
from threadline.models.user import new_id


class ReactionType(str, enum.Enum):
    """Closed set of engagement kinds a user can hold on a post."""

    LIKE = "LIKE"
    REPOST = "REPOST"
    BOOKMARK = "BOOKMARK"
    REPORT = "REPORT"


# Only these kinds feed the public like/repost counters and trending.
PUBLIC_REACTION_TYPES = (ReactionType.LIKE, ReactionType.REPOST)


class Reaction(Base):
    """A single user's stance on a single post."""

    __tablename__ = "reaction"
    __table_args__ = (
        # At most one reaction per (user, post), whatever its type.
        UniqueConstraint("user_id", "post_id", name="uq_reaction_user_post"),
        Index("ix_reaction_post_id", "post_id"),
        Index("ix_reaction_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[ReactionType] = mapped_column(
        Enum(ReactionType, name="reaction_type"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
