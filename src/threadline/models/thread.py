"""SQLAlchemy models for conversation threads."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base
from threadline.db.time import utcnow
from threadline.models.user import new_id


class Thread(Base):
    """Materialized aggregate over a rooted conversation.

    Every derived column can be rebuilt from the member posts; the row is a
    cache, not a source of truth.
    """

    __tablename__ = "thread"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # 1:1 with the root post. Kept without a foreign key to avoid a
    # post <-> thread dependency cycle at table creation.
    original_post_id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    participant_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    post_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    max_depth: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_likes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_reshares: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
