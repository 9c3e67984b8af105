"""SQLAlchemy models for posts and related attributes."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base
from threadline.db.time import utcnow
from threadline.models.user import new_id


class Post(Base):
    """Primary content entity produced by users.

    Content is immutable once authored. The counter columns are
    denormalized and only ever written by the counter maintainer.
    """

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_thread_id", "thread_id"),
        Index("ix_post_parent_post_id", "parent_post_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id"),
        nullable=False,
    )

    # Reply chain; top-level posts have parent_post_id = NULL.
    parent_post_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("post.id"),
        nullable=True,
    )
    # A repost references another post without joining its reply tree.
    repost_of_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("post.id"),
        nullable=True,
    )
    thread_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("thread.id"),
        nullable=True,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    repost_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Direct and indirect replies inside the same thread.
    comment_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    published_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
