# src/townsquare/models/post.py
"""SQLAlchemy models for posts and their comments."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from townsquare.db.session import Base
from townsquare.db.time import utcnow


class Post(Base):
    """Top-level thread submitted to a community.

    Deletion is a flag flip performed once; a deleted post is never edited
    again and disappears from every feed and moderation view.
    """

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    community_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("community.id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    body_md: Mapped[str | None] = mapped_column(Text, nullable=True)

    upvotes: Mapped[int] = mapped_column(default=0, nullable=False)
    downvotes: Mapped[int] = mapped_column(default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    deleted: Mapped[bool] = mapped_column(default=False, nullable=False)

    @property
    def score(self) -> int:
        """Net votes."""
        return self.upvotes - self.downvotes


class Comment(Base):
    """Reply within a post.

    Threads are stored flat: ``parent_id`` is NULL for top-level comments and
    otherwise points at another comment of the same post.
    """

    __tablename__ = "comment"
    __table_args__ = (
        Index("ix_comment_post_created", "post_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comment.id"),
        nullable=True,
    )
    author_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    deleted: Mapped[bool] = mapped_column(default=False, nullable=False)
