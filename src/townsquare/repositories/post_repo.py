"""Data access helpers for posts, comments and the records around them."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from townsquare.models import Comment, Community, Post, User
from townsquare.models.moderation import TARGET_COMMENT, TARGET_POST

__all__ = ["ContentSnapshot", "PostRepository"]


@dataclass(frozen=True)
class ContentSnapshot:
    """Reviewable copy of a reported post or comment."""

    target_type: str
    target_id: int
    author: str
    author_user_id: int
    text: str
    preview: str
    created_at: datetime
    community_id: int
    community_name: str
    # Only set for comments: the title of the thread they belong to.
    post_title: str | None = None


class PostRepository:
    """Thin wrapper around database access for post and comment entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a live (not deleted) post by identifier."""
        return self.session.scalars(
            select(Post).where(Post.id == post_id, Post.deleted.is_(False))
        ).first()

    def list_signal_candidates(self, since: datetime, limit: int) -> list[Post]:
        """Return live posts created at or after ``since``, newest first."""
        result = self.session.scalars(
            select(Post)
            .where(Post.deleted.is_(False), Post.created_at >= since)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
        return list(result)

    def recent_comments(self, post_ids: Iterable[int], per_post: int) -> dict[int, list[Comment]]:
        """Return up to ``per_post`` newest live comments for each post.

        Uses a window function so the bound applies per post, not globally.
        """
        ids = list(post_ids)
        if not ids:
            return {}
        position = (
            func.row_number()
            .over(
                partition_by=Comment.post_id,
                order_by=[Comment.created_at.desc(), Comment.id.desc()],
            )
            .label("position")
        )
        ranked = (
            select(Comment.id.label("comment_id"), position)
            .where(Comment.post_id.in_(ids), Comment.deleted.is_(False))
            .subquery()
        )
        rows = self.session.scalars(
            select(Comment)
            .join(ranked, ranked.c.comment_id == Comment.id)
            .where(ranked.c.position <= per_post)
            .order_by(Comment.post_id, Comment.created_at.desc(), Comment.id.desc())
        )
        window: dict[int, list[Comment]] = {post_id: [] for post_id in ids}
        for comment in rows:
            window[comment.post_id].append(comment)
        return window

    def comment_counts(self, post_ids: Iterable[int]) -> dict[int, int]:
        """Return the number of live comments per post."""
        ids = list(post_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(Comment.post_id, func.count())
            .where(Comment.post_id.in_(ids), Comment.deleted.is_(False))
            .group_by(Comment.post_id)
        )
        counts = {post_id: 0 for post_id in ids}
        for post_id, total in rows:
            counts[post_id] = int(total)
        return counts

    def list_comments(self, post_id: int) -> list[Comment]:
        """Return every live comment of a post as a flat list, oldest first."""
        result = self.session.scalars(
            select(Comment)
            .where(Comment.post_id == post_id, Comment.deleted.is_(False))
            .order_by(Comment.created_at, Comment.id)
        )
        return list(result)

    def usernames(self, user_ids: Iterable[int]) -> dict[int, str]:
        ids = set(user_ids)
        if not ids:
            return {}
        rows = self.session.execute(select(User.id, User.username).where(User.id.in_(ids)))
        return {user_id: username for user_id, username in rows}

    def communities(self, community_ids: Iterable[int]) -> dict[int, Community]:
        ids = set(community_ids)
        if not ids:
            return {}
        rows = self.session.scalars(select(Community).where(Community.id.in_(ids)))
        return {community.id: community for community in rows}

    def snapshot(self, target_type: str, target_id: int) -> ContentSnapshot | None:
        """Return a read-only view of a report target, or None if it is gone."""
        if target_type == TARGET_POST:
            row = self.session.execute(
                select(Post, User.username, Community.name)
                .join(User, User.id == Post.author_user_id)
                .join(Community, Community.id == Post.community_id)
                .where(Post.id == target_id, Post.deleted.is_(False))
            ).first()
            if row is None:
                return None
            post, author, community_name = row
            text = post.title + (f"\n\n{post.body_md}" if post.body_md else "")
            return ContentSnapshot(
                target_type=TARGET_POST,
                target_id=post.id,
                author=author,
                author_user_id=post.author_user_id,
                text=text,
                preview=post.title,
                created_at=post.created_at,
                community_id=post.community_id,
                community_name=community_name,
            )
        if target_type == TARGET_COMMENT:
            row = self.session.execute(
                select(Comment, User.username, Post.title, Post.community_id, Community.name)
                .join(User, User.id == Comment.author_user_id)
                .join(Post, Post.id == Comment.post_id)
                .join(Community, Community.id == Post.community_id)
                .where(
                    Comment.id == target_id,
                    Comment.deleted.is_(False),
                    Post.deleted.is_(False),
                )
            ).first()
            if row is None:
                return None
            comment, author, post_title, community_id, community_name = row
            return ContentSnapshot(
                target_type=TARGET_COMMENT,
                target_id=comment.id,
                author=author,
                author_user_id=comment.author_user_id,
                text=comment.body,
                preview=comment.body,
                created_at=comment.created_at,
                community_id=community_id,
                community_name=community_name,
                post_title=post_title,
            )
        return None

    def mark_post_deleted(self, post_id: int) -> bool:
        """Flag a post as deleted.

        Returns:
            True if this call deleted the post, False if it was already gone.
        """
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id, Post.deleted.is_(False))
            .values(deleted=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def mark_comment_deleted(self, comment_id: int) -> bool:
        """Flag a comment as deleted; same contract as ``mark_post_deleted``."""
        result = self.session.execute(
            update(Comment)
            .where(Comment.id == comment_id, Comment.deleted.is_(False))
            .values(deleted=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1
