"""Raw engagement counters for a thread.

Everything here is a pure function of a post's recent comment window and a
reference time, so the same inputs always produce the same counters.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from townsquare.db.time import as_utc

LIVE_WINDOW = timedelta(minutes=30)
VELOCITY_WINDOW = timedelta(hours=2)


@dataclass(frozen=True)
class CommentSample:
    """The parts of a comment the aggregator looks at."""

    author_id: int
    parent_id: int | None
    created_at: datetime
    length: int


@dataclass(frozen=True)
class EngagementCounters:
    """Counters derived from a comment window.

    ``total_comments`` is the post's full comment count, which may exceed
    ``window_size`` when the window is truncated.
    """

    total_comments: int
    window_size: int
    unique_voices: int
    replies_with_parent: int
    replies_in_last_30_min: int
    replies_in_last_2_hours: int
    last_activity_at: datetime | None
    creator_replies: int
    avg_reply_length: float


def aggregate_engagement(
    comments: Sequence[CommentSample],
    *,
    post_author_id: int,
    community_creator_id: int | None,
    now: datetime,
    total_comments: int | None = None,
) -> EngagementCounters:
    """Derive engagement counters from a post's recent comments.

    Args:
        comments: Recent comments, newest first. An empty window is valid.
        post_author_id: Author of the post; their replies count as creator replies.
        community_creator_id: Creator of the hosting community, if known.
        now: Reference time for the trailing windows.
        total_comments: Full comment count; defaults to the window size.

    Returns:
        Frozen counters; all zero and ``last_activity_at=None`` for no comments.
    """
    now = as_utc(now)
    live_threshold = now - LIVE_WINDOW
    velocity_threshold = now - VELOCITY_WINDOW
    creator_ids = {post_author_id}
    if community_creator_id is not None:
        creator_ids.add(community_creator_id)

    authors: set[int] = set()
    replies_with_parent = 0
    last_30 = 0
    last_2h = 0
    creator_replies = 0
    total_length = 0
    last_activity_at: datetime | None = None

    for comment in comments:
        created_at = as_utc(comment.created_at)
        authors.add(comment.author_id)
        if comment.parent_id is not None:
            replies_with_parent += 1
        if created_at >= live_threshold:
            last_30 += 1
        if created_at >= velocity_threshold:
            last_2h += 1
        if comment.author_id in creator_ids:
            creator_replies += 1
        total_length += comment.length
        if last_activity_at is None or created_at > last_activity_at:
            last_activity_at = created_at

    window_size = len(comments)
    return EngagementCounters(
        total_comments=window_size if total_comments is None else total_comments,
        window_size=window_size,
        unique_voices=len(authors),
        replies_with_parent=replies_with_parent,
        replies_in_last_30_min=last_30,
        replies_in_last_2_hours=last_2h,
        last_activity_at=last_activity_at,
        creator_replies=creator_replies,
        avg_reply_length=total_length / window_size if window_size else 0.0,
    )
