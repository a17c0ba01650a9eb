"""Signal feed ranking.

``rank_feed`` is the pure filter/sort/paginate step. ``SignalFeedService``
loads the candidate window from the database, scores every thread and hands
the scored set to ``rank_feed``. Nothing is cached: each fetch rescores from
current rows.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from townsquare.core.settings import settings
from townsquare.db.time import utcnow
from townsquare.models import Comment, Community, Post
from townsquare.repositories.post_repo import PostRepository
from townsquare.services.engagement import CommentSample, aggregate_engagement
from townsquare.services.errors import InvalidRequestError
from townsquare.services.signal import SignalMetrics, compute_signal

logger = logging.getLogger(__name__)

FEED_HOT = "hot"
FEED_RISING = "rising"
FEED_DEEP = "deep"
FEED_LIVE = "live"
FEED_FILTERS = (FEED_HOT, FEED_RISING, FEED_DEEP, FEED_LIVE)

RISING_MIN_VELOCITY = 2
DEEP_REPLY_DEPTH_WEIGHT = 10
RECENT_PARTICIPANT_LIMIT = 5
PREVIEW_REPLY_LIMIT = 3
PREVIEW_REPLY_CHARS = 80


@dataclass(frozen=True)
class Participant:
    id: int
    username: str


@dataclass(frozen=True)
class PreviewReply:
    author: str
    content: str


@dataclass(frozen=True)
class ThreadDetails:
    """Presentational data carried alongside the metrics; never affects ranking."""

    post: Post
    author: Participant
    community: Community | None
    comment_count: int
    recent_participants: list[Participant] = field(default_factory=list)
    preview_replies: list[PreviewReply] = field(default_factory=list)


@dataclass(frozen=True)
class ScoredThread:
    post_id: int
    metrics: SignalMetrics
    details: ThreadDetails | None = None


@dataclass(frozen=True)
class FeedPage:
    items: list[ScoredThread]
    total: int
    has_more: bool
    live_count: int
    filter: str


def _deep_weight(thread: ScoredThread) -> float:
    return thread.metrics.unique_voices + thread.metrics.reply_depth * DEEP_REPLY_DEPTH_WEIGHT


# filter -> (predicate, primary sort key). Ties fall back to signal score then
# newest post id so that pages never overlap or skip.
_FEED_RULES: dict[str, tuple[Callable[[ScoredThread], bool], Callable[[ScoredThread], float]]] = {
    FEED_HOT: (lambda t: True, lambda t: t.metrics.signal_score),
    FEED_RISING: (
        lambda t: t.metrics.conversation_velocity >= RISING_MIN_VELOCITY,
        lambda t: t.metrics.conversation_velocity,
    ),
    FEED_DEEP: (lambda t: t.metrics.is_deep_thread, _deep_weight),
    FEED_LIVE: (lambda t: t.metrics.is_live, lambda t: t.metrics.live_score),
}


def rank_feed(
    threads: Sequence[ScoredThread],
    feed_filter: str = FEED_HOT,
    *,
    limit: int,
    offset: int = 0,
) -> FeedPage:
    """Filter, order and paginate a scored set.

    Raises:
        InvalidRequestError: On an unknown filter or negative paging values.
    """
    if feed_filter not in _FEED_RULES:
        raise InvalidRequestError(f"Unknown feed filter: {feed_filter}")
    if limit < 0 or offset < 0:
        raise InvalidRequestError("limit and offset must be non-negative")

    predicate, primary = _FEED_RULES[feed_filter]
    selected = [thread for thread in threads if predicate(thread)]
    selected.sort(key=lambda t: (-primary(t), -t.metrics.signal_score, -t.post_id))

    return FeedPage(
        items=selected[offset:offset + limit],
        total=len(selected),
        has_more=offset + limit < len(selected),
        live_count=sum(1 for thread in threads if thread.metrics.is_live),
        filter=feed_filter,
    )


def _preview(body: str) -> str:
    if len(body) > PREVIEW_REPLY_CHARS:
        return body[:PREVIEW_REPLY_CHARS] + "..."
    return body


class SignalFeedService:
    """Builds ranked signal feeds from the content store."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = PostRepository(db)

    def score_candidates(self, feed_filter: str, now: datetime | None = None) -> list[ScoredThread]:
        """Load the candidate window for ``feed_filter`` and score each thread."""
        now = now or utcnow()
        if feed_filter == FEED_LIVE:
            # An old thread can still be live if someone replied recently.
            window_days, limit = settings.live_window_days, settings.live_candidate_limit
        else:
            window_days, limit = settings.signal_window_days, settings.signal_candidate_limit

        posts = self.repo.list_signal_candidates(now - timedelta(days=window_days), limit)
        post_ids = [post.id for post in posts]
        comments = self.repo.recent_comments(post_ids, settings.comment_window)
        counts = self.repo.comment_counts(post_ids)
        communities = self.repo.communities(post.community_id for post in posts)
        user_ids = {post.author_user_id for post in posts}
        for window in comments.values():
            user_ids.update(comment.author_user_id for comment in window)
        usernames = self.repo.usernames(user_ids)

        scored = [
            self._score_post(
                post,
                comments.get(post.id, []),
                counts.get(post.id, 0),
                communities.get(post.community_id),
                usernames,
                now,
            )
            for post in posts
        ]
        logger.debug("Scored %d %s feed candidates", len(scored), feed_filter)
        return scored

    def fetch(
        self,
        feed_filter: str = FEED_HOT,
        *,
        limit: int = 20,
        offset: int = 0,
        now: datetime | None = None,
    ) -> FeedPage:
        """Return one page of the requested signal feed."""
        if feed_filter not in FEED_FILTERS:
            raise InvalidRequestError(f"Unknown feed filter: {feed_filter}")
        threads = self.score_candidates(feed_filter, now)
        return rank_feed(threads, feed_filter, limit=limit, offset=offset)

    def _score_post(
        self,
        post: Post,
        window: list[Comment],
        comment_count: int,
        community: Community | None,
        usernames: dict[int, str],
        now: datetime,
    ) -> ScoredThread:
        samples = [
            CommentSample(
                author_id=comment.author_user_id,
                parent_id=comment.parent_id,
                created_at=comment.created_at,
                length=len(comment.body),
            )
            for comment in window
        ]
        counters = aggregate_engagement(
            samples,
            post_author_id=post.author_user_id,
            community_creator_id=community.creator_user_id if community else None,
            now=now,
            total_comments=comment_count,
        )
        metrics = compute_signal(post.score, post.created_at, counters, now)

        participants: list[Participant] = []
        seen: set[int] = set()
        for comment in window:
            if comment.author_user_id in seen:
                continue
            seen.add(comment.author_user_id)
            participants.append(
                Participant(comment.author_user_id, usernames.get(comment.author_user_id, ""))
            )
            if len(participants) == RECENT_PARTICIPANT_LIMIT:
                break

        details = ThreadDetails(
            post=post,
            author=Participant(post.author_user_id, usernames.get(post.author_user_id, "")),
            community=community,
            comment_count=comment_count,
            recent_participants=participants,
            preview_replies=[
                PreviewReply(usernames.get(comment.author_user_id, ""), _preview(comment.body))
                for comment in window[:PREVIEW_REPLY_LIMIT]
            ],
        )
        return ScoredThread(post_id=post.id, metrics=metrics, details=details)
