"""Signal feed response schemas."""
from __future__ import annotations

from datetime import datetime

from townsquare.schemas.common import CamelModel
from townsquare.services.feed import FeedPage, ScoredThread


class UserRef(CamelModel):
    id: int
    username: str


class CommunityRef(CamelModel):
    id: int
    slug: str
    name: str


class PreviewReplyOut(CamelModel):
    author: str
    content: str


class SignalPostOut(CamelModel):
    """One ranked thread with its signal metrics."""

    id: int
    title: str
    content: str | None
    created_at: datetime
    score: int
    comment_count: int
    author: UserRef
    community: CommunityRef | None

    signal_score: float
    signal_reasons: list[str]
    live_score: float
    unique_voices: int
    reply_depth: float
    conversation_velocity: int
    has_creator_reply: bool
    is_live: bool
    is_deep_thread: bool
    last_activity_at: datetime | None
    replies_in_last_30_min: int
    replies_in_last_2_hours: int
    recent_participants: list[UserRef]
    preview_replies: list[PreviewReplyOut]

    @classmethod
    def from_thread(cls, thread: ScoredThread) -> SignalPostOut:
        details = thread.details
        metrics = thread.metrics
        post = details.post
        community = details.community
        return cls(
            id=post.id,
            title=post.title,
            content=post.body_md,
            created_at=post.created_at,
            score=post.score,
            comment_count=details.comment_count,
            author=UserRef(id=details.author.id, username=details.author.username),
            community=(
                CommunityRef(id=community.id, slug=community.slug, name=community.name)
                if community is not None
                else None
            ),
            signal_score=metrics.signal_score,
            signal_reasons=list(metrics.reasons),
            live_score=metrics.live_score,
            unique_voices=metrics.unique_voices,
            reply_depth=metrics.reply_depth,
            conversation_velocity=metrics.conversation_velocity,
            has_creator_reply=metrics.has_creator_reply,
            is_live=metrics.is_live,
            is_deep_thread=metrics.is_deep_thread,
            last_activity_at=metrics.last_activity_at,
            replies_in_last_30_min=metrics.replies_in_last_30_min,
            replies_in_last_2_hours=metrics.replies_in_last_2_hours,
            recent_participants=[
                UserRef(id=p.id, username=p.username) for p in details.recent_participants
            ],
            preview_replies=[
                PreviewReplyOut(author=r.author, content=r.content) for r in details.preview_replies
            ],
        )


class SignalFeedResponse(CamelModel):
    posts: list[SignalPostOut]
    total: int
    has_more: bool
    filter: str
    live_count: int

    @classmethod
    def from_page(cls, page: FeedPage) -> SignalFeedResponse:
        return cls(
            posts=[SignalPostOut.from_thread(thread) for thread in page.items],
            total=page.total,
            has_more=page.has_more,
            filter=page.filter,
            live_count=page.live_count,
        )
