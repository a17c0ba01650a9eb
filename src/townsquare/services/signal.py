"""Conversation signal scoring.

Turns engagement counters into the composite ``signal_score`` used by the
hot feed, the ``live_score`` used by the live feed, and the short human
readable reasons shown next to each thread.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from townsquare.db.time import as_utc
from townsquare.services.engagement import EngagementCounters

# Signal score weights
REPLY_DEPTH_WEIGHT = 15
VOICE_WEIGHT = 2
VOICE_CAP = 50
VELOCITY_WEIGHT = 7
CREATOR_REPLY_WEIGHT = 3
CREATOR_BOOST_SHARE = 0.25
CREATOR_BOOST_FLOOR = 10
SUBSTANCE_MIN_AVG_LENGTH = 100
SUBSTANCE_BONUS = 1.1
DISCUSSION_MIN_COMMENTS = 5
DISCUSSION_BONUS = 1.2
DECAY_OFFSET_HOURS = 2
DECAY_EXPONENT = 1.5

# Live score weights
LIVE_RECENT_WEIGHT = 10
LIVE_VELOCITY_WEIGHT = 3
LIVE_VOICE_WEIGHT = 2
# (minutes since last activity strictly below, multiplier), checked in order.
LIVE_RECENCY_MULTIPLIERS = ((10, 2.0), (30, 1.5), (60, 1.2))
LIVE_COOLING_MINUTES = 120
LIVE_COOLING_MULTIPLIER = 0.5

# Classification thresholds
LIVE_MIN_RECENT = 1
LIVE_MIN_VELOCITY = 3
DEEP_MIN_REPLY_DEPTH = 0.4
DEEP_MIN_VOICES = 5


@dataclass(frozen=True)
class SignalMetrics:
    """Derived, never persisted, thread metrics."""

    unique_voices: int
    reply_depth: float
    conversation_velocity: int
    replies_in_last_30_min: int
    replies_in_last_2_hours: int
    has_creator_reply: bool
    avg_reply_length: float
    last_activity_at: datetime | None
    is_live: bool
    is_deep_thread: bool
    signal_score: float
    live_score: float
    reasons: tuple[str, ...]


def hours_between(start: datetime, end: datetime) -> float:
    return (as_utc(end) - as_utc(start)).total_seconds() / 3600


def live_multiplier(minutes_since_activity: float) -> float:
    """Recency multiplier for the live score.

    ``inf`` (no activity at all) falls in the cooling band.
    """
    for limit, multiplier in LIVE_RECENCY_MULTIPLIERS:
        if minutes_since_activity < limit:
            return multiplier
    if minutes_since_activity > LIVE_COOLING_MINUTES:
        return LIVE_COOLING_MULTIPLIER
    return 1.0


def is_live(replies_in_last_30_min: int, replies_in_last_2_hours: int) -> bool:
    return (
        replies_in_last_30_min >= LIVE_MIN_RECENT
        or replies_in_last_2_hours >= LIVE_MIN_VELOCITY
    )


def build_signal_reasons(
    *,
    unique_voices: int,
    reply_depth: float,
    replies_in_last_30_min: int,
    conversation_velocity: int,
    has_creator_reply: bool,
    avg_reply_length: float,
) -> tuple[str, ...]:
    """Return the presentational reasons for a thread, in a fixed order."""
    reasons: list[str] = []
    if unique_voices >= 5:
        reasons.append(f"{unique_voices} people are participating")
    if reply_depth > 0.3:
        reasons.append("Replies outnumber top-level comments")
    if replies_in_last_30_min >= 2:
        reasons.append("Very active right now")
    elif conversation_velocity >= 3:
        reasons.append("Active in the last 2 hours")
    if has_creator_reply:
        reasons.append("Creator is participating")
    if avg_reply_length > SUBSTANCE_MIN_AVG_LENGTH:
        reasons.append("In-depth responses")
    return tuple(reasons)


def compute_signal(
    score: int,
    created_at: datetime,
    counters: EngagementCounters,
    now: datetime,
) -> SignalMetrics:
    """Score one thread.

    Args:
        score: Net votes on the post.
        created_at: Post creation time.
        counters: Output of ``aggregate_engagement`` for the same ``now``.
        now: Reference time.

    Returns:
        The full metric set, including both scores and the reasons.
    """
    reply_depth = counters.replies_with_parent / max(1, counters.window_size)
    # Clock skew can put created_at slightly in the future; never let the
    # decay base drop below the offset.
    hours_old = max(0.0, hours_between(created_at, now))
    velocity = counters.replies_in_last_2_hours

    signal_score = float(score)
    signal_score += reply_depth * REPLY_DEPTH_WEIGHT
    signal_score += min(counters.unique_voices, VOICE_CAP) * VOICE_WEIGHT
    signal_score += velocity * VELOCITY_WEIGHT

    max_creator_boost = max(signal_score * CREATOR_BOOST_SHARE, CREATOR_BOOST_FLOOR)
    signal_score += min(counters.creator_replies * CREATOR_REPLY_WEIGHT, max_creator_boost)

    if counters.avg_reply_length > SUBSTANCE_MIN_AVG_LENGTH:
        signal_score *= SUBSTANCE_BONUS
    if counters.total_comments > score and counters.total_comments > DISCUSSION_MIN_COMMENTS:
        signal_score *= DISCUSSION_BONUS

    signal_score = signal_score / (hours_old + DECAY_OFFSET_HOURS) ** DECAY_EXPONENT

    if counters.last_activity_at is None:
        minutes_since_activity = float("inf")
    else:
        minutes_since_activity = hours_between(counters.last_activity_at, now) * 60

    live_score = float(
        counters.replies_in_last_30_min * LIVE_RECENT_WEIGHT
        + counters.replies_in_last_2_hours * LIVE_VELOCITY_WEIGHT
        + counters.unique_voices * LIVE_VOICE_WEIGHT
    )
    live_score *= live_multiplier(minutes_since_activity)

    has_creator_reply = counters.creator_replies > 0
    return SignalMetrics(
        unique_voices=counters.unique_voices,
        reply_depth=reply_depth,
        conversation_velocity=velocity,
        replies_in_last_30_min=counters.replies_in_last_30_min,
        replies_in_last_2_hours=counters.replies_in_last_2_hours,
        has_creator_reply=has_creator_reply,
        avg_reply_length=counters.avg_reply_length,
        last_activity_at=counters.last_activity_at,
        is_live=is_live(counters.replies_in_last_30_min, counters.replies_in_last_2_hours),
        is_deep_thread=(
            reply_depth > DEEP_MIN_REPLY_DEPTH and counters.unique_voices >= DEEP_MIN_VOICES
        ),
        signal_score=signal_score,
        live_score=live_score,
        reasons=build_signal_reasons(
            unique_voices=counters.unique_voices,
            reply_depth=reply_depth,
            replies_in_last_30_min=counters.replies_in_last_30_min,
            conversation_velocity=velocity,
            has_creator_reply=has_creator_reply,
            avg_reply_length=counters.avg_reply_length,
        ),
    )
