# src/townsquare/models/moderation.py
"""Models backing Open Court: reports, juror verdicts and juror statistics."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from townsquare.db.session import Base
from townsquare.db.time import utcnow

TARGET_POST = "post"
TARGET_COMMENT = "comment"
TARGET_TYPES = (TARGET_POST, TARGET_COMMENT)

REPORT_STATUS_PENDING = "pending"
REPORT_STATUS_REVIEWED = "reviewed"
REPORT_STATUS_DISMISSED = "dismissed"

VOTE_GUILTY = "guilty"
VOTE_INNOCENT = "innocent"
VOTES = (VOTE_GUILTY, VOTE_INNOCENT)

DEFAULT_ACCURACY = 50.0
DEFAULT_RANK = "Novice Juror"


class Report(Base):
    """A user flag against a post or comment.

    ``status`` leaves ``pending`` exactly once, to ``reviewed`` (content
    removed) or ``dismissed``.
    """

    __tablename__ = "report"
    __table_args__ = (
        CheckConstraint("target_type IN ('post', 'comment')", name="ck_report_target_type"),
        CheckConstraint(
            "status IN ('pending', 'reviewed', 'dismissed')",
            name="ck_report_status",
        ),
        Index("ix_report_status_created", "status", "created_at"),
        Index("ix_report_target", "target_type", "target_id"),
        # At most one open report per reporter and target; closed ones don't count.
        Index(
            "uq_report_open_per_reporter",
            "reporter_user_id",
            "target_type",
            "target_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reporter_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    # Polymorphic target: no FK so the report survives content removal.
    target_type: Mapped[str] = mapped_column(Text, nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=REPORT_STATUS_PENDING)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Verdict(Base):
    """One juror's vote on one report."""

    __tablename__ = "verdict"
    __table_args__ = (
        # The database is the source of truth against double voting.
        UniqueConstraint("report_id", "juror_user_id", name="uq_verdict_report_juror"),
        CheckConstraint("vote IN ('guilty', 'innocent')", name="ck_verdict_vote"),
        Index("ix_verdict_juror_created", "juror_user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    report_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("report.id", ondelete="CASCADE"),
        nullable=False,
    )
    juror_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    vote: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class JurorStats(Base):
    """Running tallies per juror, created on first vote."""

    __tablename__ = "juror_stats"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    cases_reviewed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    guilty_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    innocent_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accuracy: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_ACCURACY)
    rank: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_RANK)


class ModAction(Base):
    """Audit trail entry shown in a community's moderation log.

    Written alongside moderation events but never read back by the court.
    """

    __tablename__ = "mod_action"
    __table_args__ = (
        Index("ix_mod_action_community_created", "community_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    community_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("community.id"),
        nullable=False,
    )
    # NULL when the action was taken by the court rather than a person.
    actor_user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=True,
    )
    action: Mapped[str] = mapped_column(Text, nullable=False)
    target_type: Mapped[str] = mapped_column(Text, nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
