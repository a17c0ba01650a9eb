"""Juror statistics, rank tiers and verdict history."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from townsquare.models import JurorStats, Report, Verdict
from townsquare.models.moderation import (
    DEFAULT_ACCURACY,
    REPORT_STATUS_DISMISSED,
    REPORT_STATUS_REVIEWED,
    VOTE_GUILTY,
    VOTE_INNOCENT,
)
from townsquare.repositories.post_repo import PostRepository
from townsquare.repositories.report_repo import ReportRepository, VerdictTally

logger = logging.getLogger(__name__)

# (minimum cases reviewed, label), ascending.
RANK_TIERS: tuple[tuple[int, str], ...] = (
    (0, "Novice Juror"),
    (5, "Junior Juror"),
    (20, "Juror"),
    (50, "Senior Juror"),
    (100, "Chief Justice"),
)

HISTORY_PREVIEW_CHARS = 100


def rank_for(cases_reviewed: int) -> str:
    """Return the highest tier whose threshold ``cases_reviewed`` reaches."""
    label = RANK_TIERS[0][1]
    for minimum, tier in RANK_TIERS:
        if cases_reviewed >= minimum:
            label = tier
    return label


def classify_outcome(vote: str, status: str) -> bool | None:
    """Was ``vote`` on the winning side? None while the case is still open."""
    if status == REPORT_STATUS_REVIEWED:
        return vote == VOTE_GUILTY
    if status == REPORT_STATUS_DISMISSED:
        return vote == VOTE_INNOCENT
    return None


@dataclass(frozen=True)
class TargetPreview:
    author: str
    preview: str
    community: str


@dataclass(frozen=True)
class HistoryEntry:
    verdict_id: int
    report_id: int
    vote: str
    voted_at: datetime
    reason: str
    target_type: str
    status: str
    target: TargetPreview | None
    tally: VerdictTally
    was_correct: bool | None


class JurorReputationTracker:
    """Bookkeeping for juror statistics.

    Writes happen inside the caller's transaction; the tracker never commits.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.reports = ReportRepository(db)

    def get_stats(self, user_id: int) -> JurorStats | None:
        return self.db.get(JurorStats, user_id, populate_existing=True)

    def get_or_create_stats(self, user_id: int) -> JurorStats:
        """Return the juror's stats row, inserting the default row if absent."""
        stats = self.get_stats(user_id)
        if stats is not None:
            return stats
        try:
            with self.db.begin_nested():
                self.db.add(JurorStats(user_id=user_id))
        except IntegrityError:
            # Another request created the row first.
            logger.debug("Juror stats for %s created concurrently", user_id)
        return self.db.get(JurorStats, user_id, populate_existing=True)

    def record_vote(self, juror_id: int, vote: str) -> JurorStats:
        """Count one vote toward the juror's tallies."""
        self.get_or_create_stats(juror_id)
        self.db.execute(
            update(JurorStats)
            .where(JurorStats.user_id == juror_id)
            .values(
                cases_reviewed=JurorStats.cases_reviewed + 1,
                guilty_votes=JurorStats.guilty_votes + (1 if vote == VOTE_GUILTY else 0),
                innocent_votes=JurorStats.innocent_votes + (1 if vote == VOTE_INNOCENT else 0),
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.get(JurorStats, juror_id, populate_existing=True)

    def refresh_rank(self, stats: JurorStats) -> bool:
        """Recompute the rank tier; returns True if it changed."""
        rank = rank_for(stats.cases_reviewed)
        if stats.rank == rank:
            return False
        logger.info("Juror %s promoted from %s to %s", stats.user_id, stats.rank, rank)
        stats.rank = rank
        self.db.flush()
        return True

    def refresh_accuracy(self, juror_ids: Iterable[int]) -> None:
        """Recompute accuracy from each juror's resolved cases."""
        ids = list(juror_ids)
        if not ids:
            return
        correct = case(
            (
                (Report.status == REPORT_STATUS_REVIEWED) & (Verdict.vote == VOTE_GUILTY),
                1,
            ),
            (
                (Report.status == REPORT_STATUS_DISMISSED) & (Verdict.vote == VOTE_INNOCENT),
                1,
            ),
            else_=0,
        )
        rows = self.db.execute(
            select(Verdict.juror_user_id, func.count(), func.sum(correct))
            .join(Report, Report.id == Verdict.report_id)
            .where(
                Verdict.juror_user_id.in_(ids),
                Report.status.in_((REPORT_STATUS_REVIEWED, REPORT_STATUS_DISMISSED)),
            )
            .group_by(Verdict.juror_user_id)
        )
        for juror_id, resolved, matched in rows:
            accuracy = round(100.0 * int(matched or 0) / resolved, 1) if resolved else DEFAULT_ACCURACY
            self.db.execute(
                update(JurorStats)
                .where(JurorStats.user_id == juror_id)
                .values(accuracy=accuracy)
                .execution_options(synchronize_session=False)
            )

    def history(self, juror_id: int, limit: int) -> list[HistoryEntry]:
        """Return the juror's newest verdicts, each with its case outcome."""
        rows = self.reports.juror_verdicts(juror_id, limit)
        tallies = self.reports.tallies({report.id for _, report in rows})
        content = PostRepository(self.db)

        entries: list[HistoryEntry] = []
        for verdict, report in rows:
            snapshot = content.snapshot(report.target_type, report.target_id)
            target = None
            if snapshot is not None:
                target = TargetPreview(
                    author=snapshot.author,
                    preview=snapshot.preview[:HISTORY_PREVIEW_CHARS],
                    community=snapshot.community_name,
                )
            entries.append(
                HistoryEntry(
                    verdict_id=verdict.id,
                    report_id=report.id,
                    vote=verdict.vote,
                    voted_at=verdict.created_at,
                    reason=report.reason,
                    target_type=report.target_type,
                    status=report.status,
                    target=target,
                    tally=tallies.get(report.id, VerdictTally()),
                    was_correct=classify_outcome(verdict.vote, report.status),
                )
            )
        return entries
