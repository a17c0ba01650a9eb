# src/townsquare/services/court.py
"""Open Court: crowd-sourced moderation.

Jurors pull pending reports from their case queue and vote guilty or
innocent. Once a report collects a quorum of verdicts it is resolved by
strict majority (ties dismiss) and, when guilty, the reported content is
removed.

Resolution must happen at most once even when several jurors cross the
quorum at the same time. ``ConsensusEngine`` does the whole
vote -> count -> decide -> cascade sequence in one transaction and closes the
report through a compare-and-set on its status, so only the request that
wins the status flip performs the cascade.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from townsquare.core.settings import settings
from townsquare.db.time import as_utc, utcnow
from townsquare.models import JurorStats, ModAction, Report, Verdict
from townsquare.models.moderation import (
    REPORT_STATUS_DISMISSED,
    REPORT_STATUS_PENDING,
    REPORT_STATUS_REVIEWED,
    TARGET_POST,
    VOTES,
)
from townsquare.repositories.post_repo import ContentSnapshot, PostRepository
from townsquare.repositories.report_repo import ReportRepository, VerdictTally
from townsquare.services.errors import ForbiddenActionError, InvalidRequestError, NotFoundError
from townsquare.services.reputation import JurorReputationTracker
from townsquare.services.toxicity import (
    KeywordToxicityClassifier,
    ToxicityClassifier,
    ToxicityEstimate,
)

logger = logging.getLogger(__name__)


def decide(tally: VerdictTally) -> str:
    """Majority rule: guilty only on a strict majority, so ties dismiss."""
    if tally.guilty > tally.innocent:
        return REPORT_STATUS_REVIEWED
    return REPORT_STATUS_DISMISSED


def time_ago(moment: datetime, now: datetime | None = None) -> str:
    """Render a coarse relative timestamp such as ``5m ago``."""
    seconds = ((now or utcnow()) - as_utc(moment)).total_seconds()
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


@dataclass(frozen=True)
class CaseView:
    """A pending report as presented to a juror."""

    report: Report
    content: ContentSnapshot
    analysis: ToxicityEstimate
    tally: VerdictTally


@dataclass(frozen=True)
class VerdictOutcome:
    vote: str
    stats: JurorStats
    resolution: str | None = None


class CaseQueueBuilder:
    """Selects and enriches the cases a juror can review next."""

    def __init__(self, db: Session, classifier: ToxicityClassifier | None = None) -> None:
        self.db = db
        self.reports = ReportRepository(db)
        self.content = PostRepository(db)
        self.classifier = classifier or KeywordToxicityClassifier()

    def build_queue(self, juror_id: int, limit: int | None = None) -> list[CaseView]:
        """Return up to ``limit`` reviewable cases for the juror, oldest first.

        Reports whose target has been deleted are dropped rather than
        reported as errors, so the result can be shorter than ``limit``.
        """
        reports = self.reports.list_eligible(juror_id, limit or settings.court_queue_size)
        tallies = self.reports.tallies(report.id for report in reports)

        cases: list[CaseView] = []
        for report in reports:
            snapshot = self.content.snapshot(report.target_type, report.target_id)
            if snapshot is None:
                logger.debug("Skipping report %s: %s %s is gone",
                             report.id, report.target_type, report.target_id)
                continue
            cases.append(
                CaseView(
                    report=report,
                    content=snapshot,
                    analysis=self.classifier.analyze(snapshot.text),
                    tally=tallies.get(report.id, VerdictTally()),
                )
            )
        return cases

    def count_pending(self, juror_id: int) -> int:
        return self.reports.count_eligible(juror_id)


class ConsensusEngine:
    """Records juror verdicts and resolves cases on quorum."""

    def __init__(
        self,
        db: Session,
        quorum: int | None = None,
        tracker: JurorReputationTracker | None = None,
    ) -> None:
        self.db = db
        self.quorum = quorum or settings.court_quorum
        self.reports = ReportRepository(db)
        self.content = PostRepository(db)
        self.tracker = tracker or JurorReputationTracker(db)

    def submit_verdict(self, report_id: int, juror_id: int, vote: str) -> VerdictOutcome:
        """Record one juror's vote and resolve the case if quorum is reached.

        Everything, including a guilty cascade, commits together or not at
        all.

        Raises:
            InvalidRequestError: ``vote`` is not guilty/innocent.
            NotFoundError: No such report.
            ForbiddenActionError: Case closed, own report, or already voted.
        """
        if vote not in VOTES:
            raise InvalidRequestError("Invalid vote")
        try:
            outcome = self._submit(report_id, juror_id, vote)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return outcome

    def _submit(self, report_id: int, juror_id: int, vote: str) -> VerdictOutcome:
        report = self.reports.get(report_id, for_update=True)
        if report is None:
            raise NotFoundError("Report not found")
        if report.status != REPORT_STATUS_PENDING:
            raise ForbiddenActionError("Case already closed")
        if report.reporter_user_id == juror_id:
            raise ForbiddenActionError("Cannot vote on your own report")
        if self.reports.has_voted(report_id, juror_id):
            raise ForbiddenActionError("Already voted on this case")

        try:
            with self.db.begin_nested():
                self.db.add(Verdict(report_id=report_id, juror_user_id=juror_id, vote=vote))
        except IntegrityError as err:
            raise ForbiddenActionError("Already voted on this case") from err
        logger.debug("Juror %s voted %s on report %s", juror_id, vote, report_id)

        self.tracker.record_vote(juror_id, vote)

        resolution = None
        tally = self.reports.tally(report_id)
        if tally.total >= self.quorum:
            resolution = self.resolve(report, tally)

        stats = self.tracker.get_stats(juror_id)
        self.tracker.refresh_rank(stats)
        return VerdictOutcome(vote=vote, stats=stats, resolution=resolution)

    def resolve(self, report: Report, tally: VerdictTally) -> str | None:
        """Close a report and apply its consequence.

        Returns:
            The new status, or None if another request already closed it.
        """
        status = decide(tally)
        if not self.reports.close_if_pending(report.id, status):
            logger.debug("Report %s already resolved elsewhere", report.id)
            return None

        logger.info(
            "Report %s resolved as %s (%d guilty / %d innocent)",
            report.id, status, tally.guilty, tally.innocent,
        )
        if status == REPORT_STATUS_REVIEWED:
            self._remove_target(report)
        self.tracker.refresh_accuracy(self._jurors_of(report.id))
        return status

    def _jurors_of(self, report_id: int) -> list[int]:
        return list(
            self.db.scalars(select(Verdict.juror_user_id).where(Verdict.report_id == report_id))
        )

    def _remove_target(self, report: Report) -> None:
        """Delete the reported content; content that is already gone is fine."""
        snapshot = self.content.snapshot(report.target_type, report.target_id)
        if report.target_type == TARGET_POST:
            removed = self.content.mark_post_deleted(report.target_id)
        else:
            removed = self.content.mark_comment_deleted(report.target_id)

        if not removed or snapshot is None:
            logger.debug("%s %s was already deleted", report.target_type, report.target_id)
            return

        self.db.add(
            ModAction(
                community_id=snapshot.community_id,
                actor_user_id=None,
                action=f"remove_{report.target_type}",
                target_type=report.target_type,
                target_id=report.target_id,
                reason=f"Open Court verdict on report {report.id}: {report.reason}",
                is_public=True,
            )
        )
        logger.info("Removed %s %s after guilty verdict", report.target_type, report.target_id)
