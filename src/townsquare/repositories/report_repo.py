"""Data access helpers for reports and verdicts."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import Select, exists, func, select, update
from sqlalchemy.orm import Session

from townsquare.db.time import utcnow
from townsquare.models import Report, Verdict
from townsquare.models.moderation import REPORT_STATUS_PENDING, VOTE_GUILTY, VOTE_INNOCENT

__all__ = ["ReportRepository", "VerdictTally"]


@dataclass(frozen=True)
class VerdictTally:
    guilty: int = 0
    innocent: int = 0

    @property
    def total(self) -> int:
        return self.guilty + self.innocent


class ReportRepository:
    """Queries shared by report intake, the case queue and the consensus engine."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, report_id: int, *, for_update: bool = False) -> Report | None:
        """Return a report, optionally row-locked for the rest of the transaction.

        ``FOR UPDATE`` is ignored by backends without row locks (SQLite); the
        status compare-and-set in ``close_if_pending`` is the guard there.
        """
        stmt = select(Report).where(Report.id == report_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.scalars(stmt).first()

    def find_pending(self, reporter_id: int, target_type: str, target_id: int) -> Report | None:
        """Return the reporter's open report on a target, if any."""
        return self.session.scalars(
            select(Report).where(
                Report.reporter_user_id == reporter_id,
                Report.target_type == target_type,
                Report.target_id == target_id,
                Report.status == REPORT_STATUS_PENDING,
            )
        ).first()

    def _eligible_for(self, juror_id: int) -> Select:
        already_voted = exists().where(
            Verdict.report_id == Report.id,
            Verdict.juror_user_id == juror_id,
        )
        return select(Report).where(
            Report.status == REPORT_STATUS_PENDING,
            Report.reporter_user_id != juror_id,
            ~already_voted,
        )

    def list_eligible(self, juror_id: int, limit: int) -> list[Report]:
        """Return pending reports the juror may vote on, oldest first."""
        stmt = self._eligible_for(juror_id).order_by(Report.created_at, Report.id).limit(limit)
        return list(self.session.scalars(stmt))

    def count_eligible(self, juror_id: int) -> int:
        stmt = select(func.count()).select_from(self._eligible_for(juror_id).subquery())
        return int(self.session.scalar(stmt) or 0)

    def has_voted(self, report_id: int, juror_id: int) -> bool:
        return self.session.scalar(
            select(
                exists().where(
                    Verdict.report_id == report_id,
                    Verdict.juror_user_id == juror_id,
                )
            )
        )

    def tallies(self, report_ids: Iterable[int]) -> dict[int, VerdictTally]:
        """Return guilty/innocent counts for each report id."""
        ids = list(report_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(Verdict.report_id, Verdict.vote, func.count())
            .where(Verdict.report_id.in_(ids))
            .group_by(Verdict.report_id, Verdict.vote)
        )
        counts: dict[int, dict[str, int]] = {report_id: {} for report_id in ids}
        for report_id, vote, total in rows:
            counts[report_id][vote] = int(total)
        return {
            report_id: VerdictTally(
                guilty=votes.get(VOTE_GUILTY, 0),
                innocent=votes.get(VOTE_INNOCENT, 0),
            )
            for report_id, votes in counts.items()
        }

    def tally(self, report_id: int) -> VerdictTally:
        return self.tallies([report_id])[report_id]

    def close_if_pending(self, report_id: int, status: str) -> bool:
        """Move a report out of ``pending``.

        Compare-and-set on the status column: of any number of concurrent
        callers, exactly one sees True.
        """
        result = self.session.execute(
            update(Report)
            .where(Report.id == report_id, Report.status == REPORT_STATUS_PENDING)
            .values(status=status, resolved_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def juror_verdicts(self, juror_id: int, limit: int) -> list[tuple[Verdict, Report]]:
        """Return the juror's newest verdicts with their reports."""
        rows = self.session.execute(
            select(Verdict, Report)
            .join(Report, Report.id == Verdict.report_id)
            .where(Verdict.juror_user_id == juror_id)
            .order_by(Verdict.created_at.desc(), Verdict.id.desc())
            .limit(limit)
        )
        return [(verdict, report) for verdict, report in rows]
