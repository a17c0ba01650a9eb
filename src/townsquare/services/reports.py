"""Report intake: validates and files reports against posts and comments."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from townsquare.models import ModAction, Report
from townsquare.models.moderation import REPORT_STATUS_PENDING, TARGET_TYPES
from townsquare.repositories.post_repo import PostRepository
from townsquare.repositories.report_repo import ReportRepository
from townsquare.services.errors import ForbiddenActionError, InvalidRequestError, NotFoundError

logger = logging.getLogger(__name__)


class ReportService:
    """Creates Open Court reports."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.content = PostRepository(db)
        self.reports = ReportRepository(db)

    def create_report(
        self,
        reporter_id: int,
        target_type: str,
        target_id: int,
        reason: str | None,
        description: str | None = None,
    ) -> Report:
        """File a pending report.

        Args:
            reporter_id: User filing the report.
            target_type: ``post`` or ``comment``.
            target_id: Identifier of the reported content.
            reason: Required category picked by the reporter.
            description: Optional free-text details.

        Returns:
            The persisted report, committed.

        Raises:
            InvalidRequestError: Missing reason or unknown target type.
            NotFoundError: The target does not exist or was deleted.
            ForbiddenActionError: Self-report, or an open report by the same
                reporter on the same target already exists.
        """
        reason = (reason or "").strip()
        description = (description or "").strip() or None
        if not reason:
            raise InvalidRequestError("Please select a reason")
        if target_type not in TARGET_TYPES:
            raise InvalidRequestError(f"Unsupported target type: {target_type}")

        target = self.content.snapshot(target_type, target_id)
        if target is None:
            raise NotFoundError(f"{target_type.capitalize()} not found")
        if target.author_user_id == reporter_id:
            raise ForbiddenActionError(f"You cannot report your own {target_type}")
        if self.reports.find_pending(reporter_id, target_type, target_id) is not None:
            raise ForbiddenActionError(f"You have already reported this {target_type}")

        report = Report(
            reporter_user_id=reporter_id,
            target_type=target_type,
            target_id=target_id,
            reason=reason,
            description=description,
            status=REPORT_STATUS_PENDING,
        )
        try:
            self.db.add(report)
            self.db.flush()
        except IntegrityError as err:
            # Lost a race against an identical report from the same user.
            self.db.rollback()
            raise ForbiddenActionError(f"You have already reported this {target_type}") from err

        # Private audit entry for the community's moderators.
        self.db.add(
            ModAction(
                community_id=target.community_id,
                actor_user_id=reporter_id,
                action=f"report_{target_type}",
                target_type=target_type,
                target_id=target_id,
                reason=f"{reason}: {description}" if description else reason,
                is_public=False,
            )
        )
        self.db.commit()
        logger.info(
            "Report %s filed against %s %s (%s)",
            report.id, target_type, target_id, reason,
        )
        return report
