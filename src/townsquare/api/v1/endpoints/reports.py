"""Report intake endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from townsquare.api.v1.dependencies import CurrentUserDep, SessionDep, raise_http
from townsquare.schemas.moderation import ReportCreate, ReportCreated
from townsquare.services.errors import EngineError
from townsquare.services.reports import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportCreated, status_code=status.HTTP_201_CREATED)
async def create_report(
    payload: ReportCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReportCreated:
    """Report a post or comment to Open Court."""
    try:
        report = ReportService(db).create_report(
            reporter_id=current_user.id,
            target_type=payload.target_type,
            target_id=payload.target_id,
            reason=payload.reason,
            description=payload.description,
        )
    except EngineError as err:
        raise_http(err)
    except SQLAlchemyError as err:
        db.rollback()
        logger.exception("Error reporting %s %s", payload.target_type, payload.target_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to report content",
        ) from err

    return ReportCreated(
        id=report.id,
        status=report.status,
        message=(
            f"{payload.target_type.capitalize()} reported successfully. "
            "It will be reviewed by the community."
        ),
    )
