# src/townsquare/api/v1/endpoints/court.py
"""Open Court endpoints: case queue, verdicts, juror stats and history."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from townsquare.api.v1.dependencies import (
    ClassifierDep,
    CurrentUserDep,
    SessionDep,
    raise_http,
)
from townsquare.core.settings import settings
from townsquare.schemas.moderation import (
    CaseOut,
    CaseQueueOut,
    HistoryItem,
    HistoryOut,
    JurorDashboardOut,
    JurorStatsOut,
    VerdictCreate,
    VerdictResult,
)
from townsquare.services.court import CaseQueueBuilder, ConsensusEngine
from townsquare.services.errors import EngineError
from townsquare.services.reputation import JurorReputationTracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/court", tags=["court"])


def _internal_error(detail: str) -> HTTPException:
    logger.exception(detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


@router.get("/cases", response_model=CaseQueueOut)
async def get_cases(
    current_user: CurrentUserDep,
    db: SessionDep,
    classifier: ClassifierDep,
) -> CaseQueueOut:
    """Return pending cases the current user can judge."""
    try:
        cases = CaseQueueBuilder(db, classifier).build_queue(current_user.id)
    except SQLAlchemyError as err:
        raise _internal_error("Failed to fetch cases") from err
    return CaseQueueOut(cases=[CaseOut.from_case(case) for case in cases])


@router.post("/verdict", response_model=VerdictResult)
async def submit_verdict(
    payload: VerdictCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VerdictResult:
    """Cast a guilty/innocent vote on a case."""
    try:
        outcome = ConsensusEngine(db).submit_verdict(
            payload.report_id,
            current_user.id,
            payload.vote,
        )
    except EngineError as err:
        raise_http(err)
    except SQLAlchemyError as err:
        raise _internal_error("Failed to submit verdict") from err

    return VerdictResult(
        vote=outcome.vote,
        stats=JurorStatsOut.from_stats(outcome.stats),
        resolution=outcome.resolution,
    )


@router.get("/stats", response_model=JurorDashboardOut)
async def get_stats(current_user: CurrentUserDep, db: SessionDep) -> JurorDashboardOut:
    """Return the current user's juror statistics."""
    try:
        stats = JurorReputationTracker(db).get_or_create_stats(current_user.id)
        db.commit()
        pending = CaseQueueBuilder(db).count_pending(current_user.id)
    except SQLAlchemyError as err:
        db.rollback()
        raise _internal_error("Failed to fetch stats") from err

    return JurorDashboardOut(
        **JurorStatsOut.from_stats(stats).model_dump(),
        pending_cases=pending,
    )


@router.get("/history", response_model=HistoryOut)
async def get_history(current_user: CurrentUserDep, db: SessionDep) -> HistoryOut:
    """Return the current user's past verdicts and how each case ended."""
    try:
        entries = JurorReputationTracker(db).history(
            current_user.id,
            settings.court_history_limit,
        )
    except SQLAlchemyError as err:
        raise _internal_error("Failed to fetch history") from err
    return HistoryOut(history=[HistoryItem.from_entry(entry) for entry in entries])
