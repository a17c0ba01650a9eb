"""Signal feed endpoints."""
from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from townsquare.api.v1.dependencies import SessionDep, raise_http
from townsquare.schemas.signal import SignalFeedResponse
from townsquare.services.errors import EngineError
from townsquare.services.feed import FEED_HOT, SignalFeedService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("/signal", response_model=SignalFeedResponse)
async def get_signal_feed(
    db: SessionDep,
    filter: Literal["hot", "rising", "deep", "live"] = Query(FEED_HOT),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> SignalFeedResponse:
    """Return conversation-ranked threads for the requested feed variant."""
    try:
        page = SignalFeedService(db).fetch(filter, limit=limit, offset=offset)
    except EngineError as err:
        raise_http(err)
    except SQLAlchemyError as err:
        logger.exception("Error fetching signal feed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch signal feed",
        ) from err
    return SignalFeedResponse.from_page(page)
