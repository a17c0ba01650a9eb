"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .moderation import (
    CaseOut,
    CaseQueueOut,
    HistoryOut,
    JurorDashboardOut,
    JurorStatsOut,
    ModLogOut,
    ReportCreate,
    ReportCreated,
    VerdictCreate,
    VerdictResult,
)
from .post import CommentNodeOut, CommentThreadOut
from .signal import SignalFeedResponse, SignalPostOut

__all__ = [
    "CaseOut", "CaseQueueOut", "HistoryOut", "JurorDashboardOut", "JurorStatsOut",
    "ModLogOut", "ReportCreate", "ReportCreated", "VerdictCreate", "VerdictResult",
    "CommentNodeOut", "CommentThreadOut",
    "SignalFeedResponse", "SignalPostOut",
]
