# src/townsquare/services/__init__.py
"""Business logic services for the Townsquare application."""

from .court import CaseQueueBuilder, ConsensusEngine
from .feed import SignalFeedService
from .reports import ReportService
from .reputation import JurorReputationTracker

__all__ = [
    "CaseQueueBuilder",
    "ConsensusEngine",
    "JurorReputationTracker",
    "ReportService",
    "SignalFeedService",
]
