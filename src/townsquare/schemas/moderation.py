"""Open Court request and response schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from townsquare.models import JurorStats
from townsquare.schemas.common import CamelModel
from townsquare.services.court import CaseView, time_ago
from townsquare.services.reputation import HistoryEntry


class ReportCreate(CamelModel):
    """Body for filing a report; ``reason`` is validated by the service."""

    target_type: str = Field(..., description="post or comment")
    target_id: int
    reason: str | None = None
    description: str | None = Field(None, max_length=2000)


class ReportCreated(CamelModel):
    id: int
    status: str
    message: str


class VerdictCreate(CamelModel):
    """Body for casting a verdict; ``vote`` is validated by the service."""

    report_id: int
    vote: str = Field(..., description="guilty or innocent")


class JurorStatsOut(CamelModel):
    cases_reviewed: int
    guilty_votes: int
    innocent_votes: int
    accuracy: float
    rank: str

    @classmethod
    def from_stats(cls, stats: JurorStats) -> JurorStatsOut:
        return cls(
            cases_reviewed=stats.cases_reviewed,
            guilty_votes=stats.guilty_votes,
            innocent_votes=stats.innocent_votes,
            accuracy=stats.accuracy,
            rank=stats.rank,
        )


class JurorDashboardOut(JurorStatsOut):
    pending_cases: int


class VerdictResult(CamelModel):
    vote: str
    stats: JurorStatsOut
    resolution: str | None = None


class CaseContent(CamelModel):
    author: str
    text: str
    timestamp: str
    type: str
    community: str


class CaseContext(CamelModel):
    post_title: str


class ToxicityOut(CamelModel):
    toxicity_score: int
    flagged_keywords: list[str]
    confidence: str


class VerdictCounts(CamelModel):
    guilty: int
    innocent: int


class CaseOut(CamelModel):
    id: int
    reason: str
    description: str | None
    reporter: str = "Community Member"
    created_at: datetime
    content: CaseContent
    context: CaseContext | None
    ai_analysis: ToxicityOut
    verdict_counts: VerdictCounts

    @classmethod
    def from_case(cls, case: CaseView, now: datetime | None = None) -> CaseOut:
        snapshot = case.content
        return cls(
            id=case.report.id,
            reason=case.report.reason,
            description=case.report.description,
            created_at=case.report.created_at,
            content=CaseContent(
                author=snapshot.author,
                text=snapshot.text,
                timestamp=time_ago(snapshot.created_at, now),
                type=snapshot.target_type.capitalize(),
                community=snapshot.community_name,
            ),
            context=(
                CaseContext(post_title=snapshot.post_title)
                if snapshot.post_title is not None
                else None
            ),
            ai_analysis=ToxicityOut(
                toxicity_score=case.analysis.toxicity_score,
                flagged_keywords=list(case.analysis.flagged_keywords),
                confidence=case.analysis.confidence,
            ),
            verdict_counts=VerdictCounts(guilty=case.tally.guilty, innocent=case.tally.innocent),
        )


class CaseQueueOut(CamelModel):
    cases: list[CaseOut]


class TargetInfo(CamelModel):
    author: str
    preview: str
    community: str


class Outcome(CamelModel):
    total: int
    guilty: int
    innocent: int
    was_correct: bool | None


class HistoryItem(CamelModel):
    id: int
    report_id: int
    vote: str
    voted_at: datetime
    reason: str
    target_type: str
    status: str
    target_info: TargetInfo | None
    outcome: Outcome

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> HistoryItem:
        return cls(
            id=entry.verdict_id,
            report_id=entry.report_id,
            vote=entry.vote,
            voted_at=entry.voted_at,
            reason=entry.reason,
            target_type=entry.target_type,
            status=entry.status,
            target_info=(
                TargetInfo(
                    author=entry.target.author,
                    preview=entry.target.preview,
                    community=entry.target.community,
                )
                if entry.target is not None
                else None
            ),
            outcome=Outcome(
                total=entry.tally.total,
                guilty=entry.tally.guilty,
                innocent=entry.tally.innocent,
                was_correct=entry.was_correct,
            ),
        )


class HistoryOut(CamelModel):
    history: list[HistoryItem]


class ModActionOut(CamelModel):
    id: int
    action: str
    target_type: str
    target_id: int
    reason: str | None
    actor: str | None
    created_at: datetime


class ModLogOut(CamelModel):
    actions: list[ModActionOut]
