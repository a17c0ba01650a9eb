"""Repository layer wrapping SQLAlchemy queries."""

from .post_repo import ContentSnapshot, PostRepository
from .report_repo import ReportRepository, VerdictTally

__all__ = ["ContentSnapshot", "PostRepository", "ReportRepository", "VerdictTally"]
