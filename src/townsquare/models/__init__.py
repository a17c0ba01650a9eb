"""SQLAlchemy models for the Townsquare application."""

from .community import Community
from .moderation import JurorStats, ModAction, Report, Verdict
from .post import Comment, Post
from .user import User

__all__ = [
    "Community",
    "JurorStats", "ModAction", "Report", "Verdict",
    "Comment", "Post",
    "User",
]
