# src/townsquare/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    communities_router,
    court_router,
    feed_router,
    posts_router,
    reports_router,
)

__all__ = [
    "communities_router",
    "court_router",
    "feed_router",
    "posts_router",
    "reports_router",
]
