# src/townsquare/main.py
"""Main entry point for the Townsquare application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from townsquare.api.v1 import (
    communities_router,
    court_router,
    feed_router,
    posts_router,
    reports_router,
)
from townsquare.core.settings import settings

DESCRIPTION = "Conversation signal ranking and Open Court crowd moderation"

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.app_name} API",
    description=DESCRIPTION,
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)
app.add_middleware(GZipMiddleware)

app.include_router(feed_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(court_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(communities_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    logger.info(
        "%s %s starting (quorum=%d, signal window=%dd)",
        settings.app_name,
        settings.app_version,
        settings.court_quorum,
        settings.signal_window_days,
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": f"{settings.app_name} API",
        "version": settings.app_version,
        "description": DESCRIPTION,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("townsquare.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
