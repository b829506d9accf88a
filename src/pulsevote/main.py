"""Main entry point for the PulseVote application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from pulsevote.api.v1 import (
    admin_router,
    groups_router,
    preferences_router,
    surveys_router,
)
from pulsevote.core.settings import settings
from pulsevote.services.suggestions import get_suggestion_bridge

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DESCRIPTION = "Community polling API: topic feeds, votes, reactions, comments and groups"

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description=DESCRIPTION,
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(preferences_router, prefix="/api/v1")
app.include_router(surveys_router, prefix="/api/v1")
app.include_router(groups_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    if not settings.ai_enabled:
        logger.warning("AI_GATEWAY_API_KEY not set; survey generation is disabled")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_suggestion_bridge().close()


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
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("pulsevote.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
