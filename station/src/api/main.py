"""
FastAPI application factory for the station read API.

The daemon builds the application around its live TelemetryPipeline and
serves it with uvicorn in the same event loop as the generate/emit loops.
The pipeline is stored on ``app.state.pipeline`` for route handlers.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-009)
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from station.src.api.health import router as health_router
from station.src.api.telemetry import router as telemetry_router
from station.src.pipeline import TelemetryPipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown logging."""
    logger.info("Station read API ready")
    yield
    logger.info("Station read API shutting down")


def create_app(
    pipeline: TelemetryPipeline,
    *,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Build the read API around *pipeline*.

    Args:
        pipeline: The live station pipeline to expose.
        cors_origins: Dashboard origins allowed to issue GET requests.
            Defaults to ``["*"]``.

    Returns:
        FastAPI: The configured application.
    """
    app = FastAPI(
        title="Canal Solar Station API",
        description="Read-only telemetry and metrics for a canal-top solar station.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins is not None else ["*"],
        allow_methods=["GET"],
    )

    app.include_router(health_router)
    app.include_router(telemetry_router)

    @app.get("/")
    async def root() -> dict:
        """Root health check endpoint.

        Returns:
            dict: JSON object with application status.
        """
        return {"status": "ok"}

    return app
