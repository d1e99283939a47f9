"""
FastAPI dependency providers for the station API.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-009)
"""

from typing import Annotated

from fastapi import Depends, Request

from station.src.pipeline import TelemetryPipeline


def get_pipeline(request: Request) -> TelemetryPipeline:
    """Return the TelemetryPipeline attached to the application.

    Args:
        request: The incoming FastAPI request.

    Returns:
        TelemetryPipeline: The station pipeline on ``app.state``.
    """
    return request.app.state.pipeline


# Type alias for injecting the live pipeline via FastAPI Depends().
# Usage in route handlers:
#   async def my_route(pipeline: Pipeline):
#       sample = pipeline.current_telemetry()
Pipeline = Annotated[TelemetryPipeline, Depends(get_pipeline)]
