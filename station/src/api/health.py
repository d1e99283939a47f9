"""
Liveness endpoint for the station API.

GET /health reports whether the pipeline is producing output: the number
of emissions so far and the raw samples waiting for the next drain.
"starting" means nothing has been emitted yet.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-009)

TODO:
- None
"""

from fastapi import APIRouter

from station.src.api.deps import Pipeline

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(pipeline: Pipeline) -> dict[str, str | int]:
    """Return pipeline liveness.

    Returns:
        dict: ``status`` ("ok" or "starting"), ``emission_count`` and
        ``pending_count``.
    """
    emission_count = pipeline.emission_count
    return {
        "status": "ok" if emission_count > 0 else "starting",
        "emission_count": emission_count,
        "pending_count": pipeline.pending_count(),
    }
