"""
GET endpoints exposing the pipeline's read-only accessors.

- /v1/realtime: latest smoothed sample (404 before the first emission).
- /v1/metrics: latest derived metrics.
- /v1/history: history window, oldest first.
- /v1/alerts: maintenance alerts raised by the latest sample.

Handlers only read immutable snapshots from the TelemetryPipeline stored on
``app.state.pipeline``; nothing here mutates pipeline state.

CHANGELOG:
- 2026-10-19: Add /v1/alerts (STORY-008)
- 2026-10-19: Initial creation (STORY-009)

TODO:
- None
"""

from typing import Any

from fastapi import APIRouter, HTTPException

from station.src.alerts import evaluate_alerts
from station.src.api.deps import Pipeline
from station.src.models import TelemetrySample

router = APIRouter(prefix="/v1", tags=["telemetry"])


def _sample_to_dict(sample: TelemetrySample) -> dict[str, Any]:
    """Serialise a sample to a JSON-compatible dict with an ISO 8601 ``ts``."""
    return sample.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/realtime")
async def realtime(pipeline: Pipeline) -> dict[str, Any]:
    """Return the current smoothed telemetry sample.

    Raises:
        HTTPException: 404 if the pipeline has not emitted yet.
    """
    sample = pipeline.current_telemetry()
    if sample is None:
        raise HTTPException(status_code=404, detail="No telemetry emitted yet.")
    return _sample_to_dict(sample)


@router.get("/metrics")
async def metrics(pipeline: Pipeline) -> dict[str, Any]:
    """Return the current derived metrics (all zero before the first emission)."""
    return pipeline.current_metrics().model_dump(mode="json")


@router.get("/history")
async def history(pipeline: Pipeline) -> dict[str, Any]:
    """Return the history window, oldest sample first."""
    samples = pipeline.history()
    return {
        "capacity": pipeline.history_capacity,
        "count": len(samples),
        "samples": [_sample_to_dict(s) for s in samples],
    }


@router.get("/alerts")
async def alerts(pipeline: Pipeline) -> list[dict[str, Any]]:
    """Return maintenance alerts for the current sample (empty before the first emission)."""
    sample = pipeline.current_telemetry()
    if sample is None:
        return []
    return [alert.model_dump(mode="json") for alert in evaluate_alerts(sample)]
