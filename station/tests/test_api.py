"""
Integration tests for the station read API.

Tests verify:
- Root returns status ok; /health reports pipeline liveness.
- /v1/realtime is 404 before the first emission and the smoothed sample after.
- /v1/metrics, /v1/history and /v1/alerts mirror the pipeline accessors.
- CORS allows configured dashboard origins.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-009)
"""

from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from station.src.api.main import create_app
from station.src.generator import ReadingGenerator
from station.src.history import HistoryWindow
from station.src.models import TelemetrySample
from station.src.pipeline import TelemetryPipeline

_T0 = datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


def _make_pipeline(**overrides: float) -> TelemetryPipeline:
    values: dict[str, float] = {
        "power_output_kw": 45.0,
        "temperature_panel": 40.0,
        "temperature_ambient": 30.0,
        "humidity_percent": 50.0,
        "solar_irradiance": 900.0,
        "water_temp": 26.0,
        "silt_level": 20.0,
    }
    values.update(overrides)
    generator = MagicMock(spec=ReadingGenerator)
    generator.next_sample.side_effect = lambda now: TelemetrySample(ts=now, **values)
    return TelemetryPipeline(generator=generator, history=HistoryWindow(capacity=5))


def _emit(pipeline: TelemetryPipeline, count: int = 1) -> None:
    for i in range(count):
        pipeline.tick_fast(_T0 + timedelta(seconds=i))
        pipeline.tick_slow(_T0 + timedelta(seconds=i, milliseconds=500))


@pytest.fixture()
def pipeline() -> TelemetryPipeline:
    return _make_pipeline()


@pytest.fixture()
def client(pipeline: TelemetryPipeline) -> Generator[TestClient, None, None]:
    """TestClient around a stubbed pipeline, with lifespan events."""
    app = create_app(pipeline, cors_origins=["http://dashboard.local"])
    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


def test_root_returns_ok(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_health_reports_starting_before_first_emission(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "starting", "emission_count": 0, "pending_count": 0}


def test_health_reports_ok_after_emission(
    client: TestClient, pipeline: TelemetryPipeline
) -> None:
    _emit(pipeline, count=2)
    pipeline.tick_fast(_T0 + timedelta(seconds=3))

    body = client.get("/health").json()

    assert body == {"status": "ok", "emission_count": 2, "pending_count": 1}


# ---------------------------------------------------------------------------
# Telemetry routes
# ---------------------------------------------------------------------------


class TestRealtime:
    def test_404_before_first_emission(self, client: TestClient) -> None:
        response = client.get("/v1/realtime")
        assert response.status_code == 404
        assert response.json()["detail"] == "No telemetry emitted yet."

    def test_returns_current_sample(
        self, client: TestClient, pipeline: TelemetryPipeline
    ) -> None:
        _emit(pipeline)

        response = client.get("/v1/realtime")

        assert response.status_code == 200
        body = response.json()
        assert body["power_output_kw"] == 45.0
        assert body["water_temp"] == 26.0
        assert datetime.fromisoformat(body["ts"].replace("Z", "+00:00")) == _T0 + timedelta(
            milliseconds=500
        )


class TestMetrics:
    def test_zero_before_first_emission(self, client: TestClient) -> None:
        response = client.get("/v1/metrics")
        assert response.status_code == 200
        assert response.json() == {
            "water_saved_liters": 0.0,
            "total_energy_kwh": 0.0,
            "co2_offset_kg": 0.0,
            "efficiency_delta": 0.0,
            "panel_cooling_benefit": 0.0,
        }

    def test_mirrors_pipeline_metrics(
        self, client: TestClient, pipeline: TelemetryPipeline
    ) -> None:
        _emit(pipeline, count=3)

        body = client.get("/v1/metrics").json()

        assert body == pipeline.current_metrics().model_dump(mode="json")
        assert body["total_energy_kwh"] > 0.0
        assert body["efficiency_delta"] == pytest.approx(13.5)


class TestHistory:
    def test_empty_window(self, client: TestClient) -> None:
        body = client.get("/v1/history").json()
        assert body == {"capacity": 5, "count": 0, "samples": []}

    def test_window_is_bounded_and_oldest_first(
        self, client: TestClient, pipeline: TelemetryPipeline
    ) -> None:
        _emit(pipeline, count=8)

        body = client.get("/v1/history").json()

        assert body["capacity"] == 5
        assert body["count"] == 5
        timestamps = [s["ts"] for s in body["samples"]]
        assert timestamps == sorted(timestamps)


class TestAlerts:
    def test_empty_before_first_emission(self, client: TestClient) -> None:
        assert client.get("/v1/alerts").json() == []

    def test_nominal_sample_has_no_alerts(
        self, client: TestClient, pipeline: TelemetryPipeline
    ) -> None:
        _emit(pipeline)
        assert client.get("/v1/alerts").json() == []

    def test_hot_silty_sample_raises_both(self) -> None:
        pipeline = _make_pipeline(temperature_panel=58.0, silt_level=55.0)
        _emit(pipeline)

        with TestClient(create_app(pipeline)) as client:
            body = client.get("/v1/alerts").json()

        assert [a["kind"] for a in body] == ["panel_temperature", "silt"]
        assert body[1]["severity"] == "high"


def test_cors_allows_configured_origin(client: TestClient) -> None:
    response = client.get("/health", headers={"Origin": "http://dashboard.local"})
    assert response.headers["access-control-allow-origin"] == "http://dashboard.local"
