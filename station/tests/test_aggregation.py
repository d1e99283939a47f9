"""
Tests for the aggregation buffer.

Verifies the field-wise mean, the "no emission" result on an empty drain,
timestamp handling, and fail-fast field wiring.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import pytest

from station.src.aggregation import AggregationBuffer
from station.src.models import SAMPLE_FIELDS, TelemetrySample

_TS = datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


def _make_sample(offset_ms: int = 0, **overrides: float) -> TelemetrySample:
    """Create a TelemetrySample with sensible noon-time defaults."""
    values: dict[str, object] = {
        "ts": _TS + timedelta(milliseconds=offset_ms),
        "power_output_kw": 45.0,
        "temperature_panel": 50.0,
        "temperature_ambient": 33.0,
        "humidity_percent": 47.0,
        "solar_irradiance": 1000.0,
        "water_temp": 26.0,
        "silt_level": 20.0,
    }
    values.update(overrides)
    return TelemetrySample(**values)


class TestDrainAverage:
    def test_mean_of_three_samples(self) -> None:
        """drain_average of [a, b, c] equals the field-wise mean."""
        buffer = AggregationBuffer()
        a = _make_sample(0, power_output_kw=10.0, humidity_percent=40.0, silt_level=0.0)
        b = _make_sample(100, power_output_kw=20.0, humidity_percent=50.0, silt_level=30.0)
        c = _make_sample(200, power_output_kw=60.0, humidity_percent=120.0, silt_level=60.0)
        for sample in (a, b, c):
            buffer.push(sample)

        result = buffer.drain_average()

        assert result is not None
        for name in SAMPLE_FIELDS:
            expected = (getattr(a, name) + getattr(b, name) + getattr(c, name)) / 3
            assert getattr(result, name) == pytest.approx(expected)
        assert result.power_output_kw == pytest.approx(30.0)
        # Out-of-range humidity is averaged as-is; clamping happens downstream.
        assert result.humidity_percent == pytest.approx(70.0)

    def test_single_sample_is_returned_unchanged(self) -> None:
        buffer = AggregationBuffer()
        sample = _make_sample()
        buffer.push(sample)

        assert buffer.drain_average() == sample

    def test_empty_buffer_returns_none(self) -> None:
        """An empty drain is "no emission", not a zero sample."""
        assert AggregationBuffer().drain_average() is None

    def test_drain_clears_buffer(self) -> None:
        buffer = AggregationBuffer()
        buffer.push(_make_sample())
        buffer.push(_make_sample(100))

        assert len(buffer) == 2
        assert buffer.drain_average() is not None
        assert len(buffer) == 0
        assert buffer.drain_average() is None

    def test_samples_after_drain_start_new_window(self) -> None:
        buffer = AggregationBuffer()
        buffer.push(_make_sample(power_output_kw=100.0))
        buffer.drain_average()

        buffer.push(_make_sample(power_output_kw=2.0))
        result = buffer.drain_average()

        assert result is not None
        assert result.power_output_kw == pytest.approx(2.0)


class TestDrainTimestamp:
    def test_defaults_to_newest_sample_ts(self) -> None:
        buffer = AggregationBuffer()
        buffer.push(_make_sample(0))
        buffer.push(_make_sample(400))

        result = buffer.drain_average()

        assert result is not None
        assert result.ts == _TS + timedelta(milliseconds=400)

    def test_explicit_ts_wins(self) -> None:
        buffer = AggregationBuffer()
        buffer.push(_make_sample(0))
        drain_ts = _TS + timedelta(seconds=5)

        result = buffer.drain_average(ts=drain_ts)

        assert result is not None
        assert result.ts == drain_ts


class TestFieldWiring:
    def test_unknown_field_fails_at_construction(self) -> None:
        with pytest.raises(ValueError, match="unknown telemetry field"):
            AggregationBuffer(fields=("power_output_kw", "wind_speed"))

    def test_unlisted_fields_come_from_newest_sample(self) -> None:
        buffer = AggregationBuffer(fields=("power_output_kw",))
        buffer.push(_make_sample(0, power_output_kw=10.0, silt_level=5.0))
        buffer.push(_make_sample(100, power_output_kw=30.0, silt_level=25.0))

        result = buffer.drain_average()

        assert result is not None
        assert result.power_output_kw == pytest.approx(20.0)
        assert result.silt_level == 25.0


class TestConcurrentPushes:
    def test_no_push_is_lost(self) -> None:
        """Pushes from several threads all land in one drain."""
        buffer = AggregationBuffer()
        sample = _make_sample()

        def _push_many() -> None:
            for _ in range(250):
                buffer.push(sample)

        threads = [threading.Thread(target=_push_many) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(buffer) == 1000
