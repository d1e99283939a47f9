"""
Single-station telemetry pipeline: one state block behind one lock.

Composes the four stages and the history window:

    ReadingGenerator -> AggregationBuffer -> SmoothingFilter
        -> {MetricsEngine, HistoryWindow}

``tick_fast`` runs on the generator period and only touches the
aggregation buffer (which has its own lock), so it is never blocked by an
emission in progress. ``tick_slow`` drains the buffer and, when something
was drained, updates the last smoothed sample, the metrics and the history
atomically under the pipeline lock. Readers get immutable snapshots
through the same lock.

A slow tick that finds the buffer empty returns ``None`` and leaves the
smoothed sample, metrics and history untouched.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime

from station.src.aggregation import AggregationBuffer
from station.src.generator import ReadingGenerator
from station.src.history import HistoryWindow
from station.src.metrics import MetricsEngine
from station.src.models import DerivedMetrics, Emission, RawSample, SmoothedSample
from station.src.smoothing import SmoothingFilter

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR: float = 3600.0


class TelemetryPipeline:
    """Owns every piece of mutable state for one station.

    Args:
        generator: Raw sample source.
        buffer: Aggregation buffer shared by the two ticks.
        smoother: EMA filter.
        engine: Metrics engine holding the cumulative totals.
        history: Charting window.
        nominal_interval_s: Slow-tick period, used as the elapsed interval
            of the first emission (there is no previous one to measure from).
    """

    def __init__(
        self,
        *,
        generator: ReadingGenerator,
        buffer: AggregationBuffer | None = None,
        smoother: SmoothingFilter | None = None,
        engine: MetricsEngine | None = None,
        history: HistoryWindow | None = None,
        nominal_interval_s: float = 0.5,
    ) -> None:
        self._generator = generator
        self._buffer = buffer if buffer is not None else AggregationBuffer()
        self._smoother = smoother if smoother is not None else SmoothingFilter()
        self._engine = engine if engine is not None else MetricsEngine()
        self._history = history if history is not None else HistoryWindow()
        self._nominal_interval_s = nominal_interval_s

        self._lock = threading.Lock()
        self._last: SmoothedSample | None = None
        self._last_emit_at: datetime | None = None
        self._emission_count = 0

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def tick_fast(self, now: datetime) -> RawSample:
        """Generate one raw sample for *now* and buffer it."""
        sample = self._generator.next_sample(now)
        self._buffer.push(sample)
        return sample

    def tick_slow(self, now: datetime) -> Emission | None:
        """Drain, smooth, update metrics and history.

        Args:
            now: Wall-clock time of the drain; becomes the aggregate's ``ts``.

        Returns:
            The emitted telemetry and metrics, or ``None`` when nothing was
            buffered since the previous drain.
        """
        with self._lock:
            # Drain under the pipeline lock so emissions keep drain order.
            aggregate = self._buffer.drain_average(ts=now)
            if aggregate is None:
                logger.debug("Slow tick at %s found no buffered samples", now.isoformat())
                return None
            elapsed_hours = self._elapsed_hours(now)
            smoothed = self._smoother.smooth(aggregate, self._last)
            metrics = self._engine.update(smoothed, elapsed_hours)
            self._history.append(smoothed)
            self._last = smoothed
            self._last_emit_at = now
            self._emission_count += 1

        logger.debug(
            "Emitted sample: power=%.2f kW, energy=%.4f kWh, water=%.1f L",
            smoothed.power_output_kw,
            metrics.total_energy_kwh,
            metrics.water_saved_liters,
        )
        return Emission(telemetry=smoothed, metrics=metrics)

    def _elapsed_hours(self, now: datetime) -> float:
        if self._last_emit_at is None:
            return self._nominal_interval_s / SECONDS_PER_HOUR
        return (now - self._last_emit_at).total_seconds() / SECONDS_PER_HOUR

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    def current_telemetry(self) -> SmoothedSample | None:
        """Latest smoothed sample, or None before the first emission."""
        with self._lock:
            return self._last

    def current_metrics(self) -> DerivedMetrics:
        """Latest metrics snapshot."""
        with self._lock:
            return self._engine.metrics

    def history(self) -> tuple[SmoothedSample, ...]:
        """History window snapshot, oldest first."""
        with self._lock:
            return self._history.snapshot()

    @property
    def history_capacity(self) -> int:
        return self._history.capacity

    @property
    def emission_count(self) -> int:
        with self._lock:
            return self._emission_count

    def pending_count(self) -> int:
        """Raw samples buffered since the last drain."""
        return len(self._buffer)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Restart the pipeline from an empty state.

        Discards buffered samples, the smoothing predecessor, cumulative
        metrics and history.
        """
        self._buffer.drain_average()
        with self._lock:
            self._engine.reset()
            self._history.clear()
            self._last = None
            self._last_emit_at = None
            self._emission_count = 0
        logger.info("Telemetry pipeline reset")
