"""
Station daemon main loop for the canal-top solar telemetry pipeline.

Runs two concurrent asyncio loops over one TelemetryPipeline:
1. **Generate loop** (fast period, 100 ms default): synthesizes one raw
   sample and pushes it into the aggregation buffer.
2. **Emit loop** (slow period, 500 ms default): drains the buffer, smooths
   the aggregate, updates metrics and history, refreshes the health file and
   logs maintenance alert transitions.

Optionally a third task serves the read-only HTTP API with uvicorn.

Both loops are resilient: an exception in one iteration is logged and does
not crash the loop or affect the other loop. Graceful shutdown on
SIGTERM/SIGINT sets a shared asyncio.Event; both loops finish their current
iteration and exit. No final drain is performed, so shutdown never emits a
partial window.

Structured JSON logging is used for all events.

CHANGELOG:
- 2026-10-19: Serve read API alongside the loops (STORY-009)
- 2026-10-19: Log maintenance alert transitions (STORY-008)
- 2026-10-19: Initial creation, adapted from the edge poll/upload daemon (STORY-007)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import random
import signal
import sys
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import uvicorn

from station.src.aggregation import AggregationBuffer
from station.src.alerts import evaluate_alerts
from station.src.generator import ReadingGenerator
from station.src.health import HealthWriter
from station.src.history import HistoryWindow
from station.src.metrics import MetricsEngine
from station.src.pipeline import TelemetryPipeline
from station.src.smoothing import SmoothingFilter

if TYPE_CHECKING:
    from station.src.config import StationSettings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


def configure_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging for the station daemon.

    Sets up the root logger with a JSON-formatted handler writing to stderr.

    Args:
        level: Root log level name.
    """

    class _JsonFormatter(logging.Formatter):
        """Minimal JSON log formatter."""

        def format(self, record: logging.LogRecord) -> str:
            log_entry = {
                "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info and record.exc_info[1] is not None:
                log_entry["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_entry)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


# ---------------------------------------------------------------------------
# Startup config logging
# ---------------------------------------------------------------------------


def log_config_summary(settings: object) -> None:
    """Log a config summary at startup.

    Args:
        settings: A StationSettings instance (or any object with the same attrs).
    """
    logger.info(
        "Station daemon starting with config: "
        "station_id=%s, station_timezone=%s, "
        "fast_interval_ms=%s, slow_interval_ms=%s, "
        "smoothing_alpha=%s, history_capacity=%s, random_seed=%s, "
        "health_path=%s, api_enabled=%s, api_host=%s, api_port=%s",
        settings.station_id,  # type: ignore[attr-defined]
        settings.station_timezone,  # type: ignore[attr-defined]
        settings.fast_interval_ms,  # type: ignore[attr-defined]
        settings.slow_interval_ms,  # type: ignore[attr-defined]
        settings.smoothing_alpha,  # type: ignore[attr-defined]
        settings.history_capacity,  # type: ignore[attr-defined]
        settings.random_seed,  # type: ignore[attr-defined]
        settings.health_path,  # type: ignore[attr-defined]
        settings.api_enabled,  # type: ignore[attr-defined]
        settings.api_host,  # type: ignore[attr-defined]
        settings.api_port,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def build_pipeline(settings: StationSettings) -> TelemetryPipeline:
    """Wire a TelemetryPipeline from settings.

    Args:
        settings: Loaded StationSettings.

    Returns:
        A pipeline with a fresh state block.
    """
    generator = ReadingGenerator(
        rng=random.Random(settings.random_seed),
        tz=settings.station_timezone,
    )
    return TelemetryPipeline(
        generator=generator,
        buffer=AggregationBuffer(),
        smoother=SmoothingFilter(alpha=settings.smoothing_alpha),
        engine=MetricsEngine(),
        history=HistoryWindow(settings.history_capacity),
        nominal_interval_s=settings.slow_interval_s,
    )


# ---------------------------------------------------------------------------
# Single-iteration functions (easily testable)
# ---------------------------------------------------------------------------


def _generate_once(
    *,
    pipeline: TelemetryPipeline,
    health: HealthWriter | None,
    clock: Clock = _utcnow,
) -> None:
    """Execute a single generate-and-push cycle.

    Catches all exceptions so that the caller's loop is never broken.

    Args:
        pipeline: The station pipeline.
        health: HealthWriter instance, or None to skip health updates.
        clock: Source of the wall-clock timestamp.
    """
    try:
        pipeline.tick_fast(clock())
        if health is not None:
            health.record_sample()
    except Exception:
        logger.error("Generate cycle error", exc_info=True)


def _emit_once(
    *,
    pipeline: TelemetryPipeline,
    health: HealthWriter | None,
    clock: Clock = _utcnow,
    active_alerts: set[str] | None = None,
) -> bool:
    """Execute a single drain-smooth-update cycle.

    Catches all exceptions so that the caller's loop is never broken.
    After each emission the health file is rewritten and alert transitions
    are logged (WARNING when an alert kind starts, INFO when it clears).

    Args:
        pipeline: The station pipeline.
        health: HealthWriter instance, or None to skip health writes.
        clock: Source of the wall-clock timestamp.
        active_alerts: Alert kinds active after the previous emission;
            updated in place. None disables alert logging.

    Returns:
        True if a sample was emitted, False on an empty buffer or error.
    """
    try:
        emission = pipeline.tick_slow(clock())
    except Exception:
        logger.error("Emit cycle error", exc_info=True)
        return False

    if emission is None:
        logger.debug("Emit skipped: no samples buffered since last drain")
        return False

    if active_alerts is not None:
        alerts = evaluate_alerts(emission.telemetry)
        kinds = {alert.kind for alert in alerts}
        for alert in alerts:
            if alert.kind not in active_alerts:
                logger.warning("Maintenance alert raised: %s", alert.message)
        for kind in sorted(active_alerts - kinds):
            logger.info("Maintenance alert cleared: %s", kind)
        active_alerts.clear()
        active_alerts.update(kinds)

    if health is not None:
        try:
            health.record_emit(
                pending_count=pipeline.pending_count(),
                emission_count=pipeline.emission_count,
            )
        except Exception:
            logger.warning("Failed to write health file", exc_info=True)

    return True


# ---------------------------------------------------------------------------
# Loop runners
# ---------------------------------------------------------------------------


async def _generate_loop(
    *,
    pipeline: TelemetryPipeline,
    interval_s: float,
    shutdown_event: asyncio.Event,
    health: HealthWriter | None,
    clock: Clock = _utcnow,
) -> None:
    """Run the generate loop until shutdown_event is set.

    Args:
        pipeline: The station pipeline.
        interval_s: Seconds between generated samples.
        shutdown_event: Event to signal graceful shutdown.
        health: HealthWriter instance, or None to skip health updates.
        clock: Source of the wall-clock timestamp.
    """
    logger.info("Generate loop started (interval=%ss)", interval_s)
    while not shutdown_event.is_set():
        _generate_once(pipeline=pipeline, health=health, clock=clock)
        # Use wait with timeout so we can check shutdown between sleeps
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval_s)
    logger.info("Generate loop stopped")


async def _emit_loop(
    *,
    pipeline: TelemetryPipeline,
    interval_s: float,
    shutdown_event: asyncio.Event,
    health: HealthWriter | None,
    clock: Clock = _utcnow,
) -> None:
    """Run the emit loop until shutdown_event is set.

    Sleeps first so the first drain averages a full window of samples.

    Args:
        pipeline: The station pipeline.
        interval_s: Seconds between emissions.
        shutdown_event: Event to signal graceful shutdown.
        health: HealthWriter instance, or None to skip health writes.
        clock: Source of the wall-clock timestamp.
    """
    logger.info("Emit loop started (interval=%ss)", interval_s)
    active_alerts: set[str] = set()
    while not shutdown_event.is_set():
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval_s)
        if shutdown_event.is_set():
            break
        _emit_once(
            pipeline=pipeline,
            health=health,
            clock=clock,
            active_alerts=active_alerts,
        )
    logger.info("Emit loop stopped")


class EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves SIGTERM/SIGINT handling to the daemon."""

    def install_signal_handlers(self) -> None:
        """No-op; the daemon's shutdown event stops the server."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        """No-op; the daemon's shutdown event stops the server."""
        yield


async def _serve_api(server: uvicorn.Server, shutdown_event: asyncio.Event) -> None:
    """Serve the HTTP API until shutdown_event is set.

    Args:
        server: Configured uvicorn server.
        shutdown_event: Event to signal graceful shutdown.
    """
    serve_task = asyncio.create_task(server.serve())
    await shutdown_event.wait()
    server.should_exit = True
    await serve_task
    logger.info("API server stopped")


# ---------------------------------------------------------------------------
# Concurrent runner with graceful shutdown
# ---------------------------------------------------------------------------


async def run_loops(
    *,
    pipeline: TelemetryPipeline,
    fast_interval_s: float,
    slow_interval_s: float,
    shutdown_event: asyncio.Event,
    health: HealthWriter | None = None,
    api_server: uvicorn.Server | None = None,
    clock: Clock = _utcnow,
) -> None:
    """Run generate and emit loops (and the API) concurrently until shutdown.

    Args:
        pipeline: The station pipeline.
        fast_interval_s: Seconds between generated samples.
        slow_interval_s: Seconds between emissions.
        shutdown_event: Event to signal graceful shutdown.
        health: HealthWriter instance, or None to skip health writes.
        api_server: uvicorn server for the read API, or None to run headless.
        clock: Source of the wall-clock timestamp.
    """
    logger.info("Starting concurrent generate and emit loops")

    tasks = [
        _generate_loop(
            pipeline=pipeline,
            interval_s=fast_interval_s,
            shutdown_event=shutdown_event,
            health=health,
            clock=clock,
        ),
        _emit_loop(
            pipeline=pipeline,
            interval_s=slow_interval_s,
            shutdown_event=shutdown_event,
            health=health,
            clock=clock,
        ),
    ]
    if api_server is not None:
        tasks.append(_serve_api(api_server, shutdown_event))

    await asyncio.gather(*tasks)

    logger.info(
        "Shutdown complete: %d emissions, %d samples discarded",
        pipeline.emission_count,
        pipeline.pending_count(),
    )


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def async_main() -> None:
    """Async entrypoint: load config, build components, run loops.

    Sets up SIGTERM/SIGINT handlers to trigger graceful shutdown.
    """
    from station.src.api.main import create_app
    from station.src.config import StationSettings

    settings = StationSettings()
    configure_logging(settings.log_level)
    log_config_summary(settings)

    shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: _handle_signal(shutdown_event),
        )

    pipeline = build_pipeline(settings)
    health = HealthWriter(settings.health_path)

    api_server = None
    if settings.api_enabled:
        app = create_app(pipeline, cors_origins=settings.cors_origin_list)
        api_server = EmbeddedServer(
            uvicorn.Config(
                app,
                host=settings.api_host,
                port=settings.api_port,
                log_config=None,
            )
        )

    await run_loops(
        pipeline=pipeline,
        fast_interval_s=settings.fast_interval_s,
        slow_interval_s=settings.slow_interval_s,
        shutdown_event=shutdown_event,
        health=health,
        api_server=api_server,
    )


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    """Handle SIGTERM/SIGINT by setting the shutdown event.

    Args:
        shutdown_event: The event to set for graceful shutdown.
    """
    logger.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


def main() -> None:
    """Synchronous entrypoint for the station daemon."""
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
