"""
Health file writer for the station daemon.

Writes a JSON health file at a configurable path with four fields:
- last_sample_ts: ISO timestamp of the most recent generated raw sample.
- last_emit_ts: ISO timestamp of the most recent smoothed emission.
- pending_count: Raw samples buffered since the last drain.
- emission_count: Smoothed samples emitted since start (or last reset).

The file is overwritten on every emit tick, providing a simple liveness
signal that Docker HEALTHCHECK or monitoring can inspect. Raw samples only
update the in-memory timestamp.

CHANGELOG:
- 2026-10-19: Initial creation, adapted from the edge health writer (STORY-010)

TODO:
- None
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path


class HealthWriter:
    """Writes station health status to a JSON file.

    Args:
        path: Filesystem path for the health JSON file. Accepts str or Path.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._last_sample_ts: str | None = None
        self._last_emit_ts: str | None = None
        self._pending_count: int = 0
        self._emission_count: int = 0

    def record_sample(self) -> None:
        """Record a generated raw sample (in memory only)."""
        self._last_sample_ts = datetime.now(tz=UTC).isoformat()

    def record_emit(self, *, pending_count: int, emission_count: int) -> None:
        """Record an emit tick and write the health file.

        Args:
            pending_count: Samples still buffered after the tick.
            emission_count: Total emissions so far.
        """
        self._last_emit_ts = datetime.now(tz=UTC).isoformat()
        self._pending_count = pending_count
        self._emission_count = emission_count
        self._write()

    def _write(self) -> None:
        """Write the health JSON file with current state."""
        data = {
            "last_sample_ts": self._last_sample_ts,
            "last_emit_ts": self._last_emit_ts,
            "pending_count": self._pending_count,
            "emission_count": self._emission_count,
        }
        self.path.write_text(json.dumps(data))
