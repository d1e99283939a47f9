"""
Aggregation buffer between the fast generator tick and the slow emit tick.

Raw samples are pushed on every fast tick and reduced to a single
per-field arithmetic mean on every slow tick. The buffer is the only
structure the two schedules share, and it guards itself with its own lock:
a push never waits on anything but a concurrent drain.

Operations:
- push(sample): append a raw sample.
- drain_average(ts): mean of everything pushed since the last drain, then
  clear. Returns None when nothing was pushed ("no emission").
- len(buffer): number of pending samples.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime

from station.src.models import (
    SAMPLE_FIELDS,
    AggregatedSample,
    RawSample,
    check_fields,
)


class AggregationBuffer:
    """Thread-safe accumulator of raw samples between drains.

    Args:
        fields: Numeric fields to average. Defaults to every sample field;
            an unknown name raises ``ValueError`` immediately.

    Usage::

        buffer = AggregationBuffer()
        buffer.push(sample)
        aggregate = buffer.drain_average()
        if aggregate is None:
            ...  # nothing arrived since the previous drain
    """

    def __init__(self, fields: Iterable[str] = SAMPLE_FIELDS) -> None:
        self._fields = check_fields(fields, owner="AggregationBuffer")
        self._samples: list[RawSample] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    def push(self, sample: RawSample) -> None:
        """Append a raw sample to the current window."""
        with self._lock:
            self._samples.append(sample)

    def drain_average(self, ts: datetime | None = None) -> AggregatedSample | None:
        """Average and clear everything pushed since the previous drain.

        Fields not listed in the buffer's field set are carried over from
        the newest sample unchanged.

        Args:
            ts: Timestamp for the aggregate. Defaults to the ``ts`` of the
                newest pushed sample.

        Returns:
            The field-wise mean as a new sample, or ``None`` if the buffer
            was empty.
        """
        with self._lock:
            samples = self._samples
            self._samples = []

        if not samples:
            return None

        count = len(samples)
        means = {
            name: sum(getattr(s, name) for s in samples) / count
            for name in self._fields
        }
        newest = samples[-1]
        return newest.model_copy(update={"ts": ts or newest.ts, **means})
