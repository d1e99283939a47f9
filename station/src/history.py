"""
Bounded FIFO window of the most recent smoothed samples, for charting.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-006)

TODO:
- None
"""

from __future__ import annotations

from collections import deque

from station.src.models import SmoothedSample

DEFAULT_CAPACITY: int = 60
"""60 samples at the 500 ms emit period is the last 30 seconds."""


class HistoryWindow:
    """Fixed-capacity ring buffer; the oldest sample is evicted first.

    Args:
        capacity: Maximum number of samples kept. Must be >= 1.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"HistoryWindow: capacity must be >= 1, got {capacity}")
        self._samples: deque[SmoothedSample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen or 0

    def __len__(self) -> int:
        return len(self._samples)

    def append(self, sample: SmoothedSample) -> None:
        """Add *sample* at the back, evicting from the front when full."""
        self._samples.append(sample)

    def snapshot(self) -> tuple[SmoothedSample, ...]:
        """Read-only copy of the window, oldest first."""
        return tuple(self._samples)

    def clear(self) -> None:
        self._samples.clear()
