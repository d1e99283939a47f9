"""
Exponential moving average filter with per-field physical clamps.

Each aggregate is blended with the previous smoothed sample,
``out = prev + alpha * (new - prev)``, and the result is clamped to the
physical range of the field. Clamping is applied after blending.

The first aggregate has no predecessor and passes through unchanged.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-004)

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from station.src.models import (
    SAMPLE_FIELDS,
    AggregatedSample,
    SmoothedSample,
    check_fields,
)

DEFAULT_ALPHA: float = 0.3
"""Weight of the new aggregate: 30% new data, 70% previous output."""

DEFAULT_CLAMPS: dict[str, tuple[float | None, float | None]] = {
    "humidity_percent": (30.0, 100.0),
    "solar_irradiance": (0.0, None),
    "water_temp": (15.0, None),
    "silt_level": (0.0, 100.0),
}
"""Maps field name -> (min, max) applied after blending. None is unbounded.

Panel and ambient temperatures are not clamped here; the generator floors
them.
"""


def clamp(value: float, lo: float | None, hi: float | None) -> float:
    """Clamp *value* to ``[lo, hi]``; a None bound is open."""
    if lo is not None and value < lo:
        return lo
    if hi is not None and value > hi:
        return hi
    return value


class SmoothingFilter:
    """EMA blend followed by field clamps.

    Args:
        alpha: Weight of the new aggregate, in (0, 1].
        clamps: Field -> (min, max) bounds applied after blending.
        fields: Fields to blend. Defaults to every numeric sample field.

    Raises:
        ValueError: If alpha is out of range or a field name is unknown.
    """

    def __init__(
        self,
        alpha: float = DEFAULT_ALPHA,
        clamps: Mapping[str, tuple[float | None, float | None]] = DEFAULT_CLAMPS,
        fields: Iterable[str] = SAMPLE_FIELDS,
    ) -> None:
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"SmoothingFilter: alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self._fields = check_fields(fields, owner="SmoothingFilter")
        check_fields(clamps.keys(), owner="SmoothingFilter clamps")
        self._clamps = dict(clamps)

    def smooth(
        self,
        new: AggregatedSample,
        prev: SmoothedSample | None,
    ) -> SmoothedSample:
        """Blend *new* into *prev* and clamp the result.

        Args:
            new: The freshly drained aggregate.
            prev: The previous smoothed sample, or None on the first tick.

        Returns:
            *new* itself when *prev* is None, otherwise a new clamped sample
            carrying ``new.ts``.
        """
        if prev is None:
            return new

        alpha = self.alpha
        update: dict[str, float] = {}
        for name in self._fields:
            old = getattr(prev, name)
            value = old + alpha * (getattr(new, name) - old)
            bounds = self._clamps.get(name)
            if bounds is not None:
                value = clamp(value, *bounds)
            update[name] = value

        return new.model_copy(update=update)
