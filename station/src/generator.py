"""
Synthetic reading generator for the canal-top solar station.

Produces one raw TelemetrySample per fast tick from a deterministic
time-of-day model plus bounded uniform jitter. The model is diurnal:
irradiance, ambient temperature and water temperature follow a half-sine
over the 06:00-18:00 daylight window of the station's local time zone.

The generator holds no accumulated state. Its only input besides ``now``
is the injected ``random.Random`` instance, so a seeded source reproduces
the same stream exactly.

Humidity and silt are deliberately left unclamped here; the smoothing
filter clamps them after blending.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

import math
import random
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from station.src.models import RawSample

# ---------------------------------------------------------------------------
# Model constants
# ---------------------------------------------------------------------------

SOLAR_PEAK_W_M2: float = 1000.0
"""Clear-sky irradiance at solar noon."""

IRRADIANCE_NOISE_W_M2: float = 50.0
"""Half-width of the uniform irradiance jitter."""

SYSTEM_CAPACITY_KW: float = 250.0
"""Nameplate capacity of the canal-top array."""

EFFICIENCY_RANGE: tuple[float, float] = (0.18, 0.21)
"""Uniform range of the per-sample module efficiency."""

AMBIENT_BASE_C: float = 25.0
AMBIENT_SWING_C: float = 8.0
AMBIENT_NOISE_C: float = 1.5
AMBIENT_FLOOR_C: float = 15.0

PANEL_OFFSET_C: float = 10.0
"""Panel runs this much above ambient before irradiance heating."""

PANEL_IRRADIANCE_GAIN: float = 0.015
"""Degrees of panel heating per W/m2."""

PANEL_FLOOR_C: float = 20.0

HUMIDITY_BASE_PCT: float = 80.0
HUMIDITY_NOISE_PCT: float = 5.0

WATER_BASE_C: float = 22.0
WATER_SWING_C: float = 4.0
WATER_FLOOR_C: float = 15.0

SILT_BASE: float = 10.0
SILT_RANGE: float = 20.0
SILT_SPIKE: float = 30.0
SILT_SPIKE_PROBABILITY: float = 0.05

DAYLIGHT_START_HOUR: int = 6
DAYLIGHT_END_HOUR: int = 18


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def daylight_fraction(hour: int) -> float:
    """Return ``sin(((hour - 6) / 12) * pi)``, the diurnal shape factor.

    Positive between 06:00 and 18:00, zero at both ends, negative at night.
    Callers decide whether the night-time values are meaningful.
    """
    return math.sin(((hour - DAYLIGHT_START_HOUR) / 12) * math.pi)


def is_daytime(hour: int) -> bool:
    """True for hours 6 through 18 inclusive."""
    return DAYLIGHT_START_HOUR <= hour <= DAYLIGHT_END_HOUR


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ReadingGenerator:
    """Deterministic time-of-day model with injected random jitter.

    Args:
        rng: Random source. Pass ``random.Random(seed)`` for reproducible
            streams; defaults to an unseeded instance.
        tz: Time zone used to derive the local hour from ``now``. Naive
            datetimes are taken as already being local time.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        tz: tzinfo | str = "Asia/Kathmandu",
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    def local_hour(self, now: datetime) -> int:
        """Hour of day (0-23) of *now* in the station time zone."""
        if now.tzinfo is None:
            return now.hour
        return now.astimezone(self._tz).hour

    def next_sample(self, now: datetime) -> RawSample:
        """Generate one raw sample for wall-clock time *now*.

        Never fails. Irradiance and power are always non-negative; at night
        irradiance is exactly zero.

        Args:
            now: Wall-clock timestamp, stored as the sample's ``ts``.

        Returns:
            A raw (unsmoothed, humidity/silt unclamped) TelemetrySample.
        """
        rng = self._rng
        hour = self.local_hour(now)
        shape = daylight_fraction(hour)

        if is_daytime(hour):
            irradiance = SOLAR_PEAK_W_M2 * shape + rng.uniform(
                -IRRADIANCE_NOISE_W_M2, IRRADIANCE_NOISE_W_M2
            )
            irradiance = max(0.0, irradiance)
        else:
            irradiance = 0.0

        efficiency = rng.uniform(*EFFICIENCY_RANGE)
        power_kw = max(0.0, (irradiance / 1000.0) * SYSTEM_CAPACITY_KW * efficiency)

        ambient = AMBIENT_BASE_C + AMBIENT_SWING_C * shape
        ambient = max(AMBIENT_FLOOR_C, ambient + rng.uniform(-AMBIENT_NOISE_C, AMBIENT_NOISE_C))

        panel = max(PANEL_FLOOR_C, ambient + PANEL_OFFSET_C + irradiance * PANEL_IRRADIANCE_GAIN)

        humidity = HUMIDITY_BASE_PCT - ambient + rng.uniform(-HUMIDITY_NOISE_PCT, HUMIDITY_NOISE_PCT)

        water = max(WATER_FLOOR_C, WATER_BASE_C + WATER_SWING_C * shape)

        silt = SILT_BASE + rng.uniform(0.0, SILT_RANGE)
        if rng.random() < SILT_SPIKE_PROBABILITY:
            silt += SILT_SPIKE

        return RawSample(
            ts=now,
            power_output_kw=power_kw,
            temperature_panel=panel,
            temperature_ambient=ambient,
            humidity_percent=humidity,
            solar_irradiance=irradiance,
            water_temp=water,
            silt_level=silt,
        )
