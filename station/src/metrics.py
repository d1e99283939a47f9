"""
Metrics engine: water saved, energy, efficiency gain, CO2 and cooling benefit.

Every smoothed sample updates one persistent DerivedMetrics state per
station. The sub-models are pure functions of the sample:

- evaporation_rate_lph: simplified FAO-56 Penman-Monteith reference
  evapotranspiration ET0 (mm/day) for the canal surface, converted to
  litres per hour of evaporation prevented under the panels
  (1 mm over 1 m2 is 1 litre).
- efficiency_delta: efficiency points regained because water cooling keeps
  the panel ~30 C below an uncooled panel, using a crystalline-silicon
  temperature coefficient of -0.45 %/C around the 25 C STC reference.
- cooling_benefit: ``30 - (panel - ambient)``, floored at zero.

Cumulative totals (water, energy) only ever grow: each increment is
floored at zero, so degenerate inputs or a zero interval leave them
unchanged. The CO2 offset is recomputed from total energy on every call,
never accumulated separately.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-005)

TODO:
- None
"""

from __future__ import annotations

import logging
import math

from station.src.models import DerivedMetrics, SmoothedSample

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PSYCHROMETRIC_CONSTANT: float = 0.066
"""gamma, kPa/C."""

NET_RADIATION_MJ_M2_DAY: float = 0.0864 * 500
"""Rn, fixed simplification of 500 W/m2 expressed in MJ/m2/day."""

SOIL_HEAT_FLUX: float = 0.0
"""G, negligible over open water."""

WIND_SPEED_2M: float = 2.0
"""u2, wind speed at 2 m in m/s."""

SHADED_AREA_M2: float = 15000.0
"""Canal surface covered by the panels."""

SHADING_FACTOR: float = 0.85
"""Fraction of evaporation the panels block."""

TEMPERATURE_COEFFICIENT: float = -0.0045
"""Relative power change per C above STC."""

STC_TEMPERATURE_C: float = 25.0

UNCOOLED_PENALTY_C: float = 30.0
"""How much hotter an uncooled panel is assumed to run."""

COOLING_BENEFIT_REFERENCE_C: float = 30.0
"""Panel-over-ambient rise below which cooling counts as a benefit."""

GRID_EMISSION_FACTOR_KG_PER_KWH: float = 0.85
"""Nepal grid emission factor."""


# ---------------------------------------------------------------------------
# Pure sub-models
# ---------------------------------------------------------------------------


def reference_et0(temperature_c: float, humidity_percent: float) -> float:
    """Reference evapotranspiration ET0 in mm/day."""
    t = temperature_c
    es = 0.6108 * math.exp((17.27 * t) / (t + 237.3))
    ea = es * (humidity_percent / 100.0)
    delta = (4098.0 * es) / (t + 237.3) ** 2
    gamma = PSYCHROMETRIC_CONSTANT
    u2 = WIND_SPEED_2M

    numerator = 0.408 * delta * (NET_RADIATION_MJ_M2_DAY - SOIL_HEAT_FLUX) + gamma * (
        900.0 / (t + 273.0)
    ) * u2 * (es - ea)
    denominator = delta + gamma * (1.0 + 0.34 * u2)
    return numerator / denominator


def evaporation_rate_lph(
    temperature_c: float,
    humidity_percent: float,
    shaded_area_m2: float = SHADED_AREA_M2,
) -> float:
    """Litres per hour of evaporation prevented by shading the canal."""
    et0 = reference_et0(temperature_c, humidity_percent)
    return (et0 / 24.0) * shaded_area_m2 * SHADING_FACTOR


def efficiency_delta(panel_temp_c: float) -> float:
    """Efficiency percentage points regained by cooling."""
    k = TEMPERATURE_COEFFICIENT
    loss_with_cooling = k * (panel_temp_c - STC_TEMPERATURE_C) * 100.0
    uncooled = panel_temp_c + UNCOOLED_PENALTY_C
    loss_without_cooling = k * (uncooled - STC_TEMPERATURE_C) * 100.0
    return abs(loss_without_cooling - loss_with_cooling)


def cooling_benefit(panel_temp_c: float, ambient_temp_c: float) -> float:
    """Cooling benefit in degrees, never negative."""
    return max(0.0, COOLING_BENEFIT_REFERENCE_C - (panel_temp_c - ambient_temp_c))


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class MetricsEngine:
    """Owns the single DerivedMetrics state of a station.

    Not thread-safe on its own; the pipeline serialises calls under its lock.

    Args:
        shaded_area_m2: Canal surface shaded by the array.
    """

    def __init__(self, shaded_area_m2: float = SHADED_AREA_M2) -> None:
        self._shaded_area_m2 = shaded_area_m2
        self._metrics = DerivedMetrics()

    @property
    def metrics(self) -> DerivedMetrics:
        """Latest metrics snapshot."""
        return self._metrics

    def reset(self) -> None:
        """Zero every metric. Only used on an explicit pipeline restart."""
        self._metrics = DerivedMetrics()

    def update(self, sample: SmoothedSample, elapsed_hours: float) -> DerivedMetrics:
        """Fold one smoothed sample into the station metrics.

        Args:
            sample: The newly emitted smoothed sample.
            elapsed_hours: Wall-clock interval since the previous emission.
                Zero leaves the cumulative totals unchanged.

        Returns:
            The new DerivedMetrics snapshot.
        """
        if elapsed_hours < 0:
            logger.warning(
                "Negative elapsed interval %.6g h, treating as zero", elapsed_hours
            )
            elapsed_hours = 0.0

        rate = evaporation_rate_lph(
            sample.temperature_ambient,
            sample.humidity_percent,
            self._shaded_area_m2,
        )
        water_increment = rate * elapsed_hours
        energy_increment = sample.power_output_kw * elapsed_hours

        # NaN compares False, so the negated checks drop NaN increments too.
        if not water_increment >= 0.0:
            logger.warning(
                "Degenerate evaporation increment %.6g L (T=%.2f, RH=%.2f), skipped",
                water_increment,
                sample.temperature_ambient,
                sample.humidity_percent,
            )
            water_increment = 0.0
        if not energy_increment >= 0.0:
            logger.warning(
                "Degenerate energy increment %.6g kWh, skipped", energy_increment
            )
            energy_increment = 0.0

        prev = self._metrics
        total_energy = prev.total_energy_kwh + energy_increment
        self._metrics = DerivedMetrics(
            water_saved_liters=prev.water_saved_liters + water_increment,
            total_energy_kwh=total_energy,
            co2_offset_kg=total_energy * GRID_EMISSION_FACTOR_KG_PER_KWH,
            efficiency_delta=efficiency_delta(sample.temperature_panel),
            panel_cooling_benefit=cooling_benefit(
                sample.temperature_panel, sample.temperature_ambient
            ),
        )
        return self._metrics
