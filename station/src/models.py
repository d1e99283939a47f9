"""
Pydantic models for canal-top solar station telemetry.

Defines the TelemetrySample model shared by every pipeline stage (raw,
aggregated and smoothed samples all have the same shape), the
DerivedMetrics snapshot published by the metrics engine, and the
MaintenanceAlert raised from the smoothed stream.

Models are frozen: once a sample or metrics snapshot is emitted, consumers
receive it by value and can never mutate it in place. Derived copies are
made with ``model_copy(update=...)``.

CHANGELOG:
- 2026-10-19: Add MaintenanceAlert model (STORY-008)
- 2026-10-19: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

# ---------------------------------------------------------------------------
# Field wiring
# ---------------------------------------------------------------------------

SAMPLE_FIELDS: tuple[str, ...] = (
    "power_output_kw",
    "temperature_panel",
    "temperature_ambient",
    "humidity_percent",
    "solar_irradiance",
    "water_temp",
    "silt_level",
)
"""Numeric TelemetrySample fields, in display order. ``ts`` is excluded."""


def check_fields(names: Iterable[str], *, owner: str) -> tuple[str, ...]:
    """Validate that every name in *names* is a numeric sample field.

    Called by pipeline stages at construction time.

    Args:
        names: Iterable of field names.
        owner: Component name used in the error message.

    Returns:
        The names as a tuple.

    Raises:
        ValueError: If any name is not in SAMPLE_FIELDS.
    """
    result = tuple(names)
    unknown = [name for name in result if name not in SAMPLE_FIELDS]
    if unknown:
        raise ValueError(f"{owner}: unknown telemetry field(s) {unknown}")
    return result


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TelemetrySample(BaseModel):
    """A single telemetry snapshot of the station.

    The same model carries raw generator output, the per-tick aggregate and
    the smoothed "current telemetry". Which clamps have been applied depends
    on the stage that produced it.

    Attributes:
        ts: Timestamp of the sample.
        power_output_kw: AC power output of the array in kilowatts.
        temperature_panel: Panel surface temperature in degrees Celsius.
        temperature_ambient: Ambient air temperature in degrees Celsius.
        humidity_percent: Relative humidity (0-100 once smoothed).
        solar_irradiance: Global irradiance in W/m2.
        water_temp: Canal water temperature in degrees Celsius.
        silt_level: Silt index of the canal water (0-100 once smoothed).
    """

    model_config = ConfigDict(frozen=True)

    ts: datetime
    power_output_kw: float
    temperature_panel: float
    temperature_ambient: float
    humidity_percent: float
    solar_irradiance: float
    water_temp: float
    silt_level: float


RawSample = TelemetrySample
AggregatedSample = TelemetrySample
SmoothedSample = TelemetrySample


class DerivedMetrics(BaseModel):
    """Cumulative and instantaneous station metrics.

    Attributes:
        water_saved_liters: Cumulative evaporation prevented by shading.
        total_energy_kwh: Cumulative energy generated.
        co2_offset_kg: CO2 avoided, always ``total_energy_kwh * 0.85``.
        efficiency_delta: Efficiency points regained by water cooling.
        panel_cooling_benefit: Degrees of cooling benefit, floored at 0.
    """

    model_config = ConfigDict(frozen=True)

    water_saved_liters: float = 0.0
    total_energy_kwh: float = 0.0
    co2_offset_kg: float = 0.0
    efficiency_delta: float = 0.0
    panel_cooling_benefit: float = 0.0


class Emission(BaseModel):
    """Result of one successful slow tick."""

    model_config = ConfigDict(frozen=True)

    telemetry: TelemetrySample
    metrics: DerivedMetrics


class MaintenanceAlert(BaseModel):
    """A maintenance condition detected on the smoothed stream.

    Attributes:
        kind: Which condition fired.
        severity: Dashboard severity bucket.
        message: Human-readable description.
        value: Observed value that tripped the threshold.
        threshold: Threshold the value was compared against.
        ts: Timestamp of the sample that raised the alert.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["panel_temperature", "silt"]
    severity: Literal["low", "medium", "high"]
    message: str
    value: float
    threshold: float
    ts: datetime
