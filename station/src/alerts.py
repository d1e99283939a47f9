"""
Maintenance alert rules evaluated on the smoothed telemetry stream.

Two conditions the dashboard surfaces as warnings:
- panel temperature above 50 C (cooling spray may be needed);
- high silt level, which degrades the water cooling loop.

Pure functions: no state, no I/O, no clock.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-008)

TODO:
- None
"""

from __future__ import annotations

from station.src.models import MaintenanceAlert, SmoothedSample

PANEL_TEMP_WARNING_C: float = 50.0
"""Panel temperature above which the dashboard flags a warning."""

SILT_HIGH_LEVEL: float = 40.0
"""Silt index at or above which the canal section needs flushing.

Normal readings sit in 10-30; a spike adds 30 on top.
"""


def evaluate_alerts(sample: SmoothedSample) -> list[MaintenanceAlert]:
    """Return every maintenance alert raised by *sample*.

    Args:
        sample: The current smoothed telemetry.

    Returns:
        Alerts in a stable order (panel temperature first), possibly empty.
    """
    alerts: list[MaintenanceAlert] = []

    if sample.temperature_panel > PANEL_TEMP_WARNING_C:
        alerts.append(
            MaintenanceAlert(
                kind="panel_temperature",
                severity="medium",
                message=(
                    f"Panel temperature {sample.temperature_panel:.1f} C exceeds "
                    f"{PANEL_TEMP_WARNING_C:.0f} C. Consider activating cooling spray."
                ),
                value=sample.temperature_panel,
                threshold=PANEL_TEMP_WARNING_C,
                ts=sample.ts,
            )
        )

    if sample.silt_level >= SILT_HIGH_LEVEL:
        alerts.append(
            MaintenanceAlert(
                kind="silt",
                severity="high",
                message="High silt levels detected. May affect water cooling efficiency.",
                value=sample.silt_level,
                threshold=SILT_HIGH_LEVEL,
                ts=sample.ts,
            )
        )

    return alerts
