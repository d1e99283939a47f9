"""
Station daemon configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Every value has a default so the simulated station starts with no
environment at all; the defaults reproduce the reference 100 ms / 500 ms
tick rates, alpha 0.3 smoothing and a 60-sample history window.

CHANGELOG:
- 2026-10-19: Add API and CORS settings (STORY-009)
- 2026-10-19: Initial creation (STORY-001)

TODO:
- None
"""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class StationSettings(BaseSettings):
    """Station daemon configuration for the canal-top telemetry pipeline.

    All values are loaded from environment variables (or a ``.env`` file).

    Attributes:
        station_id: Identifier of the single station this process runs.
        station_timezone: IANA time zone used to derive the hour of day
            for the diurnal generator model.
        fast_interval_ms: Generator period in milliseconds.
        slow_interval_ms: Aggregate/emit period in milliseconds. Must not be
            shorter than the generator period.
        smoothing_alpha: EMA weight given to the new aggregate (0, 1].
        history_capacity: Number of smoothed samples kept for charting.
        random_seed: Optional seed for the generator's random source.
        health_path: Filesystem path of the JSON health file.
        api_enabled: Serve the read-only HTTP API alongside the loops.
        api_host: Bind address for the HTTP API.
        api_port: Bind port for the HTTP API.
        cors_origins: Comma-separated dashboard origins allowed by CORS.
        log_level: Root log level name.
    """

    station_id: str = "canal-station-1"
    station_timezone: str = "Asia/Kathmandu"
    fast_interval_ms: int = 100
    slow_interval_ms: int = 500
    smoothing_alpha: float = 0.3
    history_capacity: int = 60
    random_seed: int | None = None
    health_path: str = "/data/health.json"
    api_enabled: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "*"
    log_level: str = "INFO"

    @property
    def fast_interval_s(self) -> float:
        """Generator period in seconds."""
        return self.fast_interval_ms / 1000.0

    @property
    def slow_interval_s(self) -> float:
        """Aggregate/emit period in seconds."""
        return self.slow_interval_ms / 1000.0

    @property
    def cors_origin_list(self) -> list[str]:
        """CORS origins split into a list, blanks dropped."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @field_validator("station_id")
    @classmethod
    def station_id_must_not_be_blank(cls, v: str) -> str:
        """Validate that the station id is not empty."""
        if not v.strip():
            raise ValueError("STATION_ID must not be empty")
        return v

    @field_validator("station_timezone")
    @classmethod
    def station_timezone_must_exist(cls, v: str) -> str:
        """Validate that the time zone is a known IANA zone.

        The generator's irradiance curve is keyed on local hour, so an
        unknown zone would shift the whole diurnal model.
        """
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"STATION_TIMEZONE '{v}' is not a known time zone") from exc
        return v

    @field_validator("fast_interval_ms")
    @classmethod
    def fast_interval_must_be_reasonable(cls, v: int) -> int:
        """Validate the generator period is at least 10 ms."""
        if v < 10:
            raise ValueError("FAST_INTERVAL_MS must be >= 10")
        return v

    @field_validator("smoothing_alpha")
    @classmethod
    def smoothing_alpha_must_be_in_range(cls, v: float) -> float:
        """Validate alpha lies in (0, 1]."""
        if not 0.0 < v <= 1.0:
            raise ValueError("SMOOTHING_ALPHA must be > 0 and <= 1")
        return v

    @field_validator("history_capacity")
    @classmethod
    def history_capacity_must_be_positive(cls, v: int) -> int:
        """Validate the history window holds at least one sample."""
        if v < 1:
            raise ValueError("HISTORY_CAPACITY must be >= 1")
        return v

    @field_validator("api_port")
    @classmethod
    def api_port_must_be_valid(cls, v: int) -> int:
        """Validate TCP port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("API_PORT must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Validate and normalise the log level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL '{v}' is not a valid logging level")
        return level

    @model_validator(mode="after")
    def _slow_interval_not_below_fast(self) -> "StationSettings":
        """Each drain must be able to average at least one generated sample."""
        if self.slow_interval_ms < self.fast_interval_ms:
            raise ValueError("SLOW_INTERVAL_MS must be >= FAST_INTERVAL_MS")
        return self

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
