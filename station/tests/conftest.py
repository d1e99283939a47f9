"""
Shared test fixtures for station daemon tests.

All station env vars are cleaned before each test to ensure isolation, and
the working directory is moved to tmp_path so no .env file is picked up.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

import pytest

# All StationSettings environment variable names, used for cleanup.
_ALL_STATION_ENV_VARS = (
    "STATION_ID",
    "STATION_TIMEZONE",
    "FAST_INTERVAL_MS",
    "SLOW_INTERVAL_MS",
    "SMOOTHING_ALPHA",
    "HISTORY_CAPACITY",
    "RANDOM_SEED",
    "HEALTH_PATH",
    "API_ENABLED",
    "API_HOST",
    "API_PORT",
    "CORS_ORIGINS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_station_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all station env vars and isolate from .env files before each test."""
    for var in _ALL_STATION_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_vars_full(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set every StationSettings environment variable.

    Returns the dict of env var names to values for assertion convenience.
    """
    env = {
        "STATION_ID": "canal-section-b",
        "STATION_TIMEZONE": "UTC",
        "FAST_INTERVAL_MS": "50",
        "SLOW_INTERVAL_MS": "250",
        "SMOOTHING_ALPHA": "0.5",
        "HISTORY_CAPACITY": "120",
        "RANDOM_SEED": "42",
        "HEALTH_PATH": "/tmp/test-health.json",
        "API_ENABLED": "false",
        "API_HOST": "127.0.0.1",
        "API_PORT": "9000",
        "CORS_ORIGINS": "https://a.example.com, https://b.example.com",
        "LOG_LEVEL": "debug",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env
