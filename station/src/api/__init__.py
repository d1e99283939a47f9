"""
Read-only HTTP API over the station telemetry pipeline.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-009)

TODO:
- None
"""
