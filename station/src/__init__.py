"""
Station daemon package for the canal-top solar monitoring pipeline.

Synthesizes raw sensor readings at a fast rate, aggregates and smooths them
into a stable low-rate stream, derives water-saving, efficiency, energy and
CO2 metrics, and serves them read-only to the dashboard over HTTP.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-001)

TODO:
- None
"""
