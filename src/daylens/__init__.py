"""Daylens - turns daily reflections into emotion-aware image guidance."""

__version__ = "0.1.0"
