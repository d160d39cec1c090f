"""Metrics collector for ereb job-scheduler servers."""

__version__ = "1.0.0"
