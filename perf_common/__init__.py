"""Shared helpers for perf-monitor-lib."""

from perf_common.api import MonitorSettings, PerfError, configure_logging

__all__ = ["configure_logging", "MonitorSettings", "PerfError"]
