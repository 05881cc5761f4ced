"""Public API surface for perf_common."""

from perf_common.config import MonitorSettings
from perf_common.errors import (
    ConfigurationError,
    InvalidTransitionError,
    LoadRunError,
    PerfError,
    ProbeError,
    WorkerSpawnError,
)
from perf_common.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "InvalidTransitionError",
    "LoadRunError",
    "MonitorSettings",
    "PerfError",
    "ProbeError",
    "WorkerSpawnError",
    "configure_logging",
    "get_logger",
]
