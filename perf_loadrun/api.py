"""Stable load-run API surface."""

from perf_loadrun.events import EventBus, LoadRunEvent, LoadRunEventName
from perf_loadrun.models import (
    CancelOutcome,
    LoadRun,
    LoadRunOptions,
    LoadRunResponse,
    LoadRunState,
    StartOutcome,
)
from perf_loadrun.orchestrator import CANCEL_SIGNAL, LoadRunOrchestrator, classify_exit

__all__ = [
    "CANCEL_SIGNAL",
    "CancelOutcome",
    "EventBus",
    "LoadRun",
    "LoadRunEvent",
    "LoadRunEventName",
    "LoadRunOptions",
    "LoadRunOrchestrator",
    "LoadRunResponse",
    "LoadRunState",
    "StartOutcome",
    "classify_exit",
]
