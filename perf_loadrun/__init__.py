"""Load-run orchestration for monitored instances."""

from perf_loadrun.api import EventBus, LoadRunEvent, LoadRunOrchestrator

__all__ = ["EventBus", "LoadRunEvent", "LoadRunOrchestrator"]
