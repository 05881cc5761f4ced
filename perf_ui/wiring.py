from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console

from perf_common.api import MonitorSettings
from perf_loadrun.api import EventBus, LoadRunOrchestrator
from perf_metrics.api import MetricsService


@dataclass
class UIContext:
    """Container for CLI services, initialized lazily."""

    config_path: Optional[Path] = None

    _console: Optional[Console] = None
    _settings: Optional[MonitorSettings] = None
    _metrics_service: Optional[MetricsService] = None
    _orchestrator: Optional[LoadRunOrchestrator] = None

    @property
    def console(self) -> Console:
        if self._console is None:
            self._console = Console()
        return self._console

    @console.setter
    def console(self, value: Console) -> None:
        self._console = value

    @property
    def settings(self) -> MonitorSettings:
        if self._settings is None:
            if self.config_path is not None:
                self._settings = MonitorSettings.load(self.config_path)
            else:
                self._settings = MonitorSettings.from_env()
        return self._settings

    @settings.setter
    def settings(self, value: MonitorSettings) -> None:
        self._settings = value

    @property
    def metrics_service(self) -> MetricsService:
        if self._metrics_service is None:
            self._metrics_service = MetricsService.from_settings(self.settings)
        return self._metrics_service

    @metrics_service.setter
    def metrics_service(self, value: MetricsService) -> None:
        self._metrics_service = value

    @property
    def orchestrator(self) -> LoadRunOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = LoadRunOrchestrator.from_settings(
                self.settings, bus=EventBus()
            )
        return self._orchestrator

    @orchestrator.setter
    def orchestrator(self, value: LoadRunOrchestrator) -> None:
        self._orchestrator = value
