"""Value types describing a monitored instance and its metrics status."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ProjectInstance:
    """A running application instance the monitor can inspect."""

    project_id: str
    language: str
    host: str
    internal_port: int
    app_status: str = "unknown"
    project_path: Path | None = None

    @property
    def running(self) -> bool:
        return self.app_status == "started"


@dataclass(frozen=True)
class MetricsStatus:
    """What the instance offers for live metrics right now."""

    metrics_available: bool
    running: bool
    metrics_endpoint: bool
    appmetrics_endpoint: bool
    appmetrics_package: bool
    manifest_missing: bool
    microprofile_package: bool
    performance_enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
