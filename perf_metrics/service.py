"""Metrics status and dashboard lookups for a project instance."""

from __future__ import annotations

import logging
from pathlib import Path

from perf_common.config.settings import MonitorSettings
from perf_metrics.endpoints import LEGACY_DASHBOARDS, METRICS, CapabilityMap
from perf_metrics.manifest import (
    MANIFEST_FILES,
    ManifestCheck,
    ManifestStatus,
    has_microprofile_metrics,
    inspect_manifest,
)
from perf_metrics.models import MetricsStatus, ProjectInstance
from perf_metrics.prober import EndpointProber
from perf_metrics.resolver import DashboardResolver, DashboardTarget, ExpositionRollout

logger = logging.getLogger(__name__)


class MetricsService:
    """Combine probing, manifest inspection and dashboard resolution."""

    def __init__(
        self,
        prober: EndpointProber | None = None,
        resolver: DashboardResolver | None = None,
    ) -> None:
        self.prober = prober or EndpointProber()
        self.resolver = resolver or DashboardResolver()

    @classmethod
    def from_settings(cls, settings: MonitorSettings) -> "MetricsService":
        prober = EndpointProber(
            timeout_seconds=settings.probe_timeout_seconds,
            max_workers=settings.probe_max_workers,
        )
        resolver = DashboardResolver(
            ExpositionRollout.of(settings.exposition_languages),
            mount_prefix=settings.dashboard_mount_prefix,
        )
        return cls(prober, resolver)

    def capabilities(self, host: str, port: int) -> CapabilityMap:
        return self.prober.probe(host, port)

    def dashboard_target(
        self, host: str, port: int, project_id: str, language: str
    ) -> DashboardTarget:
        """Probe ``host:port`` and resolve the dashboard for the project."""
        return self.resolver.resolve(self.capabilities(host, port), language, project_id)

    def status(self, project: ProjectInstance) -> MetricsStatus:
        manifest = self._inspect(project)
        capabilities = self.capabilities(project.host, project.internal_port)
        metrics_endpoint = capabilities.get(METRICS.path, False)
        appmetrics_endpoint = any(
            capabilities.get(endpoint.path, False) for endpoint in LEGACY_DASHBOARDS
        )
        return MetricsStatus(
            metrics_available=metrics_endpoint or appmetrics_endpoint,
            running=project.running,
            metrics_endpoint=metrics_endpoint,
            appmetrics_endpoint=appmetrics_endpoint,
            appmetrics_package=manifest.has_dependency,
            manifest_missing=manifest.manifest_missing,
            microprofile_package=self._has_microprofile(project),
        )

    @staticmethod
    def _inspect(project: ProjectInstance) -> ManifestCheck:
        if project.project_path is None:
            return ManifestCheck(ManifestStatus.MANIFEST_MISSING)
        check = inspect_manifest(project.project_path, project.language)
        if check.manifest_missing:
            logger.warning(
                "Cannot find build manifest for project %s: %s",
                project.project_id,
                check.manifest,
            )
        return check

    @staticmethod
    def _has_microprofile(project: ProjectInstance) -> bool:
        if project.language != "java" or project.project_path is None:
            return False
        return has_microprofile_metrics(Path(project.project_path) / MANIFEST_FILES["java"])
