"""Pick the one dashboard an instance should be shown with."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from perf_metrics.endpoints import (
    LEGACY_DASHBOARDS,
    METRICS,
    CandidateEndpoint,
    CapabilityMap,
    HostingKind,
)

logger = logging.getLogger(__name__)

# Languages the shared dashboard can render.
SHARED_DASHBOARD_LANGUAGES = frozenset({"java", "nodejs"})


@dataclass(frozen=True)
class DashboardTarget:
    """Where the dashboard lives. ``path`` is None when it is unavailable."""

    hosting: HostingKind
    path: str | None

    @property
    def available(self) -> bool:
        return self.hosting is not HostingKind.NONE and self.path is not None

    def to_dict(self) -> dict[str, str | None]:
        hosting = None if self.hosting is HostingKind.NONE else self.hosting.value
        return {"hosting": hosting, "path": self.path}


NO_DASHBOARD = DashboardTarget(HostingKind.NONE, None)


@dataclass(frozen=True)
class ExpositionRollout:
    """Languages allowed to use the standard /metrics exposition.

    The shared dashboard only interprets /metrics for some languages today;
    everyone else falls back to a *metrics-dash page even when /metrics
    responds.
    """

    languages: frozenset[str] = field(default_factory=lambda: frozenset({"java"}))

    @classmethod
    def of(cls, languages: Iterable[str]) -> "ExpositionRollout":
        return cls(frozenset(lang.lower() for lang in languages))

    def allows(self, language: str | None) -> bool:
        return (language or "").lower() in self.languages


class DashboardResolver:
    """Apply the dashboard priority policy over a capability map.

    Languages are matched case-insensitively throughout.
    """

    def __init__(
        self,
        rollout: ExpositionRollout | None = None,
        *,
        mount_prefix: str = "",
    ) -> None:
        self.rollout = rollout or ExpositionRollout()
        self.mount_prefix = mount_prefix.rstrip("/")

    def select(
        self, capabilities: Mapping[str, bool], language: str | None
    ) -> CandidateEndpoint | None:
        """Return the winning endpoint, or None when nothing qualifies."""
        if self.rollout.allows(language) and capabilities.get(METRICS.path) is True:
            return METRICS
        for endpoint in LEGACY_DASHBOARDS:
            if capabilities.get(endpoint.path) is True:
                return endpoint
        return None

    def dashboard_path(
        self,
        endpoint: CandidateEndpoint,
        language: str | None,
        project_id: str | None,
    ) -> str | None:
        if endpoint.hosting is HostingKind.INSTANCE_LOCAL:
            return f"{endpoint.path}/?theme=dark"
        language = (language or "").lower()
        if language in SHARED_DASHBOARD_LANGUAGES:
            return (
                f"{self.mount_prefix}/monitor/dashboard/{language}"
                f"?theme=dark&runID={project_id or ''}"
            )
        return None

    def resolve(
        self,
        capabilities: CapabilityMap,
        language: str | None,
        project_id: str | None = None,
    ) -> DashboardTarget:
        endpoint = self.select(capabilities, language)
        if endpoint is None:
            logger.debug("No dashboard for language=%s", language)
            return NO_DASHBOARD
        path = self.dashboard_path(endpoint, language, project_id)
        logger.debug(
            "Dashboard for language=%s resolved to %s (%s)",
            language,
            path,
            endpoint.hosting.value,
        )
        return DashboardTarget(endpoint.hosting, path)


def resolve(
    capabilities: CapabilityMap,
    language: str | None,
    project_id: str | None = None,
) -> DashboardTarget:
    """Resolve with the default rollout policy."""
    return DashboardResolver().resolve(capabilities, language, project_id)
