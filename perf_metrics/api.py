"""Stable metrics discovery API surface."""

from perf_metrics.endpoints import (
    CANDIDATE_ENDPOINTS,
    CandidateEndpoint,
    CapabilityMap,
    HostingKind,
)
from perf_metrics.formats import (
    is_exposition_format,
    is_legacy_dashboard_format,
    is_recognized_format,
)
from perf_metrics.manifest import (
    ManifestCheck,
    ManifestStatus,
    has_metrics_dependency,
    has_microprofile_metrics,
    inspect_manifest,
)
from perf_metrics.models import MetricsStatus, ProjectInstance
from perf_metrics.prober import EndpointProber, HttpResponse, probe
from perf_metrics.resolver import (
    NO_DASHBOARD,
    DashboardResolver,
    DashboardTarget,
    ExpositionRollout,
    resolve,
)
from perf_metrics.service import MetricsService

__all__ = [
    "CANDIDATE_ENDPOINTS",
    "CandidateEndpoint",
    "CapabilityMap",
    "DashboardResolver",
    "DashboardTarget",
    "EndpointProber",
    "ExpositionRollout",
    "HostingKind",
    "HttpResponse",
    "ManifestCheck",
    "ManifestStatus",
    "MetricsService",
    "MetricsStatus",
    "NO_DASHBOARD",
    "ProjectInstance",
    "has_metrics_dependency",
    "has_microprofile_metrics",
    "inspect_manifest",
    "is_exposition_format",
    "is_legacy_dashboard_format",
    "is_recognized_format",
    "probe",
    "resolve",
]
