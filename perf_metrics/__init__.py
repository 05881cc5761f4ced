"""Metrics endpoint discovery and dashboard resolution."""

from perf_metrics.api import (
    DashboardTarget,
    EndpointProber,
    HostingKind,
    MetricsService,
    probe,
    resolve,
)

__all__ = [
    "DashboardTarget",
    "EndpointProber",
    "HostingKind",
    "MetricsService",
    "probe",
    "resolve",
]
