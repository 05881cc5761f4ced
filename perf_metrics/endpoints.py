"""Catalog of the endpoints an instance may expose metrics on."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class HostingKind(str, Enum):
    """Who serves the dashboard for a capable endpoint."""

    INSTANCE_LOCAL = "project"
    SHARED_CONTAINER = "performanceContainer"
    NONE = "none"


@dataclass(frozen=True)
class CandidateEndpoint:
    """A known path that may expose a recognized metrics format."""

    path: str
    hosting: HostingKind


METRICS = CandidateEndpoint("/metrics", HostingKind.SHARED_CONTAINER)
APPMETRICS_DASH = CandidateEndpoint("/appmetrics-dash", HostingKind.INSTANCE_LOCAL)
JAVAMETRICS_DASH = CandidateEndpoint("/javametrics-dash", HostingKind.INSTANCE_LOCAL)
SWIFTMETRICS_DASH = CandidateEndpoint("/swiftmetrics-dash", HostingKind.INSTANCE_LOCAL)
# Spring applications; probed but not rendered by the shared dashboard.
ACTUATOR_PROMETHEUS = CandidateEndpoint("/actuator/prometheus", HostingKind.SHARED_CONTAINER)

CANDIDATE_ENDPOINTS: tuple[CandidateEndpoint, ...] = (
    METRICS,
    APPMETRICS_DASH,
    JAVAMETRICS_DASH,
    SWIFTMETRICS_DASH,
    ACTUATOR_PROMETHEUS,
)

LEGACY_DASHBOARDS: tuple[CandidateEndpoint, ...] = (
    APPMETRICS_DASH,
    JAVAMETRICS_DASH,
    SWIFTMETRICS_DASH,
)

# Path -> "responded with a recognized format". Rebuilt on every probe.
CapabilityMap = Dict[str, bool]
