"""Build-manifest checks for the metrics dependency of a project."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

MANIFEST_FILES: dict[str, str] = {
    "java": "pom.xml",
    "nodejs": "package.json",
    "javascript": "package.json",
    "swift": "Package.swift",
}

NODE_METRICS_PACKAGE = "appmetrics-dash"
JAVA_METRICS_MARKER = "javametrics"
SWIFT_METRICS_MARKER = "SwiftMetrics.git"
MICROPROFILE_MARKER = "<artifactId>microprofile</artifactId>"


class ManifestStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    MANIFEST_MISSING = "manifest_missing"
    UNSUPPORTED_LANGUAGE = "unsupported_language"


@dataclass(frozen=True)
class ManifestCheck:
    """Outcome of looking for the metrics dependency in a build manifest."""

    status: ManifestStatus
    manifest: Path | None = None

    @property
    def has_dependency(self) -> bool:
        return self.status is ManifestStatus.PRESENT

    @property
    def manifest_missing(self) -> bool:
        return self.status is ManifestStatus.MANIFEST_MISSING


def _node_has_dependency(text: str) -> bool:
    package = json.loads(text)
    dependencies = package.get("dependencies") if isinstance(package, dict) else None
    return isinstance(dependencies, dict) and bool(dependencies.get(NODE_METRICS_PACKAGE))


def _manifest_declares_metrics(text: str, language: str) -> bool:
    if language in ("nodejs", "javascript"):
        return _node_has_dependency(text)
    if language == "java":
        return JAVA_METRICS_MARKER in text
    if language == "swift":
        return SWIFT_METRICS_MARKER in text
    return False


def inspect_manifest(project_path: Path | str, language: str) -> ManifestCheck:
    """Look for the metrics dependency in the project's build manifest.

    A file that cannot be read or parsed counts as not declaring the
    dependency.
    """
    filename = MANIFEST_FILES.get(language)
    if filename is None:
        return ManifestCheck(ManifestStatus.UNSUPPORTED_LANGUAGE)
    manifest = Path(project_path) / filename
    if not manifest.exists():
        logger.debug("Build manifest %s not found", manifest)
        return ManifestCheck(ManifestStatus.MANIFEST_MISSING, manifest)
    try:
        present = _manifest_declares_metrics(
            manifest.read_text(encoding="utf-8"), language
        )
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.warning("Cannot inspect build manifest %s: %s", manifest, exc)
        present = False
    logger.debug("Metrics dependency in %s: %s", manifest, present)
    status = ManifestStatus.PRESENT if present else ManifestStatus.ABSENT
    return ManifestCheck(status, manifest)


def has_metrics_dependency(project_path: Path | str, language: str) -> bool:
    return inspect_manifest(project_path, language).has_dependency


def has_microprofile_metrics(pom_path: Path | str) -> bool:
    """Return True when a POM declares the MicroProfile bundle."""
    pom = Path(pom_path)
    try:
        return MICROPROFILE_MARKER in pom.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False
