"""Tests for build-manifest inspection."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from perf_metrics.manifest import (
    ManifestStatus,
    has_metrics_dependency,
    has_microprofile_metrics,
    inspect_manifest,
)


pytestmark = pytest.mark.unit_metrics


def test_node_dependency_is_read_from_package_json(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(
        json.dumps({"dependencies": {"appmetrics-dash": "^5.0.0", "express": "*"}})
    )
    check = inspect_manifest(tmp_path, "nodejs")
    assert check.status is ManifestStatus.PRESENT
    assert check.manifest == tmp_path / "package.json"
    assert has_metrics_dependency(tmp_path, "javascript") is True


def test_node_dev_dependency_does_not_count(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(
        json.dumps({"devDependencies": {"appmetrics-dash": "^5.0.0"}})
    )
    assert inspect_manifest(tmp_path, "nodejs").status is ManifestStatus.ABSENT


def test_malformed_package_json_degrades_to_absent(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text("{ not json")
    check = inspect_manifest(tmp_path, "nodejs")
    assert check.status is ManifestStatus.ABSENT
    assert check.has_dependency is False


def test_java_and_swift_use_substring_markers(tmp_path: Path) -> None:
    (tmp_path / "pom.xml").write_text("<artifactId>javametrics-dash</artifactId>")
    (tmp_path / "Package.swift").write_text(
        '.package(url: "https://github.com/RuntimeTools/SwiftMetrics.git", from: "2.0.0")'
    )
    assert has_metrics_dependency(tmp_path, "java") is True
    assert has_metrics_dependency(tmp_path, "swift") is True


def test_missing_manifest_is_distinct_from_absent_dependency(tmp_path: Path) -> None:
    check = inspect_manifest(tmp_path, "java")
    assert check.status is ManifestStatus.MANIFEST_MISSING
    assert check.manifest_missing is True
    assert check.manifest == tmp_path / "pom.xml"
    assert has_metrics_dependency(tmp_path, "java") is False


def test_unsupported_language(tmp_path: Path) -> None:
    assert inspect_manifest(tmp_path, "python").status is ManifestStatus.UNSUPPORTED_LANGUAGE


def test_microprofile_detection(tmp_path: Path) -> None:
    pom = tmp_path / "pom.xml"
    assert has_microprofile_metrics(pom) is False
    pom.write_text("<dependency><artifactId>microprofile</artifactId></dependency>")
    assert has_microprofile_metrics(pom) is True
