"""Tests for shared error helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from perf_common.errors import LoadRunError, PerfError, ProbeError, WorkerSpawnError


pytestmark = pytest.mark.unit_common


def test_to_dict_normalizes_context() -> None:
    err = ProbeError(
        "boom",
        context={
            "path": Path("/tmp/test"),
            "port": 9080,
            "nested": {"value": Path("nested")},
            "items": (Path("a"), "b"),
        },
    )
    payload = err.to_dict()
    assert payload["type"] == "ProbeError"
    assert payload["message"] == "boom"
    assert payload["context"]["path"].endswith("test")
    assert payload["context"]["port"] == 9080
    assert payload["context"]["nested"]["value"] == "nested"
    assert payload["context"]["items"] == ["a", "b"]


def test_spawn_error_keeps_cause_and_hierarchy() -> None:
    cause = FileNotFoundError("node")
    err = WorkerSpawnError("spawn failed", context={"key": "p1"}, cause=cause)
    assert isinstance(err, LoadRunError)
    assert isinstance(err, PerfError)
    assert err.__cause__ is cause
    assert err.to_dict() == {
        "type": "WorkerSpawnError",
        "message": "spawn failed",
        "context": {"key": "p1"},
    }
