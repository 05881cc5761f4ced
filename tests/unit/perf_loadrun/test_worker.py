"""Tests for the default load worker."""

from __future__ import annotations

import http.client
import json

import pytest

from perf_loadrun import worker
from perf_loadrun.worker import WorkerOptions, run_load


pytestmark = pytest.mark.unit_loadrun


@pytest.mark.parametrize(
    "exc",
    [
        http.client.BadStatusLine("garbage"),
        http.client.IncompleteRead(b"par", 10),
        http.client.RemoteDisconnected("closed"),
    ],
)
def test_malformed_responses_count_as_errors(monkeypatch, exc) -> None:
    def fake_urlopen(req, timeout):
        raise exc

    monkeypatch.setattr(worker.request, "urlopen", fake_urlopen)
    summary = run_load(WorkerOptions(url="http://x", duration=0.05, concurrency=2))

    assert summary["requests"] > 0
    assert summary["errors"] == summary["requests"]
    assert summary["latency_ms"] == {"avg": None, "max": None}


def test_main_reports_all_failed_requests(monkeypatch, capsys) -> None:
    def fake_urlopen(req, timeout):
        raise http.client.BadStatusLine("garbage")

    monkeypatch.setattr(worker.request, "urlopen", fake_urlopen)

    code = worker.main([json.dumps({"url": "http://x", "duration": 0.05})])

    captured = capsys.readouterr()
    assert code == 1
    assert json.loads(captured.out)["errors"] > 0
    assert "failed" in captured.err


def test_main_rejects_invalid_options(capsys) -> None:
    assert worker.main([json.dumps({"duration": 1})]) == 1
    assert "Invalid load options" in capsys.readouterr().err
