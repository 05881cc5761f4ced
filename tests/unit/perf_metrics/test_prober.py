"""Tests for the concurrent endpoint prober."""

from __future__ import annotations

import threading
import time

import pytest

from perf_common.errors import ProbeError
from perf_metrics.endpoints import CANDIDATE_ENDPOINTS, CandidateEndpoint, HostingKind
from perf_metrics.prober import EndpointProber, HttpResponse, probe


pytestmark = pytest.mark.unit_metrics

PROMETHEUS_BODY = "# TYPE up gauge\nup 1\n"
DASH_BODY = '<html><script src="graphmetrics/js/app.js"></script></html>'


class StubFetcher:
    def __init__(self, responses: dict[str, object]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, float]] = []
        self._lock = threading.Lock()

    def __call__(self, url: str, timeout: float) -> HttpResponse:
        with self._lock:
            self.calls.append((url, timeout))
        path = url.split(":9080", 1)[1]
        result = self.responses.get(path, HttpResponse(404, ""))
        if isinstance(result, Exception):
            raise result
        return result  # type: ignore[return-value]


def test_probe_marks_recognized_formats_capable() -> None:
    fetch = StubFetcher(
        {
            "/metrics": HttpResponse(200, PROMETHEUS_BODY),
            "/appmetrics-dash": HttpResponse(200, DASH_BODY),
        }
    )
    prober = EndpointProber(fetch=fetch, timeout_seconds=30)

    capabilities = prober.probe("localhost", 9080)

    assert capabilities == {
        "/metrics": True,
        "/appmetrics-dash": True,
        "/javametrics-dash": False,
        "/swiftmetrics-dash": False,
        "/actuator/prometheus": False,
    }
    assert sorted(url for url, _ in fetch.calls) == sorted(
        f"http://localhost:9080{endpoint.path}" for endpoint in CANDIDATE_ENDPOINTS
    )
    assert {timeout for _, timeout in fetch.calls} == {30}


@pytest.mark.parametrize(
    "response",
    [
        HttpResponse(500, PROMETHEUS_BODY),
        HttpResponse(204, PROMETHEUS_BODY),
        HttpResponse(200, ""),
        HttpResponse(200, "<html><body>Hello there world</body></html>"),
        ProbeError("connection refused"),
        TimeoutError("timed out"),
    ],
)
def test_probe_is_fail_closed(response: object) -> None:
    prober = EndpointProber(fetch=StubFetcher({"/metrics": response}))
    assert prober.probe_endpoint("localhost", 9080, "/metrics") is False


def test_probes_run_concurrently_and_join_all() -> None:
    barrier = threading.Barrier(len(CANDIDATE_ENDPOINTS), timeout=5)
    finished: list[str] = []

    def fetch(url: str, timeout: float) -> HttpResponse:
        barrier.wait()
        if url.endswith("/swiftmetrics-dash"):
            time.sleep(0.2)
        finished.append(url)
        return HttpResponse(200, "up 1\n")

    capabilities = EndpointProber(fetch=fetch).probe("localhost", 9080)

    assert len(finished) == len(CANDIDATE_ENDPOINTS)
    assert all(capabilities.values())
    assert finished[-1].endswith("/swiftmetrics-dash")


def test_one_failing_probe_does_not_affect_siblings() -> None:
    fetch = StubFetcher(
        {
            "/metrics": ProbeError("reset by peer"),
            "/javametrics-dash": HttpResponse(200, DASH_BODY),
        }
    )
    capabilities = EndpointProber(fetch=fetch).probe("localhost", 9080)
    assert capabilities["/metrics"] is False
    assert capabilities["/javametrics-dash"] is True


def test_each_probe_returns_a_fresh_map() -> None:
    responses: dict[str, object] = {"/metrics": HttpResponse(200, "up 1\n")}
    prober = EndpointProber(fetch=StubFetcher(responses))
    first = prober.probe("localhost", 9080)
    responses["/metrics"] = ProbeError("gone")
    second = prober.probe("localhost", 9080)
    assert first["/metrics"] is True
    assert second["/metrics"] is False
    assert first is not second


def test_probe_custom_candidates_and_module_helper() -> None:
    custom = [CandidateEndpoint("/metrics", HostingKind.SHARED_CONTAINER)]
    fetch = StubFetcher({"/metrics": HttpResponse(200, "up 1\n")})
    assert probe(("localhost", 9080), custom, fetch=fetch) == {"/metrics": True}
    assert EndpointProber(fetch=fetch).probe("localhost", 9080, []) == {}


def test_ipv6_hosts_are_bracketed() -> None:
    prober = EndpointProber()
    assert prober.url_for("::1", 9080, "/metrics") == "http://[::1]:9080/metrics"
