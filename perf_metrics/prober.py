"""Concurrent prober for the metrics endpoints of a running instance."""

from __future__ import annotations

import http.client
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Iterable
from urllib import error, request

from perf_common.errors import ProbeError
from perf_metrics.endpoints import CANDIDATE_ENDPOINTS, CandidateEndpoint, CapabilityMap
from perf_metrics.formats import is_exposition_format, is_legacy_dashboard_format

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 30.0
# Larger bodies are not a metrics page worth classifying.
MAX_BODY_BYTES = 8 * 1024 * 1024
_READ_CHUNK = 64 * 1024


@dataclass(frozen=True)
class HttpResponse:
    """Status and decoded body of a probe request."""

    status: int
    body: str


Fetcher = Callable[[str, float], HttpResponse]


def _read_body(resp: http.client.HTTPResponse, deadline: float, max_bytes: int) -> bytes:
    chunks: list[bytes] = []
    size = 0
    while True:
        chunk = resp.read1(_READ_CHUNK)
        if not chunk:
            return b"".join(chunks)
        size += len(chunk)
        if size > max_bytes:
            raise ProbeError(
                "Probe response exceeded the size limit",
                context={"max_bytes": max_bytes},
            )
        if time.monotonic() > deadline:
            raise ProbeError("Probe response was not read before the deadline")
        chunks.append(chunk)


def urllib_fetch(
    url: str, timeout: float, *, max_bytes: int = MAX_BODY_BYTES
) -> HttpResponse:
    """GET ``url`` and return its status and body.

    ``timeout`` bounds the whole request, not only each socket operation, and
    bodies over ``max_bytes`` are refused. HTTP error statuses are returned as
    responses; transport failures, slow or oversized bodies raise ProbeError.
    """
    deadline = time.monotonic() + timeout
    req = request.Request(url, headers={"Accept": "*/*"}, method="GET")
    try:
        with request.urlopen(req, timeout=timeout) as resp:  # nosec B310
            status = resp.status
            raw = _read_body(resp, deadline, max_bytes)
    except error.HTTPError as exc:
        status = exc.code
        exc.close()
        return HttpResponse(status=status, body="")
    except (error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
        raise ProbeError(
            f"Probe request failed: {exc}", context={"url": url}, cause=exc
        ) from exc
    return HttpResponse(status=status, body=raw.decode("utf-8", errors="replace"))


def _format_host(host: str) -> str:
    if ":" in host and not host.startswith("["):
        return f"[{host}]"
    return host


class EndpointProber:
    """Probe candidate endpoints in parallel and report which are capable.

    Every probe has its own timeout. A probe that errors, times out, returns a
    status other than 200 or an empty body counts as not capable; it never
    raises and never stops its siblings.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT,
        max_workers: int | None = None,
        fetch: Fetcher | None = None,
        scheme: str = "http",
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.max_workers = max_workers
        self._fetch = fetch or urllib_fetch
        self.scheme = scheme

    def url_for(self, host: str, port: int, path: str) -> str:
        return f"{self.scheme}://{_format_host(host)}:{port}{path}"

    def probe_endpoint(self, host: str, port: int, path: str) -> bool:
        url = self.url_for(host, port, path)
        try:
            response = self._fetch(url, self.timeout_seconds)
        except Exception as exc:
            logger.debug("Probe of %s failed: %s", url, exc)
            return False
        if response.status != 200:
            logger.debug("Probe of %s returned status %s", url, response.status)
            return False
        if not response.body:
            logger.debug("Probe of %s returned an empty body", url)
            return False
        capable = is_legacy_dashboard_format(response.body) or is_exposition_format(
            response.body
        )
        logger.debug("Probe of %s recognized=%s", url, capable)
        return capable

    def probe(
        self,
        host: str,
        port: int,
        candidates: Iterable[CandidateEndpoint] = CANDIDATE_ENDPOINTS,
    ) -> CapabilityMap:
        """Return a fresh capability map for ``host:port``."""
        paths = list(dict.fromkeys(candidate.path for candidate in candidates))
        if not paths:
            return {}
        workers = self.max_workers or len(paths)
        capabilities: CapabilityMap = {}
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="perf-probe"
        ) as pool:
            futures = {
                pool.submit(self.probe_endpoint, host, port, path): path
                for path in paths
            }
            for future in as_completed(futures):
                capabilities[futures[future]] = future.result()
        logger.info(
            "Probed %s:%s, capable endpoints: %s",
            host,
            port,
            sorted(path for path, ok in capabilities.items() if ok) or "none",
        )
        return capabilities


def probe(
    address: tuple[str, int],
    candidates: Iterable[CandidateEndpoint] = CANDIDATE_ENDPOINTS,
    *,
    timeout_seconds: float = DEFAULT_PROBE_TIMEOUT,
    fetch: Fetcher | None = None,
) -> CapabilityMap:
    """Probe ``candidates`` on ``address`` with a default prober."""
    host, port = address
    prober = EndpointProber(timeout_seconds=timeout_seconds, fetch=fetch)
    return prober.probe(host, port, candidates)
