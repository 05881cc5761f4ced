"""Default load worker: ``python -m perf_loadrun.worker '<json options>'``.

Issues requests against ``url`` from ``concurrency`` threads for ``duration``
seconds, then prints a JSON summary on stdout. Exits 1 when the options are
invalid or no request succeeded.
"""

from __future__ import annotations

import http.client
import json
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Sequence
from urllib import error, request

from pydantic import BaseModel, Field, ValidationError

DEFAULT_DURATION_SECONDS = 20.0


class WorkerOptions(BaseModel):
    """Options the default worker understands; other keys are ignored."""

    url: str = Field(min_length=1)
    method: str = Field(default="GET")
    duration: float = Field(default=DEFAULT_DURATION_SECONDS, gt=0)
    concurrency: int = Field(default=1, gt=0, le=256)
    timeout: float = Field(default=10.0, gt=0)
    body: Any = None


@dataclass
class _Tally:
    requests: int = 0
    errors: int = 0
    latencies_ms: list[float] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def record(self, ok: bool, latency_ms: float) -> None:
        with self.lock:
            self.requests += 1
            if ok:
                self.latencies_ms.append(latency_ms)
            else:
                self.errors += 1


def _send(options: WorkerOptions) -> bool:
    data = None
    headers = {}
    if options.body is not None:
        data = json.dumps(options.body).encode("utf-8")
        headers["Content-Type"] = "application/json"
    req = request.Request(
        options.url, data=data, headers=headers, method=options.method.upper()
    )
    try:
        with request.urlopen(req, timeout=options.timeout) as resp:  # nosec B310
            resp.read()
            return 200 <= resp.status < 400
    except (error.URLError, http.client.HTTPException, OSError, ValueError):
        return False


def _hammer(options: WorkerOptions, deadline: float, tally: _Tally) -> None:
    while time.monotonic() < deadline:
        started = time.perf_counter()
        ok = _send(options)
        tally.record(ok, (time.perf_counter() - started) * 1000.0)


def run_load(options: WorkerOptions) -> dict[str, Any]:
    """Generate load and return the summary."""
    tally = _Tally()
    started = time.monotonic()
    deadline = started + options.duration
    threads = [
        threading.Thread(target=_hammer, args=(options, deadline, tally), daemon=True)
        for _ in range(options.concurrency)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    latencies = tally.latencies_ms
    return {
        "url": options.url,
        "duration": round(time.monotonic() - started, 3),
        "requests": tally.requests,
        "errors": tally.errors,
        "latency_ms": {
            "avg": round(sum(latencies) / len(latencies), 3) if latencies else None,
            "max": round(max(latencies), 3) if latencies else None,
        },
    }


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("usage: python -m perf_loadrun.worker '<json options>'", file=sys.stderr)
        return 1
    try:
        options = WorkerOptions.model_validate_json(args[-1])
    except ValidationError as exc:
        print(f"Invalid load options: {exc}", file=sys.stderr)
        return 1
    summary = run_load(options)
    print(json.dumps(summary), flush=True)
    if summary["requests"] and summary["errors"] == summary["requests"]:
        print(f"All {summary['requests']} requests to {options.url} failed", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
