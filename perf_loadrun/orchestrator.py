"""Keyed registry that runs at most one load worker per monitored instance."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from typing import IO, Any, Callable, Mapping, Sequence

from pydantic import ValidationError

from perf_common.config.settings import MonitorSettings
from perf_common.errors import WorkerSpawnError
from perf_common.logging import get_logger
from perf_loadrun.events import EventBus, LoadRunEvent, LoadRunEventName
from perf_loadrun.models import (
    CancelOutcome,
    LoadRun,
    LoadRunOptions,
    LoadRunResponse,
    LoadRunState,
    StartOutcome,
)

logger = get_logger(__name__)

# Forceful, no drain period. Also what identifies a cancelled worker on exit.
CANCEL_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)

# Output left in the pipes by a worker's orphaned children is not waited for
# longer than this once the worker itself has exited.
READER_JOIN_TIMEOUT = 5.0

Spawner = Callable[[Sequence[str]], "subprocess.Popen[str]"]


def spawn_worker(command: Sequence[str]) -> "subprocess.Popen[str]":
    """Start a worker with piped, text-mode output streams.

    On POSIX the worker leads its own process group so a cancel reaches any
    children it started.
    """
    return subprocess.Popen(
        list(command),
        start_new_session=sys.platform != "win32",
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
    )


def classify_exit(returncode: int) -> LoadRunState:
    """Map a worker exit status onto a terminal state."""
    if returncode == -CANCEL_SIGNAL:
        return LoadRunState.CANCELLED
    if returncode != 0:
        return LoadRunState.FAILED
    return LoadRunState.COMPLETED


def _parse_options(options: Any) -> LoadRunOptions | None:
    if isinstance(options, LoadRunOptions):
        return options
    if not isinstance(options, Mapping):
        return None
    try:
        return LoadRunOptions.model_validate(dict(options))
    except (ValidationError, TypeError):
        return None


def _drain(stream: IO[str], sink: Callable[[str], None]) -> None:
    try:
        for chunk in stream:
            sink(chunk)
    finally:
        stream.close()


@dataclass
class _ActiveRun:
    run: LoadRun
    process: "subprocess.Popen[str] | None" = None
    readers: list[threading.Thread] = field(default_factory=list)
    finished: threading.Event = field(default_factory=threading.Event)


class LoadRunOrchestrator:
    """Start, cancel and track load runs, one per key.

    ``start`` and the exit handler are the only writers of the registry and
    both hold the registry lock, so two starts for one key cannot both be
    accepted. The entry is removed before the terminal event is published;
    a subscriber may start the next run for the key from its callback.
    """

    def __init__(
        self,
        worker_command: Sequence[str] | None = None,
        *,
        bus: EventBus | None = None,
        spawner: Spawner | None = None,
    ) -> None:
        self.worker_command = list(
            worker_command or MonitorSettings().worker_command
        )
        self.bus = bus or EventBus()
        self._spawner = spawner or spawn_worker
        self._runs: dict[str, _ActiveRun] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls, settings: MonitorSettings, *, bus: EventBus | None = None
    ) -> "LoadRunOrchestrator":
        return cls(settings.worker_command, bus=bus)

    def start(
        self, key: str, options: LoadRunOptions | Mapping[str, Any] | None
    ) -> LoadRunResponse:
        log = logger.bind(key=key)
        with self._lock:
            if key in self._runs:
                log.warning("A load run is already in progress")
                return LoadRunResponse(
                    StartOutcome.CONFLICT, "A load run is already in progress"
                )
            parsed = _parse_options(options)
            if parsed is None:
                log.error("URL is required")
                return LoadRunResponse(StartOutcome.REJECTED, "URL is required")
            active = _ActiveRun(LoadRun(key, parsed))
            self._runs[key] = active

        log.info("Starting load run", url=parsed.url)
        self._publish(LoadRunEventName.STARTING, active.run)
        command = [*self.worker_command, parsed.to_payload(key)]
        try:
            process = self._spawner(command)
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            error = WorkerSpawnError(
                "Load worker could not be started",
                context={"key": key, "command": command[0]},
                cause=exc,
            )
            log.error("Load worker spawn failed", error=error.to_dict())
            active.run.append_error_output(f"{error}: {exc}")
            self._finish(active, LoadRunState.FAILED)
            return LoadRunResponse(StartOutcome.ACCEPTED, str(error))

        self._attach_readers(active, process)
        with self._lock:
            active.process = process
            cancel_now = active.run.cancel_requested
        active.run.advance(LoadRunState.RUNNING)
        self._publish(LoadRunEventName.STARTED, active.run)
        if cancel_now:
            self._signal(active)

        threading.Thread(
            target=self._watch,
            args=(active,),
            name=f"perf-loadrun-{key}",
            daemon=True,
        ).start()
        return LoadRunResponse(StartOutcome.ACCEPTED, "Load run started")

    def cancel(self, key: str) -> LoadRunResponse:
        """Kill the worker for ``key``; the exit handler reports the result."""
        with self._lock:
            active = self._runs.get(key)
            if active is None:
                logger.warning("No run in progress", key=key)
                return LoadRunResponse(CancelOutcome.NOT_RUNNING, "No run in progress")
            if active.process is None:
                active.run.cancel_requested = True
                return LoadRunResponse(CancelOutcome.ACCEPTED, "Cancellation requested")
        self._signal(active)
        return LoadRunResponse(CancelOutcome.ACCEPTED, "Cancellation requested")

    def is_running(self, key: str) -> bool:
        with self._lock:
            return key in self._runs

    def state_of(self, key: str) -> LoadRunState | None:
        with self._lock:
            active = self._runs.get(key)
        return active.run.state if active else None

    def active_keys(self) -> list[str]:
        with self._lock:
            return sorted(self._runs)

    def wait(self, key: str, timeout: float | None = None) -> bool:
        """Block until the run for ``key`` published its terminal event."""
        with self._lock:
            active = self._runs.get(key)
        if active is None:
            return True
        return active.finished.wait(timeout)

    def shutdown(self) -> None:
        """Kill every live worker; their exit handlers clean up."""
        with self._lock:
            actives = list(self._runs.values())
            for active in actives:
                if active.process is None:
                    active.run.cancel_requested = True
        for active in actives:
            if active.process is not None:
                self._signal(active)

    def _attach_readers(
        self, active: _ActiveRun, process: "subprocess.Popen[str]"
    ) -> None:
        streams = (
            (process.stdout, active.run.append_output),
            (process.stderr, active.run.append_error_output),
        )
        for stream, sink in streams:
            if stream is None:
                continue
            reader = threading.Thread(
                target=_drain, args=(stream, sink), daemon=True
            )
            reader.start()
            active.readers.append(reader)

    def _signal(self, active: _ActiveRun) -> None:
        process = active.process
        if process is None or process.poll() is not None:
            return
        try:
            if hasattr(os, "killpg"):
                try:
                    os.killpg(process.pid, CANCEL_SIGNAL)
                    return
                except OSError:
                    # Not a group leader, e.g. a custom spawner.
                    pass
            process.send_signal(CANCEL_SIGNAL)
        except OSError as exc:
            logger.debug("Cancel signal not delivered", key=active.run.key, error=str(exc))

    def _watch(self, active: _ActiveRun) -> None:
        assert active.process is not None
        returncode = active.process.wait()
        for reader in active.readers:
            reader.join(READER_JOIN_TIMEOUT)
        logger.debug("Load worker exited", key=active.run.key, code=returncode)
        self._finish(active, classify_exit(returncode))

    def _finish(self, active: _ActiveRun, state: LoadRunState) -> None:
        run = active.run
        run.advance(state)
        with self._lock:
            if self._runs.get(run.key) is active:
                del self._runs[run.key]
        output, error_output = run.snapshot_output()
        log = logger.bind(key=run.key)
        if state is LoadRunState.CANCELLED:
            log.info("Load run cancelled")
            self._publish(LoadRunEventName.CANCELLED, run)
        elif state is LoadRunState.FAILED:
            log.error("Load run failed", error=error_output)
            self._publish(
                LoadRunEventName.ERROR, run, output=output, error=error_output
            )
        else:
            log.info("Load run completed", summary=output)
            self._publish(LoadRunEventName.COMPLETED, run, output=output)
        active.finished.set()

    def _publish(
        self,
        name: LoadRunEventName,
        run: LoadRun,
        *,
        output: str | None = None,
        error: str | None = None,
    ) -> None:
        self.bus.publish(LoadRunEvent(name, run.key, output=output, error=error))
