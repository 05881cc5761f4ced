"""Load-run state, request options and call outcomes."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from perf_common.errors import InvalidTransitionError


class LoadRunState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {LoadRunState.COMPLETED, LoadRunState.FAILED, LoadRunState.CANCELLED}
)

_ALLOWED_TRANSITIONS: dict[LoadRunState, frozenset[LoadRunState]] = {
    LoadRunState.STARTING: frozenset({LoadRunState.RUNNING, LoadRunState.FAILED}),
    LoadRunState.RUNNING: _TERMINAL_STATES,
    LoadRunState.COMPLETED: frozenset(),
    LoadRunState.FAILED: frozenset(),
    LoadRunState.CANCELLED: frozenset(),
}


class LoadRunOptions(BaseModel):
    """Options of a load run; only ``url`` is interpreted here."""

    model_config = ConfigDict(extra="allow")

    url: str = Field(description="Target URL the worker puts load on")

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("url must be non-empty")
        return value

    def to_payload(self, key: str) -> str:
        """Serialize the options, tagged with the run key, for the worker."""
        data = self.model_dump()
        data.setdefault("projectID", key)
        return json.dumps(data)


@dataclass
class LoadRun:
    """One in-flight load run owned by the orchestrator."""

    key: str
    options: LoadRunOptions
    state: LoadRunState = LoadRunState.STARTING
    output: str = ""
    error_output: str = ""
    cancel_requested: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def advance(self, new_state: LoadRunState) -> None:
        with self._lock:
            if new_state not in _ALLOWED_TRANSITIONS[self.state]:
                raise InvalidTransitionError(
                    f"Load run cannot move from {self.state.value} to {new_state.value}",
                    context={"key": self.key},
                )
            self.state = new_state

    def append_output(self, chunk: str) -> None:
        with self._lock:
            self.output += chunk

    def append_error_output(self, chunk: str) -> None:
        with self._lock:
            self.error_output += chunk

    def snapshot_output(self) -> tuple[str, str]:
        with self._lock:
            return self.output, self.error_output


class StartOutcome(str, Enum):
    ACCEPTED = "accepted"
    CONFLICT = "already_running"
    REJECTED = "rejected"


class CancelOutcome(str, Enum):
    ACCEPTED = "accepted"
    NOT_RUNNING = "not_running"


_STATUS_CODES: Dict[Enum, int] = {
    StartOutcome.ACCEPTED: 202,
    StartOutcome.CONFLICT: 409,
    StartOutcome.REJECTED: 400,
    CancelOutcome.ACCEPTED: 200,
    CancelOutcome.NOT_RUNNING: 409,
}


@dataclass(frozen=True)
class LoadRunResponse:
    """Result of a start or cancel call, as seen by the transport layer."""

    outcome: StartOutcome | CancelOutcome
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.outcome in (StartOutcome.ACCEPTED, CancelOutcome.ACCEPTED)

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.outcome]

    def to_dict(self) -> dict[str, Any]:
        return {"outcome": self.outcome.value, "message": self.message}
