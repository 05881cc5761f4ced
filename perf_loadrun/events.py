"""Lifecycle events of load runs and the bus that fans them out.

Delivery is synchronous and best-effort: each subscriber registered at
publish time receives the event once, in subscription order. Nothing is
stored, so a subscriber that joins after an event was published never sees
it. A failing subscriber is logged and skipped.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class LoadRunEventName(str, Enum):
    STARTING = "starting"
    STARTED = "started"
    COMPLETED = "completed"
    ERROR = "loadrunError"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            LoadRunEventName.COMPLETED,
            LoadRunEventName.ERROR,
            LoadRunEventName.CANCELLED,
        )


@dataclass(frozen=True)
class LoadRunEvent:
    """A named lifecycle event for the run identified by ``key``."""

    name: LoadRunEventName
    key: str
    output: str | None = None
    error: str | None = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"projectID": self.key}
        if self.output is not None:
            payload["output"] = self.output
        if self.error is not None:
            payload["error"] = self.error
        return payload


Subscriber = Callable[[LoadRunEvent], None]


class EventBus:
    """Publish/subscribe channel for load-run events."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            self.unsubscribe(callback)

        return _unsubscribe

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def publish(self, event: LoadRunEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Load-run event subscriber failed on %s", event.name.value
                )
