"""Observable side channel for resolution outcomes.

Listeners are plain callables taking one event. Coroutine listeners are
scheduled as tasks on the running loop. Delivery is fire-and-forget: a
listener that raises is logged and skipped, and nothing a listener does can
change the outcome of a resolution.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar

import structlog

from datdns.models.resolution import ProbeMethod

log = structlog.get_logger()


@dataclass(frozen=True)
class ResolvedEvent:
    type: ClassVar[str] = "resolved"

    method: ProbeMethod
    name: str
    key: str


@dataclass(frozen=True)
class FailedEvent:
    type: ClassVar[str] = "failed"

    method: ProbeMethod
    name: str
    error: Exception


@dataclass(frozen=True)
class CacheFlushedEvent:
    type: ClassVar[str] = "cache-flushed"


Event = ResolvedEvent | FailedEvent | CacheFlushedEvent
Listener = Callable[[Event], object]


class EventEmitter:
    """Fan-out of resolver events to zero or more listeners."""

    def __init__(self, listeners: list[Listener] | None = None) -> None:
        self._listeners: list[Listener] = list(listeners or [])
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: Event) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    self._schedule(result, event)
            except Exception:
                log.warning("event_listener_error", event_type=event.type, exc_info=True)

    def _schedule(self, awaitable, event: Event) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Emitted from sync code: nothing can run the listener
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            log.warning("event_listener_skipped", event_type=event.type, reason="no running loop")
            return

        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if not t.cancelled() and t.exception() is not None:
                log.warning(
                    "event_listener_error",
                    event_type=event.type,
                    exc_info=t.exception(),
                )

        task.add_done_callback(_done)
