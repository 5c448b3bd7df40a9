"""
Synchronous event bus for lifecycle events.

The engine emits ``OrderEventFired``, ``OrderStateTransitionEvent`` and
``HookFailedEvent`` here. A bus constructed without sinks drops them.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

LOGGER = logging.getLogger(__name__)


class EventSink(Protocol):
    """Observer of lifecycle events. May also expose ``close()``."""

    def on_event(self, event: Any) -> None:
        ...


class EventBus:
    """Dispatches events to registered sinks.

    Sinks are observers: a failing sink is logged and skipped so that it can
    never undo or block a committed transition.
    """

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks) if sinks is not None else []
        self._closed = False

    def register(self, sink: EventSink) -> None:
        """Register a new sink."""
        self._sinks.append(sink)

    def emit(self, event: Any) -> None:
        """Emit an event to all sinks."""
        for sink in self._sinks:
            try:
                sink.on_event(event)
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.exception(
                    "Event sink failed",
                    extra={"sink": type(sink).__name__, "event_type": type(event).__name__},
                )

    def close(self) -> None:
        """
        Finalize all sinks that expose a close() method.
        """
        if self._closed:
            return

        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()

        self._closed = True
