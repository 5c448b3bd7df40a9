"""
Domain event models.

These events represent immutable facts observed while firing lifecycle
events. They are consumed by loggers, recorders, and metrics sinks.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class OrderEventFired:
    """One ``fire`` call, whether or not it changed anything."""

    ts_ns: int
    order_id: str
    event: str

    from_state: str
    to_state: str
    applied: bool

    # (to_state, passed) per guard evaluated, in evaluation order
    guard_results: tuple[tuple[str, bool], ...]


@dataclass(slots=True)
class OrderStateTransitionEvent:
    ts_ns: int
    order_id: str
    event: str
    prev_state: str
    next_state: str


@dataclass(slots=True)
class HookFailedEvent:
    ts_ns: int
    order_id: str
    event: str
    state: str
    error: str
