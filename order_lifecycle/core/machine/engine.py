"""State machine engine.

The engine owns the dispatch algorithm only: it is parameterized by a
``TransitionTable``, receives external calls through an injected
``OrderServices`` object, and commits states on ``Order`` aggregates.

It is synchronous and holds no locks. Callers must serialize ``fire`` calls
against the same order and persist the result as one unit of work.
"""

# pylint: disable=too-many-arguments
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from order_lifecycle.core.domain.states import OrderEvent, OrderState
from order_lifecycle.core.errors import UnknownEventError
from order_lifecycle.core.events.event_bus import EventBus
from order_lifecycle.core.events.events import (
    HookFailedEvent,
    OrderEventFired,
    OrderStateTransitionEvent,
)
from order_lifecycle.core.machine.hooks import HookContext
from order_lifecycle.core.machine.transition_table import event_key
from order_lifecycle.core.ports.notifier import NullNotifier

if TYPE_CHECKING:
    from order_lifecycle.core.domain.aggregate import Order
    from order_lifecycle.core.machine.transition_table import Transition, TransitionTable
    from order_lifecycle.core.ports.notifier import Notifier
    from order_lifecycle.core.ports.order_services import OrderServices

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class GuardResult:
    to_state: OrderState
    guard: str
    passed: bool


@dataclass(slots=True)
class TransitionOutcome:
    """Result of one ``fire`` call.

    - applied: a candidate won and its target state was committed
      (possibly a self-transition such as settlement_failed -> settlement_failed)
    - transition: the winning candidate, None for a no-op
    - guard_results: every guard evaluated, in evaluation order
    """

    event: str
    from_state: OrderState
    to_state: OrderState
    applied: bool
    transition: Transition | None = None
    guard_results: list[GuardResult] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.from_state != self.to_state

    @property
    def noop(self) -> bool:
        return not self.applied


class StateMachineEngine:
    """Fires named events against order aggregates."""

    def __init__(
        self,
        table: TransitionTable,
        services: OrderServices,
        *,
        notifier: Notifier | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.table = table
        self._services = services
        self._notifier: Notifier = notifier if notifier is not None else NullNotifier()
        # A bus without sinks drops every event.
        self._event_bus: EventBus = event_bus if event_bus is not None else EventBus()

    # ---------------------------------------------------------------------
    # Introspection
    # ---------------------------------------------------------------------

    def available_events(self, order: Order) -> list[str]:
        """Events with at least one candidate in the order's current state."""
        return self.table.allowed_events(order.state)

    def may_fire(self, order: Order, event: OrderEvent | str) -> bool:
        """True if ``event`` has a candidate for the current state. Guards are not run."""
        self._require_declared(event)
        return bool(self.table.candidates(event, order.state))

    # ---------------------------------------------------------------------
    # Dispatch
    # ---------------------------------------------------------------------

    def fire(self, order: Order, event: OrderEvent | str) -> TransitionOutcome:
        """Apply at most one transition of ``event`` to ``order``.

        Candidates for the current state are evaluated in declaration order.
        Each distinct guard runs at most once per call. The first candidate
        whose guard passes (or which has none) is committed, then its
        ``on_success`` hook runs with the new state in place.

        An event with no candidate for the current state, or whose guards
        all fail without an unguarded fallback, is a no-op.

        Raises:
            UnknownEventError: the event is not declared in the table.
        """
        name = self._require_declared(event)
        from_state = order.state

        outcome = TransitionOutcome(
            event=name,
            from_state=from_state,
            to_state=from_state,
            applied=False,
        )

        guard_cache: dict[int, bool] = {}
        winner: Transition | None = None

        for candidate in self.table.candidates(name, from_state):
            if candidate.guard is None:
                winner = candidate
                break

            key = id(candidate.guard)
            if key not in guard_cache:
                # A raising guard is a defect in the service shim: propagate,
                # nothing has been committed yet.
                guard_cache[key] = bool(candidate.guard(order, self._services))

            passed = guard_cache[key]
            outcome.guard_results.append(
                GuardResult(
                    to_state=candidate.to_state,
                    guard=candidate.guard_name or "",
                    passed=passed,
                )
            )
            if passed:
                winner = candidate
                break

        if winner is not None:
            self._apply(order, name, winner, outcome)
        else:
            LOGGER.debug(
                "No transition applied",
                extra={"order_id": order.order_id, "event": name, "state": from_state.value},
            )

        self._event_bus.emit(
            OrderEventFired(
                ts_ns=time.time_ns(),
                order_id=order.order_id,
                event=name,
                from_state=outcome.from_state.value,
                to_state=outcome.to_state.value,
                applied=outcome.applied,
                guard_results=tuple((r.to_state.value, r.passed) for r in outcome.guard_results),
            )
        )
        return outcome

    def _apply(
        self,
        order: Order,
        event: str,
        winner: Transition,
        outcome: TransitionOutcome,
    ) -> None:
        from_state = order.state
        order._commit_state(winner.to_state)  # pylint: disable=protected-access

        outcome.to_state = winner.to_state
        outcome.applied = True
        outcome.transition = winner

        LOGGER.info(
            "Order transitioned",
            extra={
                "order_id": order.order_id,
                "event": event,
                "prev_state": from_state.value,
                "next_state": winner.to_state.value,
            },
        )
        self._event_bus.emit(
            OrderStateTransitionEvent(
                ts_ns=time.time_ns(),
                order_id=order.order_id,
                event=event,
                prev_state=from_state.value,
                next_state=winner.to_state.value,
            )
        )

        if winner.on_success is None:
            return

        ctx = HookContext(
            event=event,
            from_state=from_state,
            to_state=winner.to_state,
            notifier=self._notifier,
        )
        try:
            winner.on_success(order, ctx)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.exception(
                "Post-transition hook failed",
                extra={"order_id": order.order_id, "event": event, "state": winner.to_state.value},
            )
            self._event_bus.emit(
                HookFailedEvent(
                    ts_ns=time.time_ns(),
                    order_id=order.order_id,
                    event=event,
                    state=winner.to_state.value,
                    error=repr(exc),
                )
            )

    def _require_declared(self, event: OrderEvent | str) -> str:
        name = event_key(event)
        if name not in self.table:
            raise UnknownEventError(name, self.table.events())
        return name
