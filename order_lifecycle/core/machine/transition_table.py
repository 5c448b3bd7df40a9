"""
Declarative order transition table.

For each event name the table holds an ordered tuple of candidate
transitions. The table is plain data: it can be inspected and tested
independently from the dispatch algorithm in ``engine.py``.

Dispatch contract (implemented by the engine):
- candidates are evaluated in declaration order;
- only candidates whose ``from_states`` contain the current state apply;
- the first candidate whose guard passes (or which has no guard) wins;
- no matching candidate means a silent no-op.

Failure forks are written as a guarded primary followed by an unguarded
alternate for the same starting state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Sequence

from order_lifecycle.core.domain.states import OrderEvent, OrderState
from order_lifecycle.core.machine import guards
from order_lifecycle.core.machine.guards import Guard
from order_lifecycle.core.machine.hooks import Hook, notify


@dataclass(frozen=True, slots=True)
class Transition:
    """A single candidate edge.

    - from_states: states in which this candidate applies.
    - to_state: state committed when the candidate wins.
    - guard: callable(order, services) -> bool. None means unconditional.
    - on_success: callable(order, ctx) run after the commit.
    """

    from_states: frozenset[OrderState]
    to_state: OrderState
    guard: Guard | None = None
    on_success: Hook | None = None

    def __post_init__(self) -> None:
        states = frozenset(OrderState(s) for s in self.from_states)
        if not states:
            raise ValueError("Transition.from_states must not be empty")
        object.__setattr__(self, "from_states", states)
        object.__setattr__(self, "to_state", OrderState(self.to_state))

    def applies_to(self, state: OrderState) -> bool:
        return state in self.from_states

    @property
    def guard_name(self) -> str | None:
        if self.guard is None:
            return None
        return getattr(self.guard, "__name__", repr(self.guard))


def transition(
    from_states: OrderState | Iterable[OrderState],
    to_state: OrderState,
    *,
    guard: Guard | None = None,
    on_success: Hook | None = None,
) -> Transition:
    """Build a Transition, accepting a single state or an iterable of states."""
    if isinstance(from_states, (OrderState, str)):
        from_states = (from_states,)
    return Transition(
        from_states=frozenset(from_states),
        to_state=to_state,
        guard=guard,
        on_success=on_success,
    )


def event_key(event: OrderEvent | str) -> str:
    return event.value if isinstance(event, Enum) else str(event)


class TransitionTable:
    """Immutable mapping of event name -> ordered candidate transitions."""

    def __init__(self, table: Mapping[OrderEvent | str, Sequence[Transition]]) -> None:
        self._table: dict[str, tuple[Transition, ...]] = {}
        for event, candidates in table.items():
            key = event_key(event)
            if not key:
                raise ValueError("Event names must be non-empty")
            if key in self._table:
                raise ValueError(f"Duplicate event '{key}'")
            self._table[key] = tuple(candidates)

    def __contains__(self, event: object) -> bool:
        if not isinstance(event, (OrderEvent, str)):
            return False
        return event_key(event) in self._table

    def events(self) -> list[str]:
        """Return declared event names in declaration order."""
        return list(self._table)

    def transitions(self, event: OrderEvent | str) -> tuple[Transition, ...]:
        """Return every candidate of an event (empty tuple if undeclared)."""
        return self._table.get(event_key(event), ())

    def candidates(self, event: OrderEvent | str, state: OrderState) -> list[Transition]:
        """Return the candidates of ``event`` that apply in ``state``, in order."""
        return [t for t in self.transitions(event) if t.applies_to(state)]

    def states_for(self, event: OrderEvent | str) -> frozenset[OrderState]:
        """Return every state in which ``event`` has at least one candidate."""
        states: set[OrderState] = set()
        for t in self.transitions(event):
            states |= t.from_states
        return frozenset(states)

    def allowed_events(self, state: OrderState) -> list[str]:
        """Return event names with at least one candidate for ``state``."""
        return [
            event
            for event, candidates in self._table.items()
            if any(t.applies_to(state) for t in candidates)
        ]

    def reachable_states(self) -> frozenset[OrderState]:
        """Return every state that is the target of some transition."""
        return frozenset(t.to_state for candidates in self._table.values() for t in candidates)


# ---------------------------------------------------------------------------
# Default order table
# ---------------------------------------------------------------------------

S = OrderState

_PRE_ORDER_EDITABLE: frozenset[OrderState] = frozenset(
    {
        S.HAS_SHIPPING_ADDRESS,
        S.HAS_SHIPMENTS,
        S.HAS_SHIPPING_OPTIONS,
        S.HAS_PAYMENT_METHOD,
        S.READY_TO_ORDER,
    }
)


def build_order_transition_table() -> TransitionTable:
    """Return the standard purchase-order lifecycle table."""
    return TransitionTable(
        {
            OrderEvent.ADVANCE: (
                transition(S.PENDING, S.HAS_SHIPPING_ADDRESS,
                           guard=guards.shipping_address_present),

                transition(S.HAS_SHIPPING_ADDRESS, S.HAS_SHIPMENTS,
                           guard=guards.shipments_built),
                transition(S.HAS_SHIPPING_ADDRESS, S.SHIPMENT_QUOTE_FAILED,
                           on_success=notify("admin", message="shipment quote failed")),

                transition(S.HAS_SHIPMENTS, S.HAS_SHIPPING_OPTIONS,
                           guard=guards.shipping_options_set),

                transition(S.HAS_SHIPPING_OPTIONS, S.HAS_PAYMENT_METHOD,
                           guard=guards.payment_method_present),

                transition(S.HAS_PAYMENT_METHOD, S.READY_TO_ORDER,
                           guard=guards.ready_to_order),

                transition(S.READY_TO_ORDER, S.PAYMENT_AUTHORIZED,
                           guard=guards.charge_authorized),
                transition(S.READY_TO_ORDER, S.AUTHORIZATION_FAILED,
                           on_success=notify("admin", "user", message="payment authorization failed")),

                transition(S.PAYMENT_AUTHORIZED, S.ORDERED,
                           guard=guards.order_submitted,
                           on_success=notify("user", message="order placed")),
                transition(S.PAYMENT_AUTHORIZED, S.ORDER_FAILED,
                           on_success=notify("admin", "user", message="order submission failed")),

                transition(S.ORDERED, S.SHIPPED,
                           guard=guards.shipments_all_shipped,
                           on_success=notify("user", message="shipments completed")),

                transition(S.SHIPPED, S.PAYMENT_SETTLED,
                           guard=guards.charge_settled,
                           on_success=notify("user", message="charges settled")),
                transition(S.SHIPPED, S.SETTLEMENT_FAILED,
                           on_success=notify("admin", message="payment settlement failed")),
            ),
            OrderEvent.EDIT_SHIPPING_ADDRESS: (
                transition(_PRE_ORDER_EDITABLE, S.PENDING),
            ),
            OrderEvent.EDIT_SHIPPING_OPTIONS: (
                transition(
                    {S.HAS_SHIPPING_OPTIONS, S.HAS_PAYMENT_METHOD, S.READY_TO_ORDER},
                    S.PENDING,
                ),
            ),
            OrderEvent.EDIT_PAYMENT_METHOD: (
                transition(S.SETTLEMENT_FAILED, S.PAYMENT_SETTLED,
                           guard=guards.order_total_recharged,
                           on_success=notify("user", message="charges settled")),
                transition(S.SETTLEMENT_FAILED, S.SETTLEMENT_FAILED,
                           on_success=notify("admin", message="payment settlement failed")),
                transition({S.HAS_PAYMENT_METHOD, S.READY_TO_ORDER}, S.HAS_PAYMENT_METHOD),
            ),
        }
    )


ORDER_TRANSITIONS: TransitionTable = build_order_transition_table()
