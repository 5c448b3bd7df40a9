"""
Semantic test: the default order table as data.

Invariant:
The table is inspectable without the engine. Every risky "advance" step is
a guarded primary followed by an unguarded alternate into a failure state,
payment_declined is unreachable, and only settlement_failed has an
outgoing edge among the failure states.
"""

from __future__ import annotations

import pytest

from order_lifecycle.core.domain.states import (
    ORDER_FAILURE_STATES,
    OrderEvent,
    OrderState,
    is_failure_state,
    is_terminal_state,
)
from order_lifecycle.core.machine.transition_table import (
    ORDER_TRANSITIONS,
    Transition,
    TransitionTable,
    transition,
)


def test_declared_events() -> None:
    assert ORDER_TRANSITIONS.events() == [e.value for e in OrderEvent]
    assert OrderEvent.ADVANCE in ORDER_TRANSITIONS
    assert "cancel" not in ORDER_TRANSITIONS


@pytest.mark.parametrize(
    ("start", "failed_state"),
    [
        (OrderState.HAS_SHIPPING_ADDRESS, OrderState.SHIPMENT_QUOTE_FAILED),
        (OrderState.READY_TO_ORDER, OrderState.AUTHORIZATION_FAILED),
        (OrderState.PAYMENT_AUTHORIZED, OrderState.ORDER_FAILED),
        (OrderState.SHIPPED, OrderState.SETTLEMENT_FAILED),
    ],
)
def test_risky_steps_fork_into_failure_state(start: OrderState, failed_state: OrderState) -> None:
    candidates = ORDER_TRANSITIONS.candidates(OrderEvent.ADVANCE, start)

    assert len(candidates) == 2
    primary, alternate = candidates
    assert primary.guard is not None
    assert alternate.guard is None
    assert alternate.to_state == failed_state
    assert is_failure_state(alternate.to_state)


def test_every_advance_state_has_one_primary_candidate() -> None:
    for state in OrderState:
        candidates = ORDER_TRANSITIONS.candidates(OrderEvent.ADVANCE, state)
        if is_terminal_state(state) or is_failure_state(state):
            assert candidates == []
        else:
            assert candidates[0].guard is not None, state


def test_payment_declined_is_unreachable() -> None:
    assert OrderState.PAYMENT_DECLINED not in ORDER_TRANSITIONS.reachable_states()


def test_only_settlement_failed_has_outgoing_edges() -> None:
    for state in ORDER_FAILURE_STATES:
        events = ORDER_TRANSITIONS.allowed_events(state)
        if state == OrderState.SETTLEMENT_FAILED:
            assert events == ["edit_payment_method"]
        else:
            assert events == [], state


def test_transition_requires_from_states() -> None:
    with pytest.raises(ValueError):
        Transition(from_states=frozenset(), to_state=OrderState.PENDING)


def test_transition_coerces_state_labels() -> None:
    t = transition("pending", "has_shipping_address")

    assert t.from_states == frozenset({OrderState.PENDING})
    assert t.to_state is OrderState.HAS_SHIPPING_ADDRESS


def test_transition_rejects_unknown_state() -> None:
    with pytest.raises(ValueError):
        transition("pending", "teleported")


def test_table_rejects_empty_event_name() -> None:
    edge = transition(OrderState.PENDING, OrderState.HAS_SHIPPING_ADDRESS)

    with pytest.raises(ValueError):
        TransitionTable({"": (edge,)})


def test_undeclared_event_has_no_transitions() -> None:
    assert ORDER_TRANSITIONS.transitions("cancel") == ()
    assert ORDER_TRANSITIONS.states_for("cancel") == frozenset()
