"""
Order lifecycle states and event names.

This module defines the canonical order states and the events that may move
an order between them. It is intentionally passive: the edges themselves
live in the transition table, and only the engine commits a state change.
"""

from __future__ import annotations

from enum import Enum


class OrderState(str, Enum):
    """Closed set of lifecycle positions an order can occupy."""

    PENDING = "pending"
    HAS_SHIPPING_ADDRESS = "has_shipping_address"
    HAS_SHIPMENTS = "has_shipments"
    HAS_SHIPPING_OPTIONS = "has_shipping_options"
    HAS_PAYMENT_METHOD = "has_payment_method"
    READY_TO_ORDER = "ready_to_order"
    PAYMENT_AUTHORIZED = "payment_authorized"
    ORDERED = "ordered"
    SHIPPED = "shipped"
    PAYMENT_SETTLED = "payment_settled"

    # Failure states
    SHIPMENT_QUOTE_FAILED = "shipment_quote_failed"
    PAYMENT_DECLINED = "payment_declined"
    AUTHORIZATION_FAILED = "authorization_failed"
    ORDER_FAILED = "order_failed"
    SETTLEMENT_FAILED = "settlement_failed"


class OrderEvent(str, Enum):
    """Named triggers accepted by the default order transition table."""

    ADVANCE = "advance"
    EDIT_SHIPPING_ADDRESS = "edit_shipping_address"
    EDIT_SHIPPING_OPTIONS = "edit_shipping_options"
    EDIT_PAYMENT_METHOD = "edit_payment_method"


INITIAL_STATE: OrderState = OrderState.PENDING

# Terminal order states: once reached, the order is considered complete.
# payment_declined has no inbound edge in the default table.
ORDER_TERMINAL_STATES: frozenset[OrderState] = frozenset(
    {
        OrderState.PAYMENT_SETTLED,
        OrderState.PAYMENT_DECLINED,
    }
)

ORDER_FAILURE_STATES: frozenset[OrderState] = frozenset(
    {
        OrderState.SHIPMENT_QUOTE_FAILED,
        OrderState.PAYMENT_DECLINED,
        OrderState.AUTHORIZATION_FAILED,
        OrderState.ORDER_FAILED,
        OrderState.SETTLEMENT_FAILED,
    }
)


def is_terminal_state(state: OrderState | str) -> bool:
    """Return True if the given state is terminal."""
    return OrderState(state) in ORDER_TERMINAL_STATES


def is_failure_state(state: OrderState | str) -> bool:
    """Return True if the given state is one of the ``*_failed`` fork targets."""
    return OrderState(state) in ORDER_FAILURE_STATES
