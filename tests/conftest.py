"""Shared fixtures: deterministic external services and a recording notifier."""

from __future__ import annotations

from collections import Counter
from decimal import Decimal
from typing import Any, Callable, Mapping

import pytest

from order_lifecycle.core.domain.aggregate import Order
from order_lifecycle.core.domain.states import OrderEvent, OrderState
from order_lifecycle.core.machine.engine import StateMachineEngine
from order_lifecycle.core.machine.transition_table import ORDER_TRANSITIONS


class StubServices:
    """OrderServices stand-in with fixed answers and call counting."""

    def __init__(self, **results: bool) -> None:
        self.results: dict[str, bool] = {
            "build_shipments": True,
            "set_shipping_options": True,
            "authorize_charge": True,
            "submit_order": True,
            "settle_charge": True,
            "recharge": True,
        }
        self.results.update(results)
        self.calls: Counter[str] = Counter()
        self.recharge_amounts: list[Decimal] = []

    def _answer(self, name: str) -> bool:
        self.calls[name] += 1
        return self.results[name]

    def build_shipments(self, order: Order) -> bool:
        return self._answer("build_shipments")

    def set_shipping_options(self, order: Order) -> bool:
        return self._answer("set_shipping_options")

    def authorize_charge(self, order: Order) -> bool:
        return self._answer("authorize_charge")

    def submit_order(self, order: Order) -> bool:
        return self._answer("submit_order")

    def settle_charge(self, order: Order) -> bool:
        return self._answer("settle_charge")

    def recharge(self, order: Order, amount: Decimal) -> bool:
        self.recharge_amounts.append(amount)
        return self._answer("recharge")


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, dict[str, Any]]] = []

    def notify(self, recipient_class: str, order_id: str, context: Mapping[str, Any]) -> None:
        self.sent.append((recipient_class, order_id, dict(context)))


@pytest.fixture
def services() -> StubServices:
    return StubServices()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def engine(services: StubServices, notifier: RecordingNotifier) -> StateMachineEngine:
    return StateMachineEngine(ORDER_TRANSITIONS, services, notifier=notifier)


# Order of states walked by repeated "advance" on the success path.
HAPPY_PATH: tuple[OrderState, ...] = (
    OrderState.PENDING,
    OrderState.HAS_SHIPPING_ADDRESS,
    OrderState.HAS_SHIPMENTS,
    OrderState.HAS_SHIPPING_OPTIONS,
    OrderState.HAS_PAYMENT_METHOD,
    OrderState.READY_TO_ORDER,
    OrderState.PAYMENT_AUTHORIZED,
    OrderState.ORDERED,
    OrderState.SHIPPED,
    OrderState.PAYMENT_SETTLED,
)


@pytest.fixture
def order_in_state(engine: StateMachineEngine) -> Callable[[OrderState], Order]:
    """Build a fully furnished order and advance it to ``target`` via the engine."""

    def _build(target: OrderState) -> Order:
        order = Order("order-1", po_number="PO-1", total=Decimal("42.50"))
        order.create_shipping_address("55401")
        order.add_shipment()
        order.create_payment_method()

        for expected in HAPPY_PATH:
            if order.state == target:
                return order
            assert order.state == expected, f"Order state: {order.state.value}"
            if order.state == OrderState.ORDERED:
                for shipment in order.shipments:
                    shipment.mark_shipped()
            engine.fire(order, OrderEvent.ADVANCE)

        assert order.state == target, f"Order state: {order.state.value}"
        return order

    return _build
