"""
Semantic test: the lifecycle service is a per-order unit of work.

Invariant:
Each call loads the order, applies one operation and saves it, so the
stored snapshot always reflects the last successfully completed action.
Concurrent calls against the same order are serialized, and creating an
id that is already stored is refused instead of resetting the order.
"""

from __future__ import annotations

import gc
import threading
import time
from decimal import Decimal

import pytest

from order_lifecycle.core.domain.aggregate import Order
from order_lifecycle.core.domain.states import OrderEvent, OrderState
from order_lifecycle.core.errors import DuplicateOrderError, OrderNotFoundError
from order_lifecycle.core.events.sinks.sink_prometheus import PrometheusTransitionSink
from order_lifecycle.core.machine.engine import StateMachineEngine
from order_lifecycle.core.machine.transition_table import ORDER_TRANSITIONS
from order_lifecycle.core.ports.order_repository import InMemoryOrderRepository
from order_lifecycle.service.lifecycle_service import OrderLifecycleService


@pytest.fixture
def repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def service(engine, repository) -> OrderLifecycleService:
    return OrderLifecycleService(engine, repository)


def test_create_persists_pending_order(service, repository) -> None:
    service.create("order-1", po_number="PO-1", total="10.00")

    assert "order-1" in repository
    snapshot = repository.snapshot("order-1")
    assert snapshot["state"] == "pending"
    assert snapshot["total"] == "10.00"


def test_create_rejects_existing_order(service, repository) -> None:
    service.create("order-1", po_number="PO-1")
    service.update("order-1", lambda o: o.create_shipping_address("55401"))
    service.fire("order-1", OrderEvent.ADVANCE)

    with pytest.raises(DuplicateOrderError) as exc_info:
        service.create("order-1")

    assert exc_info.value.order_id == "order-1"
    stored = service.get("order-1")
    assert stored.state == OrderState.HAS_SHIPPING_ADDRESS
    assert stored.po_number == "PO-1"
    assert stored.shipping_address is not None
    assert len(repository) == 1


def test_invalid_order_is_rejected_before_save(service, repository) -> None:
    with pytest.raises(ValueError):
        service.create("order-1", total="-5")

    with pytest.raises(ValueError):
        service.create("order-2", po_number="")

    assert len(repository) == 0


def test_order_locks_are_released_after_use(service) -> None:
    service.create("order-1")
    service.fire("order-1", OrderEvent.ADVANCE)
    service.get("order-1")
    gc.collect()

    assert len(service._locks) == 0  # pylint: disable=protected-access


def test_fire_persists_new_state(service, repository) -> None:
    service.create("order-1")
    service.update("order-1", lambda o: o.create_shipping_address("55401"))

    outcome = service.fire("order-1", OrderEvent.ADVANCE)

    assert outcome.to_state == OrderState.HAS_SHIPPING_ADDRESS
    assert repository.snapshot("order-1")["state"] == "has_shipping_address"
    assert service.get("order-1").state == OrderState.HAS_SHIPPING_ADDRESS


def test_full_lifecycle_through_repository(service, services) -> None:
    service.create("order-1", total=Decimal("99.00"))
    service.update("order-1", lambda o: o.create_shipping_address("55401"))
    service.fire("order-1", "advance")
    service.update("order-1", lambda o: o.add_shipment())
    service.fire("order-1", "advance")
    service.fire("order-1", "advance")

    # no payment method attached yet: stuck at has_shipping_options
    outcome = service.fire("order-1", "advance")
    assert outcome.noop
    assert service.get("order-1").state == OrderState.HAS_SHIPPING_OPTIONS

    service.update("order-1", lambda o: o.create_payment_method())
    for _ in range(4):
        service.fire("order-1", "advance")
    assert service.get("order-1").state == OrderState.ORDERED

    service.update("order-1", lambda o: [s.mark_shipped() for s in o.shipments])
    service.fire("order-1", "advance")
    service.fire("order-1", "advance")

    final = service.get("order-1")
    assert final.state == OrderState.PAYMENT_SETTLED
    assert final.total == Decimal("99.00")
    assert final.all_shipped
    assert services.calls["settle_charge"] == 1


def test_loads_are_independent_copies(service) -> None:
    service.create("order-1")

    first = service.get("order-1")
    first.create_shipping_address("55401")

    assert service.get("order-1").shipping_address is None


def test_unknown_order_raises(service) -> None:
    with pytest.raises(OrderNotFoundError):
        service.fire("missing", OrderEvent.ADVANCE)

    with pytest.raises(KeyError):
        service.get("missing")


def test_concurrent_fires_are_serialized(repository) -> None:
    class SlowServices:
        def __init__(self) -> None:
            self.calls = 0
            self.active = 0
            self.max_active = 0
            self._lock = threading.Lock()

        def set_shipping_options(self, order) -> bool:
            with self._lock:
                self.calls += 1
                self.active += 1
                self.max_active = max(self.max_active, self.active)
            time.sleep(0.05)
            with self._lock:
                self.active -= 1
            return False

    slow = SlowServices()
    service = OrderLifecycleService(StateMachineEngine(ORDER_TRANSITIONS, slow), repository)
    repository.save(Order.restore("order-1", state=OrderState.HAS_SHIPMENTS))

    threads = [
        threading.Thread(target=service.fire, args=("order-1", OrderEvent.ADVANCE))
        for _ in range(4)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert slow.calls == 4
    assert slow.max_active == 1
    assert repository.snapshot("order-1")["state"] == "has_shipments"


def test_flush_metrics_without_pushgateway_is_noop(engine, repository, monkeypatch) -> None:
    monkeypatch.delenv("PROMETHEUS_PUSHGATEWAY_URL", raising=False)
    sink = PrometheusTransitionSink()
    service = OrderLifecycleService(engine, repository, metrics=sink, metrics_job="orders")

    service.flush_metrics()

    assert not sink.is_enabled()
