"""Application service wrapping the engine in a unit of work.

Each call loads the order, applies one operation and saves it back, while
holding a per-order lock so that concurrent calls against the same order
are serialized. Calls against different orders proceed in parallel.
"""

from __future__ import annotations

import logging
import threading
import weakref
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, TypeVar

from order_lifecycle.core.domain.aggregate import Order
from order_lifecycle.core.errors import DuplicateOrderError

if TYPE_CHECKING:
    from order_lifecycle.core.domain.states import OrderEvent
    from order_lifecycle.core.events.sinks.sink_prometheus import PrometheusTransitionSink
    from order_lifecycle.core.machine.engine import StateMachineEngine, TransitionOutcome
    from order_lifecycle.core.ports.order_repository import OrderRepository

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class OrderLifecycleService:
    """Load -> operate -> save, serialized per order id."""

    def __init__(
        self,
        engine: StateMachineEngine,
        repository: OrderRepository,
        *,
        metrics: PrometheusTransitionSink | None = None,
        metrics_job: str | None = None,
    ) -> None:
        self.engine = engine
        self.repository = repository
        self._metrics = metrics
        self._metrics_job = metrics_job

        # Weak values: a lock lives only while some call holds a reference.
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    def _lock_for(self, order_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(order_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[order_id] = lock
            return lock

    def create(
        self,
        order_id: str,
        *,
        po_number: str | None = None,
        total: Decimal | int | str = Decimal("0"),
    ) -> Order:
        """Create and persist a new order in the initial state.

        Raises DuplicateOrderError if the id is already stored.
        """
        order = Order(order_id, po_number=po_number, total=total)
        with self._lock_for(order_id):
            if order_id in self.repository:
                raise DuplicateOrderError(order_id)
            self.repository.save(order)
        return order

    def update(self, order_id: str, operation: Callable[[Order], T]) -> T:
        """Run a collaborator operation (attach address, mark shipped, ...) and save."""
        with self._lock_for(order_id):
            order = self.repository.load(order_id)
            result = operation(order)
            self.repository.save(order)
            return result

    def fire(self, order_id: str, event: OrderEvent | str) -> TransitionOutcome:
        """Fire one event and persist the result, guard side effects included."""
        with self._lock_for(order_id):
            order = self.repository.load(order_id)
            outcome = self.engine.fire(order, event)
            self.repository.save(order)
        return outcome

    def get(self, order_id: str) -> Order:
        with self._lock_for(order_id):
            return self.repository.load(order_id)

    def flush_metrics(self) -> None:
        """Push collected metrics to the Pushgateway (best-effort)."""
        if self._metrics is None or self._metrics_job is None:
            return
        try:
            self._metrics.push_all(job=self._metrics_job)
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Prometheus push failed", extra={"job": self._metrics_job})
