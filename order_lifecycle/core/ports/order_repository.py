"""Persistence boundary for order aggregates.

The engine never talks to storage. A host application loads an order,
fires one event, and saves the result as a single unit of work through an
``OrderRepository``. ``InMemoryOrderRepository`` is the reference adapter:
it stores JSON snapshots so that every load returns a fresh aggregate.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from order_lifecycle.core.domain.types import OrderRecord
from order_lifecycle.core.errors import OrderNotFoundError

if TYPE_CHECKING:
    from order_lifecycle.core.domain.aggregate import Order

LOGGER = logging.getLogger(__name__)


class OrderRepository(Protocol):
    """Load/save boundary for the order aggregate."""

    def __contains__(self, order_id: object) -> bool:
        """Return True if a record exists for the order id."""

    def load(self, order_id: str) -> Order:
        """Return the order with its state label and related entities.

        Raises OrderNotFoundError if no record exists.
        """

    def save(self, order: Order) -> None:
        """Persist the state label and related-entity changes atomically."""


class InMemoryOrderRepository:
    """Snapshot-based repository kept in process memory."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def load(self, order_id: str) -> Order:
        raw = self._records.get(order_id)
        if raw is None:
            raise OrderNotFoundError(order_id)
        return OrderRecord.model_validate(raw).to_order()

    def save(self, order: Order) -> None:
        record = OrderRecord.from_order(order)
        self._records[order.order_id] = record.model_dump(mode="json", exclude_none=True)
        LOGGER.debug(
            "order saved",
            extra={"order_id": order.order_id, "state": order.state.value},
        )

    def snapshot(self, order_id: str) -> dict[str, Any]:
        """Return a copy of the stored JSON snapshot for an order."""
        raw = self._records.get(order_id)
        if raw is None:
            raise OrderNotFoundError(order_id)
        return OrderRecord.model_validate(raw).model_dump(mode="json", exclude_none=True)
