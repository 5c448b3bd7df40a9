"""Exception types raised by the order lifecycle package.

Lifecycle conditions (an event not available in the current state, a guard
returning False) are never exceptions. These classes cover programming
defects and lookups at the persistence boundary.
"""

from __future__ import annotations


class LifecycleError(Exception):
    """Base class for order lifecycle errors."""


class UnknownEventError(LifecycleError, ValueError):
    """Raised when an event name is not declared in the transition table."""

    def __init__(self, event: str, declared: list[str]) -> None:
        self.event = event
        self.declared = declared
        super().__init__(f"Unknown event '{event}'. Declared: {declared}")


class OrderNotFoundError(LifecycleError, KeyError):
    """Raised when the repository holds no record for an order id."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(order_id)

    def __str__(self) -> str:
        return f"Order '{self.order_id}' not found"


class DuplicateOrderError(LifecycleError):
    """Raised when creating an order whose id the repository already holds."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Order '{order_id}' already exists")
