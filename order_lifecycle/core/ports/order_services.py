"""External service protocol consumed by transition guards.

This module defines the boundary to the payment gateway, carrier quoting
and order submission systems. Every call is a synchronous, single-shot
boolean predicate: True means the external action succeeded, False is the
designed trigger for the paired failure transition. The engine never
retries and imposes no timeout; callers needing a deadline wrap the
implementation and return False on expiry.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from order_lifecycle.core.domain.aggregate import Order


class OrderServices(Protocol):
    """Strategy object injected into the engine and handed to guards."""

    def build_shipments(self, order: Order) -> bool:
        """Quote and build shipments for the order's address."""

    def set_shipping_options(self, order: Order) -> bool:
        """Select carrier options for the built shipments."""

    def authorize_charge(self, order: Order) -> bool:
        """Authorize the order total against the payment method."""

    def submit_order(self, order: Order) -> bool:
        """Submit the authorized order for fulfillment."""

    def settle_charge(self, order: Order) -> bool:
        """Capture the previously authorized charge."""

    def recharge(self, order: Order, amount: Decimal) -> bool:
        """Charge ``amount`` again after a failed settlement."""
