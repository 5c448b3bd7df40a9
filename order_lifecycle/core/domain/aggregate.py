"""Order aggregate and its owned sub-entities.

The Order is the aggregate root. Shipping address, payment method and
shipments exist only in relation to one order and are read (never owned) by
the state machine engine.

The ``state`` attribute is read-only outside the engine. The only writer is
``Order._commit_state`` which the engine calls after a winning guard.
"""

# pylint: disable=too-many-instance-attributes
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from order_lifecycle.core.domain.states import INITIAL_STATE, OrderState

# ---------------------------------------------------------------------------
# Sub-entities
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ShippingAddress:
    """Postal destination of an order. Presence alone is a guard condition."""

    order_id: str
    postal_code: str

    def __post_init__(self) -> None:
        if not self.postal_code:
            raise ValueError("postal_code must be a non-empty string")


@dataclass(slots=True)
class PaymentMethod:
    """Payment instrument attached 1:1 to an order."""

    order_id: str
    declined: bool = False

    def mark_declined(self) -> None:
        self.declined = True

    def mark_accepted(self) -> None:
        self.declined = False

    @property
    def accepted(self) -> bool:
        return not self.declined


@dataclass(slots=True)
class Shipment:
    """One parcel of an order.

    ``shipped`` and ``shipped_at`` stay unset until ``mark_shipped`` runs.
    """

    order_id: str
    shipped: bool | None = None
    shipped_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.shipped and self.shipped_at is None:
            raise ValueError("shipped_at is required when shipped is true")

    def mark_shipped(self, at: datetime | None = None) -> None:
        """Flag the shipment as shipped.

        Idempotent: calling it again keeps the flag and only overwrites the
        timestamp.
        """
        self.shipped_at = at if at is not None else datetime.now(timezone.utc)
        self.shipped = True

    @property
    def is_shipped(self) -> bool:
        return bool(self.shipped)


def all_shipped(shipments: Iterable[Shipment]) -> bool:
    """Return True iff there is at least one shipment and every one is shipped.

    An empty collection is NOT considered shipped, so an order whose
    shipments were removed cannot reach ``shipped``.
    """
    seen = False
    for shipment in shipments:
        if not shipment.is_shipped:
            return False
        seen = True
    return seen


# ---------------------------------------------------------------------------
# Aggregate root
# ---------------------------------------------------------------------------


class Order:
    """Purchase order aggregate root.

    Created in the initial state with no sub-entities. Collaborator
    operations attach sub-entities; only the state machine engine changes
    ``state``.
    """

    def __init__(
        self,
        order_id: str,
        *,
        po_number: str | None = None,
        total: Decimal | int | str = Decimal("0"),
    ) -> None:
        if not order_id:
            raise ValueError("order_id must be a non-empty string")
        if po_number is not None and not po_number:
            raise ValueError("po_number must be None or a non-empty string")
        amount = Decimal(total)
        if amount < 0:
            raise ValueError(f"total must be non-negative, got {amount}")

        self.order_id = order_id
        self.po_number = po_number
        self.total = amount

        self._state: OrderState = INITIAL_STATE

        self.shipping_address: ShippingAddress | None = None
        self.payment_method: PaymentMethod | None = None
        self.shipments: list[Shipment] = []

    def __repr__(self) -> str:
        return f"Order(order_id={self.order_id!r}, state={self._state.value!r})"

    @classmethod
    def restore(
        cls,
        order_id: str,
        *,
        state: OrderState | str,
        po_number: str | None = None,
        total: Decimal | int | str = Decimal("0"),
        shipping_address: ShippingAddress | None = None,
        payment_method: PaymentMethod | None = None,
        shipments: Iterable[Shipment] = (),
    ) -> Order:
        """Rebuild an order loaded from the persistence layer.

        This is the persistence boundary only. Lifecycle code must go through
        the engine.
        """
        order = cls(order_id, po_number=po_number, total=total)
        order._state = OrderState(state)
        order.shipping_address = shipping_address
        order.payment_method = payment_method
        order.shipments = list(shipments)
        return order

    # ---- State ----

    @property
    def state(self) -> OrderState:
        return self._state

    def _commit_state(self, state: OrderState) -> None:
        # Engine-private writer.
        self._state = OrderState(state)

    # ---- Collaborator operations ----

    def create_shipping_address(self, postal_code: str) -> ShippingAddress:
        self.shipping_address = ShippingAddress(order_id=self.order_id, postal_code=postal_code)
        return self.shipping_address

    def create_payment_method(self, *, declined: bool = False) -> PaymentMethod:
        """Attach a payment method, replacing any previous one (1:1 relation)."""
        self.payment_method = PaymentMethod(order_id=self.order_id, declined=declined)
        return self.payment_method

    def add_shipment(self) -> Shipment:
        shipment = Shipment(order_id=self.order_id)
        self.shipments.append(shipment)
        return shipment

    def clear_shipments(self) -> None:
        self.shipments.clear()

    # ---- Derived predicates ----

    @property
    def has_shipping_address(self) -> bool:
        return self.shipping_address is not None

    @property
    def has_shipments(self) -> bool:
        return len(self.shipments) > 0

    @property
    def all_shipped(self) -> bool:
        return all_shipped(self.shipments)

    @property
    def has_payment_method(self) -> bool:
        return self.payment_method is not None

    @property
    def payment_method_accepted(self) -> bool:
        return self.payment_method is not None and self.payment_method.accepted
