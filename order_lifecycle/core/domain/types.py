"""Persisted order snapshot models.

This module defines the canonical Pydantic models exchanged with the
persistence layer. They mirror the relational layout of an order record
(orders, shipping_addresses, payment_methods, shipments) and are treated as
schema definitions; ``core/schemas/order_record.schema.json`` is kept in
lockstep with them.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from order_lifecycle.core.domain.aggregate import Order, PaymentMethod, ShippingAddress, Shipment
from order_lifecycle.core.domain.states import INITIAL_STATE, OrderState

# ---------------------------------------------------------------------------
# Sub-entity records
# ---------------------------------------------------------------------------


class ShippingAddressRecord(BaseModel):
    postal_code: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class PaymentMethodRecord(BaseModel):
    declined: bool = False

    model_config = ConfigDict(extra="forbid")


class ShipmentRecord(BaseModel):
    shipped: bool | None = None
    shipped_at: datetime | None = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_shipped_timestamp(self) -> ShipmentRecord:
        """A shipped shipment always carries its timestamp."""
        if self.shipped and self.shipped_at is None:
            raise ValueError("shipped_at is required when shipped is true")
        return self


# ---------------------------------------------------------------------------
# Aggregate record
# ---------------------------------------------------------------------------


class OrderRecord(BaseModel):
    """Snapshot of one order aggregate as stored by the persistence layer."""

    order_id: str = Field(..., min_length=1, description="Order identity.")
    po_number: str | None = Field(default=None, min_length=1, description="Purchase order number.")
    state: OrderState = Field(
        INITIAL_STATE,
        description="Current lifecycle state label.",
    )
    total: Decimal = Field(
        Decimal("0"),
        ge=0,
        description="Order total, used as the recharge amount on settlement recovery.",
    )

    shipping_address: ShippingAddressRecord | None = None
    payment_method: PaymentMethodRecord | None = None
    shipments: list[ShipmentRecord] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_order(cls, order: Order) -> OrderRecord:
        address = order.shipping_address
        payment = order.payment_method
        return cls(
            order_id=order.order_id,
            po_number=order.po_number,
            state=order.state,
            total=order.total,
            shipping_address=None
            if address is None
            else ShippingAddressRecord(postal_code=address.postal_code),
            payment_method=None
            if payment is None
            else PaymentMethodRecord(declined=payment.declined),
            shipments=[
                ShipmentRecord(shipped=s.shipped, shipped_at=s.shipped_at)
                for s in order.shipments
            ],
        )

    def to_order(self) -> Order:
        oid = self.order_id
        return Order.restore(
            oid,
            state=self.state,
            po_number=self.po_number,
            total=self.total,
            shipping_address=None
            if self.shipping_address is None
            else ShippingAddress(order_id=oid, postal_code=self.shipping_address.postal_code),
            payment_method=None
            if self.payment_method is None
            else PaymentMethod(order_id=oid, declined=self.payment_method.declined),
            shipments=[
                Shipment(order_id=oid, shipped=s.shipped, shipped_at=s.shipped_at)
                for s in self.shipments
            ],
        )
