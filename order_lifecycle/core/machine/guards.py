"""Transition guards.

One function per guarded transition. A guard inspects the aggregate and
returns True to let its transition fire. Guards may call the injected
``OrderServices`` (charge authorization, submission, settlement, ...) but
never mutate ``order.state``; only the engine commits states.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from order_lifecycle.core.validation.readiness import READY_TO_ORDER, ReadinessValidator

if TYPE_CHECKING:
    from order_lifecycle.core.domain.aggregate import Order
    from order_lifecycle.core.ports.order_services import OrderServices

Guard = Callable[["Order", "OrderServices"], bool]

_READINESS = ReadinessValidator()


def shipping_address_present(order: Order, services: OrderServices) -> bool:
    return order.has_shipping_address


def shipments_built(order: Order, services: OrderServices) -> bool:
    """Quote shipments; the order must end up with at least one."""
    if not services.build_shipments(order):
        return False
    return order.has_shipments


def shipping_options_set(order: Order, services: OrderServices) -> bool:
    return bool(services.set_shipping_options(order))


def payment_method_present(order: Order, services: OrderServices) -> bool:
    return order.has_payment_method


def ready_to_order(order: Order, services: OrderServices) -> bool:
    return _READINESS.is_valid(order, READY_TO_ORDER)


def charge_authorized(order: Order, services: OrderServices) -> bool:
    return bool(services.authorize_charge(order))


def order_submitted(order: Order, services: OrderServices) -> bool:
    return bool(services.submit_order(order))


def shipments_all_shipped(order: Order, services: OrderServices) -> bool:
    return order.all_shipped


def charge_settled(order: Order, services: OrderServices) -> bool:
    return bool(services.settle_charge(order))


def order_total_recharged(order: Order, services: OrderServices) -> bool:
    return bool(services.recharge(order, order.total))
