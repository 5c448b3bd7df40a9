"""
Semantic test: readiness validation is not short-circuiting.

Invariant:
The "ready_to_order" context evaluates every rule in order and records one
reason per violated rule. The readiness guard passes iff there are none.
"""

from __future__ import annotations

import pytest

from order_lifecycle.core.domain.aggregate import Order
from order_lifecycle.core.domain.violations import ReadinessViolation
from order_lifecycle.core.validation.readiness import READY_TO_ORDER, ReadinessValidator


def test_missing_payment_and_shipments_reports_both() -> None:
    order = Order("order-1")
    order.create_shipping_address("55401")

    report = ReadinessValidator().validate(order, READY_TO_ORDER)

    assert not report.ok
    assert report.context == "ready_to_order"
    assert report.violations == [
        ReadinessViolation.SHIPMENTS_MISSING,
        ReadinessViolation.PAYMENT_METHOD_MISSING,
    ]


def test_empty_order_reports_every_presence_rule_in_order() -> None:
    report = ReadinessValidator().validate(Order("order-1"))

    assert report.violations == [
        ReadinessViolation.SHIPPING_ADDRESS_MISSING,
        ReadinessViolation.SHIPMENTS_MISSING,
        ReadinessViolation.PAYMENT_METHOD_MISSING,
    ]


def test_declined_payment_is_reported() -> None:
    order = Order("order-1")
    order.create_shipping_address("55401")
    order.add_shipment()
    order.create_payment_method(declined=True)

    report = ReadinessValidator().validate(order)

    assert report.violations == [ReadinessViolation.PAYMENT_METHOD_DECLINED]


def test_complete_order_is_ready() -> None:
    order = Order("order-1")
    order.create_shipping_address("55401")
    order.add_shipment()
    order.create_payment_method()

    validator = ReadinessValidator()

    assert validator.validate(order).ok
    assert validator.is_valid(order)


def test_each_run_starts_with_a_fresh_report() -> None:
    validator = ReadinessValidator()
    order = Order("order-1")
    assert len(validator.validate(order).violations) == 3

    order.create_shipping_address("55401")
    order.add_shipment()
    order.create_payment_method()

    assert validator.validate(order).violations == []


def test_unknown_context_raises() -> None:
    with pytest.raises(KeyError):
        ReadinessValidator().validate(Order("order-1"), "ready_to_ship")
