"""Canonical readiness violation reasons.

Reasons are plain strings so they can be recorded in logs, domain events and
persisted audit trails without conversion.
"""

from __future__ import annotations


class ReadinessViolation:
    """String constants naming each rule of a validation context."""

    SHIPPING_ADDRESS_MISSING = "shipping_address_missing"
    SHIPMENTS_MISSING = "shipments_missing"
    PAYMENT_METHOD_MISSING = "payment_method_missing"
    PAYMENT_METHOD_DECLINED = "payment_method_declined"
