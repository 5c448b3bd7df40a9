"""Named validation contexts over the order aggregate.

A validation context is an ordered list of rules. Every rule is evaluated
(no short-circuit) and each violated rule records exactly one reason, so a
caller sees every problem with an order at once.

The ``ready_to_order`` context gates ``has_payment_method -> ready_to_order``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from order_lifecycle.core.domain.violations import ReadinessViolation

if TYPE_CHECKING:
    from order_lifecycle.core.domain.aggregate import Order

LOGGER = logging.getLogger(__name__)

READY_TO_ORDER: str = "ready_to_order"


@dataclass(frozen=True, slots=True)
class ValidationRule:
    """A single check: ``predicate(order)`` must hold, else ``reason`` is recorded."""

    reason: str
    predicate: Callable[[Order], bool]


@dataclass(slots=True)
class ValidationReport:
    """Outcome of one validation run."""

    context: str
    violations: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


@dataclass(frozen=True, slots=True)
class ValidationContext:
    name: str
    rules: tuple[ValidationRule, ...]

    def validate(self, order: Order) -> ValidationReport:
        report = ValidationReport(context=self.name)
        for rule in self.rules:
            if not rule.predicate(order):
                report.violations.append(rule.reason)
        return report


def _payment_method_not_declined(order: Order) -> bool:
    # Absence is reported by its own rule.
    if order.payment_method is None:
        return True
    return order.payment_method.accepted


READY_TO_ORDER_CONTEXT = ValidationContext(
    name=READY_TO_ORDER,
    rules=(
        ValidationRule(
            ReadinessViolation.SHIPPING_ADDRESS_MISSING,
            lambda order: order.has_shipping_address,
        ),
        ValidationRule(
            ReadinessViolation.SHIPMENTS_MISSING,
            lambda order: order.has_shipments,
        ),
        ValidationRule(
            ReadinessViolation.PAYMENT_METHOD_MISSING,
            lambda order: order.has_payment_method,
        ),
        ValidationRule(
            ReadinessViolation.PAYMENT_METHOD_DECLINED,
            _payment_method_not_declined,
        ),
    ),
)


class ReadinessValidator:
    """Registry of named validation contexts."""

    def __init__(self, contexts: tuple[ValidationContext, ...] = (READY_TO_ORDER_CONTEXT,)) -> None:
        self._contexts: dict[str, ValidationContext] = {c.name: c for c in contexts}

    @property
    def contexts(self) -> list[str]:
        return list(self._contexts)

    def validate(self, order: Order, context: str = READY_TO_ORDER) -> ValidationReport:
        """Run every rule of ``context`` against the order.

        Raises:
            KeyError: no context registered under that name.
        """
        ctx = self._contexts.get(context)
        if ctx is None:
            raise KeyError(f"Unknown validation context '{context}'. Known: {self.contexts}")

        report = ctx.validate(order)
        if not report.ok:
            LOGGER.info(
                "Validation failed",
                extra={
                    "order_id": order.order_id,
                    "context": context,
                    "violations": list(report.violations),
                },
            )
        return report

    def is_valid(self, order: Order, context: str = READY_TO_ORDER) -> bool:
        return self.validate(order, context).ok
