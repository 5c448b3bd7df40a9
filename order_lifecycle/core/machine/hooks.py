"""Post-transition hooks.

A hook runs after the engine has committed the new state. Hooks are
fire-and-forget: their failures are logged, never propagated, and never
undo the transition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from order_lifecycle.core.domain.aggregate import Order
    from order_lifecycle.core.domain.states import OrderState
    from order_lifecycle.core.ports.notifier import Notifier

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HookContext:
    """What a hook may know about the transition that just committed."""

    event: str
    from_state: OrderState
    to_state: OrderState
    notifier: Notifier


Hook = Callable[["Order", HookContext], None]


@dataclass(frozen=True, slots=True)
class Notify:
    """Hook that notifies one or more recipient classes.

    Each recipient is notified independently; one failing delivery does not
    prevent the next.
    """

    recipients: tuple[str, ...]
    message: str

    def __call__(self, order: Order, ctx: HookContext) -> None:
        context = {
            "event": ctx.event,
            "from_state": ctx.from_state.value,
            "to_state": ctx.to_state.value,
            "message": self.message,
        }
        for recipient in self.recipients:
            try:
                ctx.notifier.notify(recipient, order.order_id, context)
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.exception(
                    "Notification failed",
                    extra={"order_id": order.order_id, "recipient_class": recipient},
                )


def notify(*recipients: str, message: str) -> Notify:
    """Shorthand used by transition tables: ``notify("admin", "user", message=...)``."""
    if not recipients:
        raise ValueError("notify() needs at least one recipient class")
    return Notify(recipients=tuple(recipients), message=message)
