"""Outbound notification boundary.

Notifications are fire-and-forget: the engine invokes them from
post-transition hooks and never observes their failures.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

LOGGER = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, recipient_class: str, order_id: str, context: Mapping[str, Any]) -> None:
        """Deliver a notification to a class of recipients (e.g. "user", "admin")."""


class NullNotifier:
    """Notifier that discards all notifications (used for tests)."""

    def notify(self, recipient_class: str, order_id: str, context: Mapping[str, Any]) -> None:
        return


class LoggingNotifier:
    """Logs notifications using the standard logging module."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger if logger is not None else LOGGER

    def notify(self, recipient_class: str, order_id: str, context: Mapping[str, Any]) -> None:
        self._logger.info(
            "order_notification",
            extra={
                "recipient_class": recipient_class,
                "order_id": order_id,
                "context": dict(context),
            },
        )
