"""Public API for the order_lifecycle package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Configuration
# ----------------------------------------------------------------------
from order_lifecycle.config.lifecycle_config import LifecycleConfig, build_event_bus

# ----------------------------------------------------------------------
# Aggregate model
# ----------------------------------------------------------------------
from order_lifecycle.core.domain.aggregate import (
    Order,
    PaymentMethod,
    Shipment,
    ShippingAddress,
    all_shipped,
)
from order_lifecycle.core.domain.states import (
    ORDER_FAILURE_STATES,
    ORDER_TERMINAL_STATES,
    OrderEvent,
    OrderState,
    is_failure_state,
    is_terminal_state,
)
from order_lifecycle.core.domain.types import OrderRecord
from order_lifecycle.core.domain.violations import ReadinessViolation
from order_lifecycle.core.errors import (
    DuplicateOrderError,
    LifecycleError,
    OrderNotFoundError,
    UnknownEventError,
)

# ----------------------------------------------------------------------
# Events
# ----------------------------------------------------------------------
from order_lifecycle.core.events.event_bus import EventBus
from order_lifecycle.core.events.events import (
    HookFailedEvent,
    OrderEventFired,
    OrderStateTransitionEvent,
)

# ----------------------------------------------------------------------
# Engine and transition table
# ----------------------------------------------------------------------
from order_lifecycle.core.machine.engine import StateMachineEngine, TransitionOutcome
from order_lifecycle.core.machine.hooks import HookContext, Notify, notify
from order_lifecycle.core.machine.transition_table import (
    ORDER_TRANSITIONS,
    Transition,
    TransitionTable,
    build_order_transition_table,
    transition,
)

# ----------------------------------------------------------------------
# Ports and adapters
# ----------------------------------------------------------------------
from order_lifecycle.core.ports.notifier import LoggingNotifier, Notifier, NullNotifier
from order_lifecycle.core.ports.order_repository import InMemoryOrderRepository, OrderRepository
from order_lifecycle.core.ports.order_services import OrderServices
from order_lifecycle.core.validation.readiness import (
    READY_TO_ORDER,
    ReadinessValidator,
    ValidationReport,
)
from order_lifecycle.service.lifecycle_service import OrderLifecycleService

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Engine
    "StateMachineEngine",
    "TransitionOutcome",
    "TransitionTable",
    "Transition",
    "transition",
    "build_order_transition_table",
    "ORDER_TRANSITIONS",
    "HookContext",
    "Notify",
    "notify",

    # Aggregate
    "Order",
    "ShippingAddress",
    "PaymentMethod",
    "Shipment",
    "all_shipped",
    "OrderRecord",
    "OrderState",
    "OrderEvent",
    "ORDER_TERMINAL_STATES",
    "ORDER_FAILURE_STATES",
    "is_terminal_state",
    "is_failure_state",

    # Validation
    "ReadinessValidator",
    "ValidationReport",
    "ReadinessViolation",
    "READY_TO_ORDER",

    # Ports / adapters
    "OrderServices",
    "Notifier",
    "NullNotifier",
    "LoggingNotifier",
    "OrderRepository",
    "InMemoryOrderRepository",
    "OrderLifecycleService",

    # Events
    "EventBus",
    "OrderEventFired",
    "OrderStateTransitionEvent",
    "HookFailedEvent",

    # Config
    "LifecycleConfig",
    "build_event_bus",

    # Errors
    "LifecycleError",
    "UnknownEventError",
    "OrderNotFoundError",
    "DuplicateOrderError",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("order-lifecycle")
except PackageNotFoundError:
    __version__ = "0.0.0"
