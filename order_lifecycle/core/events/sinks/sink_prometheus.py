from __future__ import annotations

import json
import logging
import os
from typing import Any

from prometheus_client import CollectorRegistry, Counter, push_to_gateway

from order_lifecycle.core.events.events import HookFailedEvent, OrderEventFired

LOGGER = logging.getLogger(__name__)


class PrometheusTransitionSink:
    """Counts lifecycle events in a private Prometheus registry.

    Expected environment (only needed for ``push_all``):
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway.

    Optional:
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object used as grouping key.

    Pushing is best-effort: callers should treat it as a side-effect and
    never fail a unit of work because of metrics delivery.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._pushgateway_url = os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self.registry = registry if registry is not None else CollectorRegistry()

        self._fired = Counter(
            "order_lifecycle_events_fired",
            "Lifecycle events fired against orders.",
            labelnames=["event", "from_state", "to_state", "applied"],
            registry=self.registry,
        )
        self._hook_failures = Counter(
            "order_lifecycle_hook_failures",
            "Post-transition hooks that raised.",
            labelnames=["event", "state"],
            registry=self.registry,
        )

    def is_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning(
                "Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring"
            )
            return {}

        if not isinstance(data, dict):
            return {}

        grouping: dict[str, str] = {}
        for key, value in data.items():
            if isinstance(key, str) and isinstance(value, str):
                grouping[key] = value
        return grouping

    def on_event(self, event: Any) -> None:
        if isinstance(event, OrderEventFired):
            self._fired.labels(
                event=event.event,
                from_state=event.from_state,
                to_state=event.to_state,
                applied=str(event.applied).lower(),
            ).inc()
        elif isinstance(event, HookFailedEvent):
            self._hook_failures.labels(event=event.event, state=event.state).inc()

    def push_all(self, *, job: str) -> None:
        if not self._pushgateway_url:
            return

        push_to_gateway(
            gateway=self._pushgateway_url,
            job=job,
            registry=self.registry,
            grouping_key=self._grouping_key,
        )

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": job, "grouping_key": self._grouping_key},
        )
