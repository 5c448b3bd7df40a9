"""Lifecycle runtime configuration.

This module defines the LifecycleConfig schema used to parse host
application configuration from JSON and to assemble the event bus the
engine reports to.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from order_lifecycle.core.events.event_bus import EventBus
from order_lifecycle.core.events.sinks.file_recorder import FileRecorderSink
from order_lifecycle.core.events.sinks.sink_logging import LoggingEventSink
from order_lifecycle.core.events.sinks.sink_prometheus import PrometheusTransitionSink


class LifecycleConfig(BaseModel):
    """Structured-only lifecycle configuration.

    JSON example:
        "lifecycle": {
          "logger_name": "orders",
          "recorder_path": "/var/log/orders/events.jsonl",
          "metrics_enabled": true,
          "metrics_job": "order-lifecycle"
        }
    """

    logger_name: str = Field("order_lifecycle.events", min_length=1)
    log_events: bool = True

    # Optional JSON-lines audit trail of every fired event.
    recorder_path: Path | None = None

    metrics_enabled: bool = False
    metrics_job: str | None = Field(default=None, min_length=1)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> LifecycleConfig:
        """Create a LifecycleConfig instance from a JSON-compatible object."""
        return cls.model_validate(obj)

    @classmethod
    def from_json_file(cls, path: str | Path) -> LifecycleConfig:
        """Load a LifecycleConfig from a JSON file.

        Accepts either the bare config object or a document with a top-level
        ``"lifecycle"`` key.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, dict) and isinstance(data.get("lifecycle"), dict):
            data = data["lifecycle"]
        return cls.from_json_obj(data)

    @model_validator(mode="after")
    def validate_consistency(self) -> LifecycleConfig:
        """Validate internal consistency of the configuration."""
        if self.metrics_job is not None and not self.metrics_enabled:
            raise ValueError("metrics_job requires metrics_enabled")
        return self


def build_event_bus(
    cfg: LifecycleConfig,
    *,
    metrics_sink: PrometheusTransitionSink | None = None,
) -> EventBus:
    """Assemble the sinks requested by ``cfg`` into an EventBus."""
    bus = EventBus()

    if cfg.log_events:
        bus.register(LoggingEventSink(logging.getLogger(cfg.logger_name)))

    if cfg.recorder_path is not None:
        bus.register(FileRecorderSink(cfg.recorder_path))

    if cfg.metrics_enabled:
        bus.register(metrics_sink if metrics_sink is not None else PrometheusTransitionSink())

    return bus
