"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from entitycache.shared.telemetry.logging import get_logger, setup_logging
from entitycache.shared.telemetry.telemetry import TelemetryConfig, configure_telemetry
from entitycache.shared.telemetry.tracing import (
    TracedOperation,
    add_span_attributes,
    add_span_event,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "TelemetryConfig",
    "configure_telemetry",
    "add_span_attributes",
    "add_span_event",
    "TracedOperation",
]
