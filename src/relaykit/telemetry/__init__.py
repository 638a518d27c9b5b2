"""Spans and metrics for routing and delivery."""

from relaykit.telemetry.base import (
    Attr,
    RecordingTelemetryProvider,
    Span,
    SpanKind,
    TelemetryProvider,
)
from relaykit.telemetry.console import ConsoleTelemetryProvider
from relaykit.telemetry.mock import MockTelemetryProvider
from relaykit.telemetry.noop import NoopTelemetryProvider

__all__ = [
    "Attr",
    "ConsoleTelemetryProvider",
    "MockTelemetryProvider",
    "NoopTelemetryProvider",
    "RecordingTelemetryProvider",
    "Span",
    "SpanKind",
    "TelemetryProvider",
]
