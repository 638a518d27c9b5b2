"""Telemetry provider that writes spans and metrics to the log."""

from __future__ import annotations

import logging
from typing import Any

from relaykit.telemetry.base import RecordingTelemetryProvider, Span

logger = logging.getLogger("relaykit.telemetry")


def _scope(span: Span) -> str:
    parts = []
    if span.channel_id:
        parts.append(f"channel={span.channel_id}")
    if span.conversation_id:
        parts.append(f"conversation={span.conversation_id}")
    return f" ({' '.join(parts)})" if parts else ""


def _attrs(attributes: dict[str, Any]) -> str:
    if not attributes:
        return ""
    return " " + " ".join(f"{k}={v}" for k, v in attributes.items())


class ConsoleTelemetryProvider(RecordingTelemetryProvider):
    """Logs one line per finished span and per metric on ``relaykit.telemetry``.

    Handy while wiring up a bot::

        logging.basicConfig(level=logging.INFO)
        router = MessageRouter(transport, telemetry=ConsoleTelemetryProvider())

    Pass ``log_span_start=True`` to also log when spans open.
    """

    def __init__(self, *, level: int = logging.INFO, log_span_start: bool = False) -> None:
        super().__init__()
        self._level = level
        self._log_span_start = log_span_start

    @property
    def name(self) -> str:
        return "console"

    def on_span_start(self, span: Span) -> None:
        if self._log_span_start:
            logger.log(self._level, "span %s started [%s]%s", span.name, span.id, _scope(span))

    def on_span_end(self, span: Span) -> None:
        if span.failed:
            logger.log(
                self._level,
                "span %s failed after %.1fms%s: %s",
                span.name,
                span.duration_ms or 0.0,
                _scope(span),
                span.error_message or "unknown error",
            )
            return
        logger.log(
            self._level,
            "span %s took %.1fms%s%s",
            span.name,
            span.duration_ms or 0.0,
            _scope(span),
            _attrs(span.attributes),
        )

    def record_metric(
        self,
        name: str,
        value: float,
        *,
        unit: str = "",
        attributes: dict[str, Any] | None = None,
    ) -> None:
        logger.log(self._level, "metric %s=%.2f%s%s", name, value, unit, _attrs(attributes or {}))

    def close(self) -> None:
        if self.open_spans:
            logger.warning("Console telemetry closed with %d open spans", len(self.open_spans))
        self.reset()
