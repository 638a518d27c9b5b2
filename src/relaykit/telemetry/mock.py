"""In-memory telemetry provider for tests."""

from __future__ import annotations

from typing import Any

from relaykit.telemetry.base import RecordingTelemetryProvider, Span, SpanKind


class MockTelemetryProvider(RecordingTelemetryProvider):
    """Keeps every finished span and metric so tests can assert on them.

    Example::

        telemetry = MockTelemetryProvider()
        router = MessageRouter(transport, telemetry=telemetry)
        await router.handle_activity(activity)
        span = telemetry.get_spans(SpanKind.HANDLE_ACTIVITY)[0]
        assert span.attributes["routing.result_type"] == "ok"
    """

    def __init__(self) -> None:
        super().__init__()
        self.completed_spans: list[Span] = []
        self.metrics: list[dict[str, Any]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def spans(self) -> list[Span]:
        return self.completed_spans

    def on_span_end(self, span: Span) -> None:
        self.completed_spans.append(span)

    def get_spans(self, kind: SpanKind, *, channel_id: str | None = None) -> list[Span]:
        """Finished spans of *kind*, optionally limited to one channel."""
        return [
            s
            for s in self.completed_spans
            if s.kind == kind and (channel_id is None or s.channel_id == channel_id)
        ]

    def get_active_spans(self) -> list[Span]:
        return self.open_spans

    def record_metric(
        self,
        name: str,
        value: float,
        *,
        unit: str = "",
        attributes: dict[str, Any] | None = None,
    ) -> None:
        self.metrics.append(
            {"name": name, "value": value, "unit": unit, "attributes": dict(attributes or {})}
        )

    def metric_values(self, name: str) -> list[float]:
        return [m["value"] for m in self.metrics if m["name"] == name]

    def reset(self) -> None:
        super().reset()
        self.completed_spans.clear()
        self.metrics.clear()
