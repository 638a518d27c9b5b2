"""Tests for the telemetry provider system."""

from __future__ import annotations

import logging

import pytest

from relaykit.telemetry import (
    Attr,
    ConsoleTelemetryProvider,
    MockTelemetryProvider,
    NoopTelemetryProvider,
    Span,
    SpanKind,
)


class TestSpanDataclass:
    def test_duration_none_until_finished(self) -> None:
        span = Span(kind=SpanKind.FORWARD, name="router.forward")
        assert span.duration_ms is None
        assert not span.failed
        assert len(span.id) == 16

    def test_finish(self) -> None:
        span = Span(kind=SpanKind.DELIVERY, name="send", attributes={"a": 1})
        span.finish("error", "boom", {"b": 2})
        assert span.failed
        assert span.error_message == "boom"
        assert span.attributes == {"a": 1, "b": 2}
        assert span.duration_ms is not None

    def test_kind_values(self) -> None:
        assert SpanKind.HANDLE_ACTIVITY == "router.handle_activity"
        assert SpanKind.DELIVERY == "transport.delivery"
        assert Attr.RESULT_TYPE == "routing.result_type"


class TestNoopProvider:
    def test_noop_does_nothing(self) -> None:
        provider = NoopTelemetryProvider()
        span_id = provider.start_span(SpanKind.FORWARD, "x", channel_id="msteams")
        provider.set_attribute(span_id, "k", "v")
        provider.end_span(span_id, status="error")
        provider.record_metric("m", 1.0, unit="ms")
        assert provider.name == "noop"

    def test_span_context_manager(self) -> None:
        provider = NoopTelemetryProvider()
        with provider.span(SpanKind.CUSTOM, "x") as span_id:
            assert span_id == ""


class TestMockProvider:
    def test_records_completed_spans(self) -> None:
        provider = MockTelemetryProvider()
        span_id = provider.start_span(
            SpanKind.DELIVERY,
            "transport.send_message",
            channel_id="msteams",
            attributes={Attr.TRANSPORT: "mock"},
        )
        assert len(provider.get_active_spans()) == 1

        provider.set_attribute(span_id, Attr.DELIVERY_MESSAGE_ID, "m1")
        provider.end_span(span_id, attributes={Attr.DELIVERY_SUCCESS: True})

        assert provider.get_active_spans() == []
        span = provider.get_spans(SpanKind.DELIVERY)[0]
        assert span.channel_id == "msteams"
        assert span.duration_ms is not None
        assert span.attributes == {
            Attr.TRANSPORT: "mock",
            Attr.DELIVERY_MESSAGE_ID: "m1",
            Attr.DELIVERY_SUCCESS: True,
        }

    def test_get_spans_by_channel(self) -> None:
        provider = MockTelemetryProvider()
        for channel in ("msteams", "webchat", "msteams"):
            with provider.span(SpanKind.FORWARD, "router.forward", channel_id=channel):
                pass
        assert len(provider.get_spans(SpanKind.FORWARD, channel_id="msteams")) == 2
        assert len(provider.get_spans(SpanKind.FORWARD, channel_id="slack")) == 0

    def test_end_unknown_span_ignored(self) -> None:
        provider = MockTelemetryProvider()
        provider.end_span("missing")
        provider.set_attribute("missing", "k", "v")
        assert provider.spans == []

    def test_span_context_manager_records_error(self) -> None:
        provider = MockTelemetryProvider()
        with pytest.raises(RuntimeError), provider.span(SpanKind.FORWARD, "router.forward"):
            raise RuntimeError("boom")
        span = provider.spans[0]
        assert span.status == "error"
        assert span.error_message == "boom"

    def test_metrics_and_reset(self) -> None:
        provider = MockTelemetryProvider()
        provider.record_metric("relaykit.delivery.send_ms", 12.5, unit="ms")
        provider.record_metric("relaykit.delivery.send_ms", 7.5, unit="ms")
        assert provider.metric_values("relaykit.delivery.send_ms") == [12.5, 7.5]
        assert provider.metrics[0] == {
            "name": "relaykit.delivery.send_ms",
            "value": 12.5,
            "unit": "ms",
            "attributes": {},
        }
        provider.start_span(SpanKind.CUSTOM, "open")
        provider.reset()
        assert provider.metrics == []
        assert provider.get_active_spans() == []


class TestConsoleProvider:
    def test_console_logs_finished_spans(self, caplog: pytest.LogCaptureFixture) -> None:
        provider = ConsoleTelemetryProvider()
        with caplog.at_level(logging.INFO, logger="relaykit.telemetry"):
            with provider.span(SpanKind.BROADCAST, "router.broadcast", channel_id="msteams"):
                pass
        assert "span router.broadcast took" in caplog.text
        assert "channel=msteams" in caplog.text
        assert "started" not in caplog.text

    def test_console_logs_span_start_when_enabled(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        provider = ConsoleTelemetryProvider(log_span_start=True)
        with caplog.at_level(logging.INFO, logger="relaykit.telemetry"):
            provider.start_span(SpanKind.FORWARD, "router.forward")
        assert "span router.forward started" in caplog.text

    def test_console_logs_errors(self, caplog: pytest.LogCaptureFixture) -> None:
        provider = ConsoleTelemetryProvider()
        with caplog.at_level(logging.INFO, logger="relaykit.telemetry"):
            span_id = provider.start_span(SpanKind.DELIVERY, "transport.send_message")
            provider.end_span(span_id, status="error", error_message="boom")
        assert "failed after" in caplog.text
        assert "boom" in caplog.text

    def test_console_logs_metrics(self, caplog: pytest.LogCaptureFixture) -> None:
        provider = ConsoleTelemetryProvider()
        with caplog.at_level(logging.INFO, logger="relaykit.telemetry"):
            provider.record_metric("relaykit.delivery.send_ms", 42.0, unit="ms")
        assert "metric relaykit.delivery.send_ms=42.00ms" in caplog.text

    def test_console_close_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        provider = ConsoleTelemetryProvider()
        provider.start_span(SpanKind.CUSTOM, "left-open")
        with caplog.at_level(logging.WARNING, logger="relaykit.telemetry"):
            provider.close()
        assert "1 open spans" in caplog.text
        assert provider.open_spans == []
