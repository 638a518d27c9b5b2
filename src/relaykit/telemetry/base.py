"""Span and metric primitives shared by all telemetry providers."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class SpanKind(StrEnum):
    """What a span measures."""

    HANDLE_ACTIVITY = "router.handle_activity"
    BACK_CHANNEL = "router.back_channel"
    FORWARD = "router.forward"
    ENGAGEMENT = "router.engagement"
    BROADCAST = "router.broadcast"
    DELIVERY = "transport.delivery"
    CUSTOM = "custom"


class Attr:
    """Attribute keys used on routing spans and metrics."""

    TRANSPORT = "transport"
    CHANNEL_ID = "channel_id"
    CONVERSATION_ID = "conversation_id"
    DURATION_MS = "duration_ms"

    RESULT_TYPE = "routing.result_type"
    ROLE = "routing.role"
    INITIATE_IF_UNENGAGED = "routing.initiate_if_unengaged"

    DELIVERY_SUCCESS = "delivery.success"
    DELIVERY_ERROR = "delivery.error"
    DELIVERY_MESSAGE_ID = "delivery.message_id"
    DELIVERY_RECIPIENT_COUNT = "delivery.recipient_count"


@dataclass
class Span:
    """A timed routing operation, scoped to a channel conversation."""

    kind: SpanKind = SpanKind.CUSTOM
    name: str = ""
    channel_id: str | None = None
    conversation_id: str | None = None
    parent_id: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    ended_at: datetime | None = None
    status: str = "ok"
    error_message: str | None = None

    @property
    def duration_ms(self) -> float | None:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds() * 1000

    @property
    def failed(self) -> bool:
        return self.status == "error"

    def finish(
        self,
        status: str = "ok",
        error_message: str | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        self.ended_at = datetime.now(UTC)
        self.status = status
        self.error_message = error_message
        if attributes:
            self.attributes.update(attributes)


class TelemetryProvider(ABC):
    """Receives spans and metrics from the router and transports.

    The router uses ``NoopTelemetryProvider`` unless one is injected.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def start_span(
        self,
        kind: SpanKind,
        name: str,
        *,
        parent_id: str | None = None,
        attributes: dict[str, Any] | None = None,
        channel_id: str | None = None,
        conversation_id: str | None = None,
    ) -> str:
        """Open a span and return its ID."""
        ...

    @abstractmethod
    def end_span(
        self,
        span_id: str,
        *,
        status: str = "ok",
        error_message: str | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        """Close the span *span_id*. Unknown IDs are ignored."""
        ...

    @abstractmethod
    def set_attribute(self, span_id: str, key: str, value: Any) -> None: ...

    @abstractmethod
    def record_metric(
        self,
        name: str,
        value: float,
        *,
        unit: str = "",
        attributes: dict[str, Any] | None = None,
    ) -> None: ...

    def close(self) -> None:  # noqa: B027
        """Flush and release resources."""

    def reset(self) -> None:  # noqa: B027
        """Drop recorded state."""

    @contextmanager
    def span(self, kind: SpanKind, name: str, **kwargs: Any) -> Iterator[str]:
        """Run a block inside a span.

        The span ends with ``error`` status (and the exception text) when
        the block raises; the exception is re-raised.
        """
        span_id = self.start_span(kind, name, **kwargs)
        try:
            yield span_id
        except Exception as exc:
            self.end_span(span_id, status="error", error_message=str(exc))
            raise
        self.end_span(span_id)


class RecordingTelemetryProvider(TelemetryProvider):
    """Base for providers that track open spans in memory.

    Subclasses decide what to do with a span once it has finished by
    implementing :meth:`on_span_end`.
    """

    def __init__(self) -> None:
        self._open: dict[str, Span] = {}

    @property
    def open_spans(self) -> list[Span]:
        return list(self._open.values())

    def start_span(
        self,
        kind: SpanKind,
        name: str,
        *,
        parent_id: str | None = None,
        attributes: dict[str, Any] | None = None,
        channel_id: str | None = None,
        conversation_id: str | None = None,
    ) -> str:
        span = Span(
            kind=kind,
            name=name,
            channel_id=channel_id,
            conversation_id=conversation_id,
            parent_id=parent_id,
            attributes=dict(attributes or {}),
        )
        self._open[span.id] = span
        self.on_span_start(span)
        return span.id

    def end_span(
        self,
        span_id: str,
        *,
        status: str = "ok",
        error_message: str | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        span = self._open.pop(span_id, None)
        if span is None:
            return
        span.finish(status, error_message, attributes)
        self.on_span_end(span)

    def set_attribute(self, span_id: str, key: str, value: Any) -> None:
        if span_id in self._open:
            self._open[span_id].attributes[key] = value

    def on_span_start(self, span: Span) -> None:  # noqa: B027
        """Called right after *span* is opened."""

    @abstractmethod
    def on_span_end(self, span: Span) -> None:
        """Called once *span* has finished."""
        ...

    def reset(self) -> None:
        self._open.clear()
