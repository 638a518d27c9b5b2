"""Relay webhook transport."""

from relaykit.providers.http.config import HTTPTransportConfig
from relaykit.providers.http.transport import SIGNATURE_HEADER, WebhookHTTPTransport

__all__ = [
    "SIGNATURE_HEADER",
    "HTTPTransportConfig",
    "WebhookHTTPTransport",
]
