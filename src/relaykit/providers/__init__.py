"""Message transports."""

from relaykit.providers.base import MessageTransport
from relaykit.providers.mock import MockTransport

__all__ = [
    "MessageTransport",
    "MockTransport",
]
