"""RelayKit - async conversation routing for multi-channel chat relays."""

from relaykit._version import __version__
from relaykit.core.backchannel import BackChannelHandler
from relaykit.core.errors import BackChannelError, InvalidArgumentError, RelayKitError
from relaykit.core.router import MessageRouter
from relaykit.models.activity import Activity
from relaykit.models.config import RouterConfig
from relaykit.models.delivery import DeliveryReceipt, DirectConversation
from relaykit.models.enums import ActivityType, EngagementRole, RoutingResultType
from relaykit.models.party import (
    ChannelAccount,
    ConversationAccount,
    Engagement,
    Party,
    PendingRequest,
)
from relaykit.models.result import RoutingResult
from relaykit.providers.base import MessageTransport
from relaykit.providers.mock import MockTransport
from relaykit.store.base import RoutingDataStore
from relaykit.store.memory import InMemoryRoutingDataStore
from relaykit.telemetry import (
    ConsoleTelemetryProvider,
    MockTelemetryProvider,
    NoopTelemetryProvider,
    TelemetryProvider,
)

__all__ = [
    "Activity",
    "ActivityType",
    "BackChannelError",
    "BackChannelHandler",
    "ChannelAccount",
    "ConsoleTelemetryProvider",
    "ConversationAccount",
    "DeliveryReceipt",
    "DirectConversation",
    "Engagement",
    "EngagementRole",
    "InMemoryRoutingDataStore",
    "InvalidArgumentError",
    "MessageRouter",
    "MessageTransport",
    "MockTelemetryProvider",
    "MockTransport",
    "NoopTelemetryProvider",
    "Party",
    "PendingRequest",
    "RelayKitError",
    "RouterConfig",
    "RoutingDataStore",
    "RoutingResult",
    "RoutingResultType",
    "TelemetryProvider",
    "__version__",
]
