"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Any

import pytest

from relaykit.core.router import MessageRouter
from relaykit.models.activity import Activity
from relaykit.models.party import ChannelAccount, ConversationAccount, Party
from relaykit.providers.mock import MockTransport
from relaykit.store.memory import InMemoryRoutingDataStore
from relaykit.telemetry.mock import MockTelemetryProvider

SERVICE_URL = "https://smba.trafficmanager.net/teams/"
BOT_ID = "bot-1"
BOT_NAME = "RelayBot"


@pytest.fixture
def store() -> InMemoryRoutingDataStore:
    return InMemoryRoutingDataStore()


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport(direct_conversation_id="direct-xyz")


@pytest.fixture
def telemetry() -> MockTelemetryProvider:
    return MockTelemetryProvider()


@pytest.fixture
def router(
    transport: MockTransport,
    store: InMemoryRoutingDataStore,
    telemetry: MockTelemetryProvider,
) -> MessageRouter:
    return MessageRouter(transport, store, telemetry=telemetry)


def make_party(
    account_id: str = "user-1",
    name: str | None = "Alice",
    channel_id: str = "msteams",
    conversation_id: str = "conv-1",
    service_url: str = SERVICE_URL,
) -> Party:
    return Party(
        service_url=service_url,
        channel_id=channel_id,
        channel_account=ChannelAccount(id=account_id, name=name),
        conversation_account=ConversationAccount(id=conversation_id),
    )


def make_bot(channel_id: str = "msteams", conversation_id: str = "conv-1") -> Party:
    return make_party(BOT_ID, BOT_NAME, channel_id=channel_id, conversation_id=conversation_id)


def make_activity(
    text: str | None = "hello",
    sender_id: str = "user-1",
    sender_name: str = "Alice",
    channel_id: str = "msteams",
    conversation_id: str = "conv-1",
    bot_id: str = BOT_ID,
    channel_data: dict[str, Any] | None = None,
) -> Activity:
    return Activity(
        text=text,
        channel_id=channel_id,
        service_url=SERVICE_URL,
        from_account=ChannelAccount(id=sender_id, name=sender_name),
        recipient=ChannelAccount(id=bot_id, name=BOT_NAME),
        conversation=ConversationAccount(id=conversation_id),
        channel_data=channel_data,
    )


def client_activity(text: str = "I need help") -> Activity:
    """A customer writing from the web chat."""
    return make_activity(
        text,
        sender_id="customer-1",
        sender_name="Carol",
        channel_id="webchat",
        conversation_id="web-conv-1",
    )


def owner_activity(text: str = "Hi, I'm here to help") -> Activity:
    """An agent writing from Teams."""
    return make_activity(
        text,
        sender_id="agent-1",
        sender_name="Dave",
        channel_id="msteams",
        conversation_id="agent-conv-1",
    )


def back_channel_activity(client: Party, text: str = "backchannel accept") -> Activity:
    return make_activity(
        text,
        sender_id="agent-1",
        sender_name="Dave",
        channel_id="msteams",
        conversation_id="agent-conv-1",
        channel_data={"backchannel": {"conversationId": client.to_json()}},
    )
