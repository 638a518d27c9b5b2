"""Tests for party, activity, result, and config models."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from relaykit.models.activity import Activity
from relaykit.models.config import RouterConfig
from relaykit.models.enums import EngagementRole, RoutingResultType
from relaykit.models.party import (
    ChannelAccount,
    ConversationAccount,
    Engagement,
    Party,
    PendingRequest,
)
from relaykit.models.result import RoutingResult
from tests.conftest import make_activity, make_party


class TestPartyIdentity:
    def test_equal_when_channel_account_and_conversation_match(self) -> None:
        assert make_party() == make_party()

    def test_service_url_not_part_of_identity(self) -> None:
        a = make_party(service_url="https://a.example.com/")
        b = make_party(service_url="https://b.example.com/")
        assert a == b
        assert hash(a) == hash(b)

    def test_display_name_not_part_of_identity(self) -> None:
        assert make_party(name="Alice") == make_party(name="Alice Smith")

    def test_different_conversation_is_different_party(self) -> None:
        assert make_party(conversation_id="c1") != make_party(conversation_id="c2")

    def test_different_channel_is_different_party(self) -> None:
        assert make_party(channel_id="slack") != make_party(channel_id="msteams")

    def test_channel_id_normalized(self) -> None:
        assert make_party(channel_id="MSTeams ") == make_party(channel_id="msteams")

    def test_account_and_conversation_ids_stripped(self) -> None:
        a = make_party(account_id=" user-1", conversation_id="conv-1 ")
        assert a == make_party()

    def test_set_membership(self) -> None:
        parties = {make_party(), make_party(name="Other name"), make_party(account_id="u2")}
        assert len(parties) == 2

    def test_not_equal_to_other_types(self) -> None:
        assert make_party() != ("msteams", "user-1", "conv-1")

    def test_immutable(self) -> None:
        party = make_party()
        with pytest.raises(ValidationError):
            party.channel_id = "slack"  # type: ignore[misc]

    def test_with_conversation_returns_new_party(self) -> None:
        party = make_party(conversation_id="c1")
        rebound = party.with_conversation("c2")
        assert rebound is not party
        assert rebound.conversation_account.id == "c2"
        assert party.conversation_account.id == "c1"
        assert rebound.channel_account == party.channel_account

    def test_matches_account_ignores_conversation(self) -> None:
        party = make_party(conversation_id="c1")
        assert party.matches_account("msteams", ChannelAccount(id="user-1"))
        assert not party.matches_account("slack", ChannelAccount(id="user-1"))
        assert not party.matches_account("msteams", ChannelAccount(id="user-2"))

    def test_matches_conversation_ignores_account(self) -> None:
        party = make_party(conversation_id="c1")
        assert party.matches_conversation("msteams", ConversationAccount(id="c1"))
        assert not party.matches_conversation("msteams", ConversationAccount(id="c2"))

    def test_party_without_account(self) -> None:
        party = Party(channel_id="msteams", conversation_account=ConversationAccount(id="c1"))
        assert party.key == ("msteams", "", "c1")
        assert party.display_name == ""
        assert not party.matches_account("msteams", ChannelAccount(id="x"))

    def test_display_name_falls_back_to_id(self) -> None:
        assert make_party(name=None).display_name == "user-1"


class TestPartyJson:
    def test_to_json_uses_camel_case(self) -> None:
        data = json.loads(make_party().to_json())
        assert data["channelId"] == "msteams"
        assert data["serviceUrl"].startswith("https://")
        assert data["channelAccount"]["id"] == "user-1"
        assert data["conversationAccount"]["id"] == "conv-1"

    def test_from_json_string(self) -> None:
        party = make_party()
        assert Party.from_json(party.to_json()) == party

    def test_from_mapping(self) -> None:
        party = Party.from_json(
            {
                "channelId": "webchat",
                "channelAccount": {"id": "customer-1", "name": "Carol"},
                "conversationAccount": {"id": "web-conv-1"},
            }
        )
        assert party.channel_id == "webchat"
        assert party.channel_account is not None
        assert party.channel_account.name == "Carol"
        assert party.service_url == ""

    def test_from_json_snake_case_accepted(self) -> None:
        party = Party.from_json(
            {"channel_id": "webchat", "conversation_account": {"id": "c1"}}
        )
        assert party.conversation_account.id == "c1"

    def test_from_json_malformed(self) -> None:
        with pytest.raises(ValidationError):
            Party.from_json("{not json")

    def test_from_json_missing_conversation(self) -> None:
        with pytest.raises(ValidationError):
            Party.from_json({"channelId": "webchat"})


class TestEngagement:
    def test_counterpart_of_either_side(self) -> None:
        owner = make_party("agent-1")
        client = make_party("customer-1", channel_id="webchat")
        engagement = Engagement(owner=owner, client=client)
        assert engagement.counterpart_of(owner) == client
        assert engagement.counterpart_of(client) == owner
        assert engagement.counterpart_of(make_party("stranger")) is None

    def test_role_of(self) -> None:
        owner = make_party("agent-1")
        client = make_party("customer-1")
        engagement = Engagement(owner=owner, client=client)
        assert engagement.role_of(owner) is EngagementRole.OWNER
        assert engagement.role_of(client) is EngagementRole.CLIENT
        assert engagement.party_in_role(EngagementRole.CLIENT) == client

    def test_role_other(self) -> None:
        assert EngagementRole.OWNER.other is EngagementRole.CLIENT
        assert EngagementRole.CLIENT.other is EngagementRole.OWNER

    def test_pending_request_age(self) -> None:
        request = PendingRequest(party=make_party())
        assert request.age.total_seconds() >= 0


class TestActivity:
    def test_sender_and_recipient_parties(self) -> None:
        activity = make_activity()
        sender = activity.sender_party()
        recipient = activity.recipient_party()
        assert sender == make_party()
        assert recipient.channel_account is not None
        assert recipient.channel_account.id == "bot-1"
        assert recipient.conversation_account.id == "conv-1"

    def test_parse_bot_framework_payload(self) -> None:
        activity = Activity.model_validate(
            {
                "type": "message",
                "id": "act-1",
                "text": "Hello",
                "channelId": "msteams",
                "serviceUrl": "https://smba.example.com/",
                "from": {"id": "user-1", "name": "Alice"},
                "recipient": {"id": "bot-1", "name": "RelayBot"},
                "conversation": {"id": "conv-1", "isGroup": False},
                "channelData": {"tenant": {"id": "t1"}},
                "unknownField": 1,
            }
        )
        assert activity.from_account is not None
        assert activity.from_account.name == "Alice"
        assert activity.channel_data == {"tenant": {"id": "t1"}}
        assert activity.sender_party() == make_party(service_url="https://smba.example.com/")

    def test_message_constructor(self) -> None:
        activity = Activity.message("hi", channel_id="webchat", conversation_id="c1")
        assert activity.type == "message"
        assert activity.conversation.id == "c1"

    def test_with_text(self) -> None:
        activity = make_activity("one")
        assert activity.with_text("two").text == "two"
        assert activity.text == "one"


class TestRoutingResult:
    def test_defaults_to_no_action(self) -> None:
        assert RoutingResult().type == RoutingResultType.NO_ACTION_TAKEN

    def test_is_success(self) -> None:
        assert RoutingResult(type=RoutingResultType.OK).is_success
        assert RoutingResult(type=RoutingResultType.ENGAGEMENT_ADDED).is_success
        assert not RoutingResult.error("boom").is_success
        assert not RoutingResult(type=RoutingResultType.FAILED_TO_FORWARD_MESSAGE).is_success

    def test_error_carries_message(self) -> None:
        result = RoutingResult.error("boom", client=make_party())
        assert result.type == RoutingResultType.ERROR
        assert result.error_message == "boom"
        assert result.client == make_party()


class TestRouterConfig:
    def test_defaults(self) -> None:
        cfg = RouterConfig()
        assert cfg.back_channel_id == "backchannel"
        assert cfg.party_property_id == "conversationId"
        assert cfg.add_client_name_to_message is True
        assert cfg.add_owner_name_to_message is False

    def test_blank_back_channel_id_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not be blank"):
            RouterConfig(back_channel_id="  ")
