"""Router configuration."""

from __future__ import annotations

from pydantic import BaseModel, field_validator

DEFAULT_BACK_CHANNEL_ID = "backchannel"
DEFAULT_PARTY_PROPERTY_ID = "conversationId"


class RouterConfig(BaseModel):
    """Behaviour switches for :class:`~relaykit.core.router.MessageRouter`.

    Attributes:
        back_channel_id: Text marker that flags a back-channel message. Also
            the top-level key of the channel data payload.
        party_property_id: Key (under ``back_channel_id``) holding the
            serialized client party.
        add_client_name_to_message: Prefix client messages with the client's
            name when forwarding to the owner.
        add_owner_name_to_message: Prefix owner messages with the owner's
            name when forwarding to the client.
        reject_pending_request_if_no_aggregation_channel: Refuse new pending
            requests while no aggregation channel is registered.
        notify_aggregation_channels: Broadcast every new pending request to
            the aggregation channels.
    """

    back_channel_id: str = DEFAULT_BACK_CHANNEL_ID
    party_property_id: str = DEFAULT_PARTY_PROPERTY_ID
    add_client_name_to_message: bool = True
    add_owner_name_to_message: bool = False
    reject_pending_request_if_no_aggregation_channel: bool = False
    notify_aggregation_channels: bool = False

    @field_validator("back_channel_id", "party_property_id")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v
