"""Inbound activity envelope."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from relaykit.models.enums import ActivityType
from relaykit.models.party import ChannelAccount, ConversationAccount, Party


class Activity(BaseModel):
    """An activity received from (or sent to) a channel.

    Field names follow the Bot Framework Activity schema; ``from`` is
    exposed as :attr:`from_account` since it is a Python keyword.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    type: str = ActivityType.MESSAGE
    id: str | None = None
    text: str | None = None
    channel_id: str
    service_url: str = ""
    from_account: ChannelAccount | None = Field(default=None, alias="from")
    recipient: ChannelAccount | None = None
    conversation: ConversationAccount
    channel_data: dict[str, Any] | None = None
    reply_to_id: str | None = None
    timestamp: datetime | None = None

    @classmethod
    def message(
        cls,
        text: str,
        *,
        channel_id: str,
        conversation_id: str,
        from_account: ChannelAccount | None = None,
        recipient: ChannelAccount | None = None,
        service_url: str = "",
        channel_data: dict[str, Any] | None = None,
    ) -> Activity:
        """Build a ``message`` activity."""
        return cls(
            type=ActivityType.MESSAGE,
            text=text,
            channel_id=channel_id,
            service_url=service_url,
            from_account=from_account,
            recipient=recipient,
            conversation=ConversationAccount(id=conversation_id),
            channel_data=channel_data,
        )

    def sender_party(self) -> Party:
        """The party who sent this activity, bound to its conversation."""
        return Party(
            service_url=self.service_url,
            channel_id=self.channel_id,
            channel_account=self.from_account,
            conversation_account=self.conversation,
        )

    def recipient_party(self) -> Party:
        """The party this activity was addressed to (normally the bot)."""
        return Party(
            service_url=self.service_url,
            channel_id=self.channel_id,
            channel_account=self.recipient,
            conversation_account=self.conversation,
        )

    def with_text(self, text: str) -> Activity:
        return self.model_copy(update={"text": text})
