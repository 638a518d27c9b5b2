"""Party identity, pending request, and engagement models."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from relaykit.models.enums import EngagementRole

PartyKey: TypeAlias = tuple[str, str, str]


def normalize_channel_id(channel_id: str | None) -> str:
    """Canonical form of a channel ID (``"MSTeams "`` -> ``"msteams"``)."""
    return (channel_id or "").strip().casefold()


def normalize_id(value: str | None) -> str:
    """Canonical form of an account or conversation ID."""
    return (value or "").strip()


class _WireModel(BaseModel):
    """Immutable model serialized with camelCase keys (Bot Framework style)."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ChannelAccount(_WireModel):
    """An account (user or bot) on a specific channel."""

    id: str
    name: str | None = None


class ConversationAccount(_WireModel):
    """The conversation a party sits in."""

    id: str
    name: str | None = None
    is_group: bool = False


class Party(_WireModel):
    """One addressable endpoint bound to a channel and a conversation.

    Two parties are the same when their channel ID, account ID and
    conversation ID match after normalization. The service URL and
    display names are not part of the identity.

    Parties are immutable: re-binding a party to another conversation
    yields a new instance (see :meth:`with_conversation`).
    """

    service_url: str = ""
    channel_id: str
    channel_account: ChannelAccount | None = None
    conversation_account: ConversationAccount

    @property
    def key(self) -> PartyKey:
        """Normalized identity tuple used for equality and lookups."""
        account_id = self.channel_account.id if self.channel_account is not None else None
        return (
            normalize_channel_id(self.channel_id),
            normalize_id(account_id),
            normalize_id(self.conversation_account.id),
        )

    @property
    def display_name(self) -> str:
        """Account name, falling back to the account ID."""
        if self.channel_account is None:
            return ""
        return self.channel_account.name or self.channel_account.id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Party):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.display_name or '?'}@{self.channel_id}/{self.conversation_account.id}"

    def matches_account(self, channel_id: str, channel_account: ChannelAccount | None) -> bool:
        """Same channel and account, ignoring the conversation binding."""
        if self.channel_account is None or channel_account is None:
            return False
        return normalize_channel_id(self.channel_id) == normalize_channel_id(
            channel_id
        ) and normalize_id(self.channel_account.id) == normalize_id(channel_account.id)

    def matches_conversation(
        self, channel_id: str, conversation_account: ConversationAccount | None
    ) -> bool:
        """Same channel and conversation, ignoring the account."""
        if conversation_account is None:
            return False
        return normalize_channel_id(self.channel_id) == normalize_channel_id(
            channel_id
        ) and normalize_id(self.conversation_account.id) == normalize_id(conversation_account.id)

    def with_conversation(self, conversation_id: str) -> Party:
        """Return a new party bound to *conversation_id*."""
        return self.model_copy(
            update={"conversation_account": ConversationAccount(id=conversation_id)}
        )

    def to_json(self) -> str:
        """Serialize to the JSON document carried by back-channel messages."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, data: str | bytes | Mapping[str, Any]) -> Party:
        """Parse a party from a JSON string or an already decoded mapping.

        Raises:
            pydantic.ValidationError: If the document is not a valid party.
        """
        if isinstance(data, str | bytes):
            return cls.model_validate_json(data)
        return cls.model_validate(dict(data))


class PendingRequest(BaseModel):
    """A party's outstanding ask to be connected to a counterpart."""

    model_config = ConfigDict(frozen=True)

    party: Party
    requested_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def age(self) -> timedelta:
        return datetime.now(UTC) - self.requested_at


class Engagement(BaseModel):
    """An active owner/client relay pairing."""

    model_config = ConfigDict(frozen=True)

    owner: Party
    client: Party
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def members(self) -> tuple[Party, Party]:
        return (self.owner, self.client)

    def party_in_role(self, role: EngagementRole) -> Party:
        return self.owner if role is EngagementRole.OWNER else self.client

    def role_of(self, party: Party) -> EngagementRole | None:
        if party == self.owner:
            return EngagementRole.OWNER
        if party == self.client:
            return EngagementRole.CLIENT
        return None

    def counterpart_of(self, party: Party) -> Party | None:
        role = self.role_of(party)
        if role is None:
            return None
        return self.party_in_role(role.other)
