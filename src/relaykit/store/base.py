"""Abstract base class for routing data storage."""

from __future__ import annotations

from abc import ABC, abstractmethod

from relaykit.models.enums import EngagementRole
from relaykit.models.party import (
    ChannelAccount,
    ConversationAccount,
    Engagement,
    Party,
    PendingRequest,
)
from relaykit.models.result import RoutingResult


class RoutingDataStore(ABC):
    """Party registry and engagement store behind a single interface.

    Implement this ABC to plug in any storage backend. The library ships
    with `InMemoryRoutingDataStore` for single-process deployments.

    Implementations must make every operation atomic with respect to the
    others: in particular :meth:`add_engagement_and_clear_pending_request`
    must never be observed half-applied by :meth:`is_engaged` or
    :meth:`get_engaged_counterpart`.
    """

    # Party registry

    @abstractmethod
    async def add_party(self, party: Party, is_user: bool = True) -> bool:
        """Track *party* as a user (or as a bot identity when ``is_user`` is False).

        Returns ``True`` if the party was added, ``False`` if an equal
        party was already tracked.
        """
        ...

    @abstractmethod
    async def remove_party(self, party: Party) -> list[RoutingResult]:
        """Forget *party* and end any pending request or engagement it is part of.

        Returns one result per side effect; empty if the party was unknown.
        """
        ...

    @abstractmethod
    async def get_user_parties(self) -> list[Party]:
        """All tracked user parties."""
        ...

    @abstractmethod
    async def get_bot_parties(self) -> list[Party]:
        """All tracked bot identities."""
        ...

    @abstractmethod
    async def get_aggregation_parties(self) -> list[Party]:
        """Parties designated to receive broadcast notifications."""
        ...

    @abstractmethod
    async def add_aggregation_party(self, party: Party) -> bool:
        """Designate *party* as an aggregation channel."""
        ...

    @abstractmethod
    async def remove_aggregation_party(self, party: Party) -> bool:
        """Remove *party* from the aggregation channels."""
        ...

    @abstractmethod
    async def is_associated_with_aggregation(self, party: Party) -> bool:
        """Whether *party* sits in the same channel and conversation as an aggregation channel."""
        ...

    @abstractmethod
    async def find_bot_party_by_channel_and_conversation(
        self, channel_id: str, conversation_account: ConversationAccount
    ) -> Party | None:
        """Bot identity bound to exactly this channel and conversation."""
        ...

    @abstractmethod
    async def find_engaged_party_by_channel(
        self, channel_id: str, channel_account: ChannelAccount
    ) -> Party | None:
        """Engaged party with this channel and account, in any conversation."""
        ...

    @abstractmethod
    async def find_party_by_channel_account(
        self, channel_id: str, channel_account: ChannelAccount
    ) -> Party | None:
        """Any tracked user party with this channel and account."""
        ...

    # Pending requests

    @abstractmethod
    async def add_pending_request(self, party: Party) -> RoutingResult:
        """Queue a connection request for *party*.

        Returns ``ENGAGEMENT_INITIATED`` on success, ``ERROR`` if an equal
        request is already pending or the party is engaged.
        """
        ...

    @abstractmethod
    async def remove_pending_request(self, party: Party) -> bool:
        """Drop the pending request of *party*. Returns ``True`` if one existed."""
        ...

    @abstractmethod
    async def get_pending_requests(self) -> list[PendingRequest]:
        """Pending requests, oldest first."""
        ...

    @abstractmethod
    async def is_pending(self, party: Party) -> bool:
        """Whether *party* has a pending request."""
        ...

    # Engagements

    @abstractmethod
    async def is_engaged(self, party: Party, role: EngagementRole) -> bool:
        """Whether *party* holds *role* in an engagement."""
        ...

    @abstractmethod
    async def get_engaged_counterpart(self, party: Party) -> Party | None:
        """The other member of the engagement *party* belongs to."""
        ...

    @abstractmethod
    async def get_engagements(self) -> list[Engagement]:
        """All active engagements."""
        ...

    @abstractmethod
    async def add_engagement_and_clear_pending_request(
        self, owner: Party, client: Party
    ) -> RoutingResult:
        """Atomically clear pending requests of both parties and engage them.

        Returns ``ENGAGEMENT_ADDED`` on success, ``ERROR`` if either party
        already belongs to an engagement.
        """
        ...

    @abstractmethod
    async def remove_engagement(self, party: Party, role: EngagementRole) -> list[RoutingResult]:
        """End the engagement in which *party* holds *role*."""
        ...

    @abstractmethod
    async def delete_all(self) -> None:
        """Drop all routing data."""
        ...
