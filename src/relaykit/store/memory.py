"""In-memory implementation of RoutingDataStore."""

from __future__ import annotations

import asyncio
import logging

from relaykit.core.errors import require_party
from relaykit.models.enums import EngagementRole, RoutingResultType
from relaykit.models.party import (
    ChannelAccount,
    ConversationAccount,
    Engagement,
    Party,
    PartyKey,
    PendingRequest,
)
from relaykit.models.result import RoutingResult
from relaykit.store.base import RoutingDataStore

logger = logging.getLogger("relaykit.store")


class InMemoryRoutingDataStore(RoutingDataStore):
    """Dict-based store guarded by a single asyncio lock.

    Suitable for single-process deployments. Every public method takes
    the lock, so compound transitions are never observed half-applied.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users: dict[PartyKey, Party] = {}
        self._bots: dict[PartyKey, Party] = {}
        self._aggregation: dict[PartyKey, Party] = {}
        self._pending: dict[PartyKey, PendingRequest] = {}
        # Engagements keyed by owner; members map either side to the owner key
        self._engagements: dict[PartyKey, Engagement] = {}
        self._members: dict[PartyKey, PartyKey] = {}

    # Party registry

    async def add_party(self, party: Party, is_user: bool = True) -> bool:
        require_party(party, "party")
        async with self._lock:
            parties = self._users if is_user else self._bots
            if party.key in parties:
                return False
            parties[party.key] = party
            logger.debug("Tracking %s party %s", "user" if is_user else "bot", party)
            return True

    async def remove_party(self, party: Party) -> list[RoutingResult]:
        require_party(party, "party")
        results: list[RoutingResult] = []
        async with self._lock:
            removed = False
            for parties in (self._users, self._bots, self._aggregation):
                if parties.pop(party.key, None) is not None:
                    removed = True
            if removed:
                results.append(RoutingResult(type=RoutingResultType.OK, client=party))

            if self._pending.pop(party.key, None) is not None:
                results.append(
                    RoutingResult(type=RoutingResultType.ENGAGEMENT_REJECTED, client=party)
                )

            owner_key = self._members.get(party.key)
            if owner_key is not None:
                results.append(self._close_engagement(owner_key))

        if results:
            logger.info(
                "Removed party %s",
                party,
                extra={"side_effects": [str(r.type) for r in results]},
            )
        return results

    async def get_user_parties(self) -> list[Party]:
        async with self._lock:
            return list(self._users.values())

    async def get_bot_parties(self) -> list[Party]:
        async with self._lock:
            return list(self._bots.values())

    async def get_aggregation_parties(self) -> list[Party]:
        async with self._lock:
            return list(self._aggregation.values())

    async def add_aggregation_party(self, party: Party) -> bool:
        require_party(party, "party")
        async with self._lock:
            if party.key in self._aggregation:
                return False
            self._aggregation[party.key] = party
            return True

    async def remove_aggregation_party(self, party: Party) -> bool:
        require_party(party, "party")
        async with self._lock:
            return self._aggregation.pop(party.key, None) is not None

    async def is_associated_with_aggregation(self, party: Party) -> bool:
        require_party(party, "party")
        async with self._lock:
            return any(
                agg.matches_conversation(party.channel_id, party.conversation_account)
                for agg in self._aggregation.values()
            )

    async def find_bot_party_by_channel_and_conversation(
        self, channel_id: str, conversation_account: ConversationAccount
    ) -> Party | None:
        async with self._lock:
            for bot in self._bots.values():
                if bot.matches_conversation(channel_id, conversation_account):
                    return bot
        return None

    async def find_engaged_party_by_channel(
        self, channel_id: str, channel_account: ChannelAccount
    ) -> Party | None:
        async with self._lock:
            for engagement in self._engagements.values():
                for member in engagement.members:
                    if member.matches_account(channel_id, channel_account):
                        return member
        return None

    async def find_party_by_channel_account(
        self, channel_id: str, channel_account: ChannelAccount
    ) -> Party | None:
        async with self._lock:
            for party in self._users.values():
                if party.matches_account(channel_id, channel_account):
                    return party
        return None

    # Pending requests

    async def add_pending_request(self, party: Party) -> RoutingResult:
        require_party(party, "party")
        async with self._lock:
            if party.key in self._pending:
                return RoutingResult.error(
                    f"A pending request for {party} already exists", client=party
                )
            if party.key in self._members:
                return RoutingResult.error(f"{party} is already engaged", client=party)
            self._pending[party.key] = PendingRequest(party=party)
        logger.info("Pending request added for %s", party)
        return RoutingResult(type=RoutingResultType.ENGAGEMENT_INITIATED, client=party)

    async def remove_pending_request(self, party: Party) -> bool:
        require_party(party, "party")
        async with self._lock:
            return self._pending.pop(party.key, None) is not None

    async def get_pending_requests(self) -> list[PendingRequest]:
        async with self._lock:
            return list(self._pending.values())

    async def is_pending(self, party: Party) -> bool:
        async with self._lock:
            return party.key in self._pending

    # Engagements

    async def is_engaged(self, party: Party, role: EngagementRole) -> bool:
        require_party(party, "party")
        async with self._lock:
            engagement = self._engagement_of(party)
            return engagement is not None and engagement.role_of(party) is role

    async def get_engaged_counterpart(self, party: Party) -> Party | None:
        require_party(party, "party")
        async with self._lock:
            engagement = self._engagement_of(party)
            return engagement.counterpart_of(party) if engagement is not None else None

    async def get_engagements(self) -> list[Engagement]:
        async with self._lock:
            return list(self._engagements.values())

    async def add_engagement_and_clear_pending_request(
        self, owner: Party, client: Party
    ) -> RoutingResult:
        require_party(owner, "owner")
        require_party(client, "client")
        if owner == client:
            return RoutingResult.error(
                f"{owner} cannot be engaged with itself", owner=owner, client=client
            )
        async with self._lock:
            for party in (owner, client):
                if party.key in self._members:
                    return RoutingResult.error(
                        f"{party} is already engaged", owner=owner, client=client
                    )
            self._pending.pop(client.key, None)
            self._pending.pop(owner.key, None)
            self._engagements[owner.key] = Engagement(owner=owner, client=client)
            self._members[owner.key] = owner.key
            self._members[client.key] = owner.key
        logger.info("Engagement added: owner=%s client=%s", owner, client)
        return RoutingResult(type=RoutingResultType.ENGAGEMENT_ADDED, owner=owner, client=client)

    async def remove_engagement(self, party: Party, role: EngagementRole) -> list[RoutingResult]:
        require_party(party, "party")
        async with self._lock:
            engagement = self._engagement_of(party)
            if engagement is None or engagement.role_of(party) is not role:
                return []
            return [self._close_engagement(engagement.owner.key)]

    async def delete_all(self) -> None:
        async with self._lock:
            self._users.clear()
            self._bots.clear()
            self._aggregation.clear()
            self._pending.clear()
            self._engagements.clear()
            self._members.clear()

    # Internal helpers (caller holds the lock)

    def _engagement_of(self, party: Party) -> Engagement | None:
        owner_key = self._members.get(party.key)
        if owner_key is None:
            return None
        return self._engagements.get(owner_key)

    def _close_engagement(self, owner_key: PartyKey) -> RoutingResult:
        engagement = self._engagements.pop(owner_key)
        for member in engagement.members:
            self._members.pop(member.key, None)
        logger.info(
            "Engagement removed: owner=%s client=%s", engagement.owner, engagement.client
        )
        return RoutingResult(
            type=RoutingResultType.ENGAGEMENT_REMOVED,
            owner=engagement.owner,
            client=engagement.client,
        )
