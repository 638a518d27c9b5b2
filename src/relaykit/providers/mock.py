"""Mock transport for testing."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from relaykit.models.activity import Activity
from relaykit.models.delivery import DeliveryReceipt, DirectConversation
from relaykit.models.party import ChannelAccount, Party, PartyKey
from relaykit.providers.base import MessageTransport


class MockTransport(MessageTransport):
    """Records sends and conversation creations for verification in tests.

    Set ``fail_sends`` / ``fail_create`` to simulate a transport that
    reports failure, or ``raise_on_send`` to simulate one that raises.
    Individual recipients can be made unreachable with :meth:`fail_for`.
    """

    def __init__(self, *, direct_conversation_id: str | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self.created: list[dict[str, Party]] = []
        self.fail_sends = False
        self.fail_create = False
        self.raise_on_send: Exception | None = None
        self._direct_conversation_id = direct_conversation_id
        self._unreachable: set[PartyKey] = set()

    def fail_for(self, party: Party) -> None:
        self._unreachable.add(party.key)

    @property
    def texts(self) -> list[str]:
        """Text of every recorded message, in send order."""
        return [
            (m["message"].text or "") if isinstance(m["message"], Activity) else m["message"]
            for m in self.sent
        ]

    async def send_message(
        self,
        party: Party,
        message: Activity | str,
        *,
        sender: ChannelAccount | None = None,
    ) -> DeliveryReceipt | None:
        if self.raise_on_send is not None:
            raise self.raise_on_send
        if self.fail_sends or party.key in self._unreachable:
            return None
        self.sent.append({"party": party, "message": message, "sender": sender})
        return DeliveryReceipt(id=uuid4().hex)

    async def create_direct_conversation(
        self, bot: Party, owner: Party
    ) -> DirectConversation | None:
        if self.fail_create:
            return None
        self.created.append({"bot": bot, "owner": owner})
        conversation_id = self._direct_conversation_id or f"direct-{uuid4().hex[:8]}"
        return DirectConversation(id=conversation_id, raw={"id": conversation_id})
