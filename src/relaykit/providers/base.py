"""Abstract base class for message transports."""

from __future__ import annotations

from abc import ABC, abstractmethod

from relaykit.models.activity import Activity
from relaykit.models.delivery import DeliveryReceipt, DirectConversation
from relaykit.models.party import ChannelAccount, Party


class MessageTransport(ABC):
    """Delivers messages and creates direct conversations on a channel.

    Transports report delivery failures by returning ``None``; retry
    policy, if any, belongs to the transport.
    """

    @property
    def name(self) -> str:
        """Transport name."""
        return self.__class__.__name__

    @abstractmethod
    async def send_message(
        self,
        party: Party,
        message: Activity | str,
        *,
        sender: ChannelAccount | None = None,
    ) -> DeliveryReceipt | None:
        """Send *message* to *party*.

        Args:
            party: Recipient, bound to the conversation to post into.
            message: Activity to send, or plain text.
            sender: The bot account to send as. Bot identities are channel
                scoped, so this must be the bot identity on the
                recipient's channel.

        Returns:
            A receipt on success, ``None`` on failure.
        """
        ...

    @abstractmethod
    async def create_direct_conversation(
        self, bot: Party, owner: Party
    ) -> DirectConversation | None:
        """Open a 1:1 conversation between *bot* and *owner*.

        Returns:
            The creation response, or ``None`` on failure.
        """
        ...

    async def close(self) -> None:  # noqa: B027
        """Release resources. Override in subclasses that hold connections."""
