"""MessageRouter - decides what happens to every inbound activity."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from relaykit.core.backchannel import BackChannelHandler
from relaykit.core.errors import (
    BackChannelError,
    InvalidArgumentError,
    RelayKitError,
    require_party,
)
from relaykit.models.activity import Activity
from relaykit.models.config import RouterConfig
from relaykit.models.enums import EngagementRole, RoutingResultType
from relaykit.models.party import Party
from relaykit.models.result import RoutingResult
from relaykit.providers.base import MessageTransport
from relaykit.store.base import RoutingDataStore
from relaykit.store.memory import InMemoryRoutingDataStore
from relaykit.telemetry.base import Attr, SpanKind
from relaykit.telemetry.noop import NoopTelemetryProvider

if TYPE_CHECKING:
    from relaykit.telemetry.base import TelemetryProvider

logger = logging.getLogger("relaykit.router")

# Re-export so callers can import errors alongside the router
__all__ = [
    "BackChannelError",
    "InvalidArgumentError",
    "MessageRouter",
    "RelayKitError",
]


class MessageRouter:
    """Routes activities between engaged owners and clients.

    The router owns no state of its own: parties, pending requests and
    engagements live in the injected :class:`RoutingDataStore`, and
    delivery is delegated to the injected :class:`MessageTransport`.
    Transport calls are always made after the store lock is released.

    Expected outcomes are returned as :class:`RoutingResult` values.
    Only a missing required argument raises (``InvalidArgumentError``).
    """

    def __init__(
        self,
        transport: MessageTransport,
        store: RoutingDataStore | None = None,
        *,
        config: RouterConfig | None = None,
        telemetry: TelemetryProvider | None = None,
    ) -> None:
        self._transport = transport
        self._store = store or InMemoryRoutingDataStore()
        self._config = config or RouterConfig()
        self._telemetry = telemetry or NoopTelemetryProvider()
        self._back_channel = BackChannelHandler(
            self._store,
            back_channel_id=self._config.back_channel_id,
            party_property_id=self._config.party_property_id,
        )

    @property
    def store(self) -> RoutingDataStore:
        return self._store

    @property
    def transport(self) -> MessageTransport:
        return self._transport

    @property
    def config(self) -> RouterConfig:
        return self._config

    # -- Entry point ----------------------------------------------------------

    async def handle_activity(
        self,
        activity: Activity,
        initiate_engagement_if_not_engaged: bool = False,
        add_client_name_to_message: bool | None = None,
        add_owner_name_to_message: bool | None = None,
    ) -> RoutingResult:
        """Track the parties of *activity* and route it.

        Args:
            activity: The inbound activity.
            initiate_engagement_if_not_engaged: Create a pending request for
                the sender when it is not engaged.
            add_client_name_to_message: Prefix forwarded client messages with
                the client's name. ``None`` uses the router config.
            add_owner_name_to_message: Prefix forwarded owner messages with
                the owner's name. ``None`` uses the router config.
        """
        if activity is None:
            raise InvalidArgumentError("The activity cannot be None")

        if add_client_name_to_message is None:
            add_client_name_to_message = self._config.add_client_name_to_message
        if add_owner_name_to_message is None:
            add_owner_name_to_message = self._config.add_owner_name_to_message

        span_id = self._telemetry.start_span(
            SpanKind.HANDLE_ACTIVITY,
            "router.handle_activity",
            channel_id=activity.channel_id,
            conversation_id=activity.conversation.id,
            attributes={Attr.INITIATE_IF_UNENGAGED: initiate_engagement_if_not_engaged},
        )
        try:
            result = await self._handle_activity_inner(
                activity,
                initiate_engagement_if_not_engaged,
                add_client_name_to_message,
                add_owner_name_to_message,
            )
        except Exception as exc:
            self._telemetry.end_span(span_id, status="error", error_message=str(exc))
            raise
        self._telemetry.end_span(span_id, attributes={Attr.RESULT_TYPE: str(result.type)})
        return result

    async def _handle_activity_inner(
        self,
        activity: Activity,
        initiate_engagement_if_not_engaged: bool,
        add_client_name_to_message: bool,
        add_owner_name_to_message: bool,
    ) -> RoutingResult:
        await self.make_sure_parties_are_tracked(activity)

        # Agent UIs accept requests with back-channel messages
        back_channel_result = await self.handle_back_channel_message(activity)
        if back_channel_result.type == RoutingResultType.ENGAGEMENT_ADDED:
            return back_channel_result.model_copy(update={"type": RoutingResultType.OK})

        result = await self.handle_message(
            activity, add_client_name_to_message, add_owner_name_to_message
        )
        if result.type == RoutingResultType.NO_ACTION_TAKEN and initiate_engagement_if_not_engaged:
            result = await self.initiate_engagement(activity)
        return result

    # -- Party tracking -------------------------------------------------------

    async def make_sure_parties_are_tracked(self, activity: Activity) -> None:
        """Track the sender and the recipient (bot) of *activity*."""
        await self.make_sure_parties_are_tracked_for(
            activity.sender_party(), activity.recipient_party()
        )

    async def make_sure_parties_are_tracked_for(self, sender: Party, recipient: Party) -> None:
        """Track *recipient* as a bot identity and *sender* as a user.

        The sender is only stored as a user when it is not itself a known
        bot identity.
        """
        require_party(sender, "sender")
        require_party(recipient, "recipient")
        if recipient.channel_account is not None:
            await self._store.add_party(recipient, is_user=False)
        if sender.channel_account is None:
            return
        if sender not in await self._store.get_bot_parties():
            await self._store.add_party(sender)

    async def remove_party(self, party: Party) -> list[RoutingResult]:
        """Forget *party*, ending its pending request or engagement.

        Returns:
            One result per side effect. Empty if the party was unknown.
        """
        require_party(party, "party")
        return await self._store.remove_party(party)

    # -- Requests & engagements -----------------------------------------------

    async def initiate_engagement(self, activity: Activity) -> RoutingResult:
        """Create a pending request on behalf of the sender of *activity*.

        Does nothing (``ERROR``) if the sender already has one.
        """
        if activity is None:
            raise InvalidArgumentError("The activity cannot be None")
        sender = activity.sender_party()

        if self._config.reject_pending_request_if_no_aggregation_channel:
            if not await self._store.get_aggregation_parties():
                logger.info("Rejecting request of %s: no aggregation channel", sender)
                return RoutingResult.error(
                    "No aggregation channel available to receive the request",
                    client=sender,
                    activity=activity,
                )

        result = await self._store.add_pending_request(sender)
        result = result.model_copy(update={"activity": activity})

        if (
            result.type == RoutingResultType.ENGAGEMENT_INITIATED
            and self._config.notify_aggregation_channels
        ):
            await self.broadcast_to_aggregation_channels(
                f"New conversation request from {sender.display_name} ({sender.channel_id})"
            )
        return result

    async def reject_pending_request(
        self, party: Party, rejecter: Party | None = None
    ) -> RoutingResult:
        """Reject the pending request of *party*.

        Args:
            party: The party whose request to reject.
            rejecter: The party rejecting the request (optional).
        """
        require_party(party, "party")
        if await self._store.remove_pending_request(party):
            logger.info("Pending request of %s rejected", party)
            return RoutingResult(
                type=RoutingResultType.ENGAGEMENT_REJECTED, owner=rejecter, client=party
            )
        return RoutingResult.error(
            f'Failed to remove the pending request of user "{party.display_name}"',
            owner=rejecter,
            client=party,
        )

    async def add_engagement(self, owner: Party, client: Party) -> RoutingResult:
        """Establish a 1:1 relay between *owner* (e.g. an agent) and *client*.

        Opens a direct conversation with the owner through the transport,
        then commits the engagement with a new owner party bound to that
        conversation. The transport's creation response is attached to the
        result but its ID is not used for routing: it does not match the
        conversation ID seen on later activities on every channel, so the
        owner's existing conversation ID is reused instead.
        """
        require_party(owner, "owner")
        require_party(client, "client")

        bot = await self._store.find_bot_party_by_channel_and_conversation(
            owner.channel_id, owner.conversation_account
        )
        if bot is None:
            return RoutingResult.error(
                "Failed to find the bot instance", owner=owner, client=client
            )

        owner_engaged = owner.channel_account is not None and (
            await self._store.find_engaged_party_by_channel(
                owner.channel_id, owner.channel_account
            )
            is not None
        )
        if owner_engaged:
            return RoutingResult.error(f"{owner} is already engaged", owner=owner, client=client)
        if await self._store.get_engaged_counterpart(client) is not None:
            return RoutingResult.error(f"{client} is already engaged", owner=owner, client=client)

        try:
            direct_conversation = await self._transport.create_direct_conversation(bot, owner)
        except Exception:
            logger.exception(
                "Transport %s failed to create a direct conversation", self._transport.name
            )
            direct_conversation = None

        conversation_id = owner.conversation_account.id
        if direct_conversation is None or not conversation_id:
            return RoutingResult.error(
                "Failed to create a direct conversation", owner=owner, client=client
            )

        engaged_owner = owner.with_conversation(conversation_id)
        await self._store.add_party(engaged_owner)
        await self._store.add_party(bot.with_conversation(conversation_id), is_user=False)

        result = await self._store.add_engagement_and_clear_pending_request(engaged_owner, client)
        return result.model_copy(update={"direct_conversation": direct_conversation})

    async def end_engagement(self, owner: Party) -> list[RoutingResult]:
        """End the engagement owned by *owner*.

        *owner* may be bound to a different conversation than the engaged
        instance; the engaged instance is looked up by channel and account.
        """
        require_party(owner, "owner")
        results: list[RoutingResult] = []

        engaged = None
        if owner.channel_account is not None:
            engaged = await self._store.find_engaged_party_by_channel(
                owner.channel_id, owner.channel_account
            )
        if engaged is not None and await self._store.is_engaged(engaged, EngagementRole.OWNER):
            results.extend(await self._store.remove_engagement(engaged, EngagementRole.OWNER))

        if not results:
            results.append(RoutingResult.error("No conversation to close found", owner=owner))
        return results

    # -- Messages -------------------------------------------------------------

    async def handle_back_channel_message(self, activity: Activity) -> RoutingResult:
        """Accept a pending request carried by a back-channel message.

        Returns ``ENGAGEMENT_ADDED`` on success, ``NO_ACTION_TAKEN`` when
        *activity* is not a back-channel message.
        """
        with self._telemetry.span(SpanKind.BACK_CHANNEL, "router.back_channel") as span_id:
            result = await self._back_channel.handle(activity)
            self._telemetry.set_attribute(span_id, Attr.RESULT_TYPE, str(result.type))
        return result

    async def handle_message(
        self,
        activity: Activity,
        add_client_name_to_message: bool = True,
        add_owner_name_to_message: bool = False,
    ) -> RoutingResult:
        """Forward *activity* to the counterpart of its engaged sender.

        Returns ``NO_ACTION_TAKEN`` if the sender is not engaged. A failed
        delivery yields ``FAILED_TO_FORWARD_MESSAGE`` and leaves the
        engagement in place.
        """
        if activity is None:
            raise InvalidArgumentError("The activity cannot be None")
        sender = activity.sender_party()

        for role in EngagementRole:
            if await self._store.is_engaged(sender, role):
                add_name = (
                    add_owner_name_to_message
                    if role is EngagementRole.OWNER
                    else add_client_name_to_message
                )
                return await self._forward(activity, sender, role, add_name)

        return RoutingResult.no_action(activity)

    async def _forward(
        self, activity: Activity, sender: Party, role: EngagementRole, add_name: bool
    ) -> RoutingResult:
        counterpart = await self._store.get_engaged_counterpart(sender)
        parties = {role.value: sender, role.other.value: counterpart}
        result = RoutingResult(activity=activity, **parties)

        if counterpart is None:
            return result.model_copy(
                update={
                    "type": RoutingResultType.FAILED_TO_FORWARD_MESSAGE,
                    "error_message": "Failed to find the party to forward the message to",
                }
            )

        text = activity.text or ""
        message = f"{sender.display_name}: {text}" if add_name else text

        with self._telemetry.span(
            SpanKind.FORWARD,
            "router.forward",
            channel_id=counterpart.channel_id,
            attributes={Attr.ROLE: str(role)},
        ):
            delivery = await self.send_message_to_party(counterpart, message)

        if delivery.type != RoutingResultType.OK:
            logger.warning("Failed to forward message from %s to %s", sender, counterpart)
            return result.model_copy(
                update={
                    "type": RoutingResultType.FAILED_TO_FORWARD_MESSAGE,
                    "error_message": f"Failed to forward the message to user {counterpart}",
                    "recipient": counterpart,
                }
            )
        return result.model_copy(
            update={
                "type": RoutingResultType.OK,
                "recipient": counterpart,
                "receipt": delivery.receipt,
            }
        )

    async def send_message_to_party(self, party: Party, message: Activity | str) -> RoutingResult:
        """Send *message* to *party* as the bot identity of the party's channel.

        The bot's account differs between channels (and sometimes between
        conversations), so the identity registered for the recipient's
        channel and conversation is used as the sender.
        """
        require_party(party, "party")
        bot = await self._store.find_bot_party_by_channel_and_conversation(
            party.channel_id, party.conversation_account
        )
        if bot is None:
            return RoutingResult(
                type=RoutingResultType.FAILED_TO_FORWARD_MESSAGE,
                recipient=party,
                error_message=f"No bot identity found for channel {party.channel_id}",
            )

        span_id = self._telemetry.start_span(
            SpanKind.DELIVERY,
            "transport.send_message",
            channel_id=party.channel_id,
            conversation_id=party.conversation_account.id,
            attributes={Attr.TRANSPORT: self._transport.name},
        )
        t0 = time.monotonic()
        error: str | None = None
        try:
            receipt = await self._transport.send_message(
                party, message, sender=bot.channel_account
            )
        except Exception as exc:
            logger.exception("Transport %s failed to deliver to %s", self._transport.name, party)
            receipt = None
            error = str(exc)
        self._telemetry.record_metric(
            "relaykit.delivery.send_ms",
            (time.monotonic() - t0) * 1000,
            unit="ms",
            attributes={Attr.TRANSPORT: self._transport.name},
        )
        self._telemetry.end_span(
            span_id,
            status="ok" if receipt is not None else "error",
            error_message=error,
            attributes={Attr.DELIVERY_SUCCESS: receipt is not None},
        )

        if receipt is None:
            return RoutingResult(
                type=RoutingResultType.FAILED_TO_FORWARD_MESSAGE,
                recipient=party,
                error_message=error or f"Transport failed to deliver to {party}",
            )
        return RoutingResult(type=RoutingResultType.OK, recipient=party, receipt=receipt)

    async def broadcast_to_aggregation_channels(
        self, message: Activity | str
    ) -> list[RoutingResult]:
        """Send *message* to every aggregation channel, one result each."""
        aggregation_parties = await self._store.get_aggregation_parties()
        results: list[RoutingResult] = []
        with self._telemetry.span(
            SpanKind.BROADCAST,
            "router.broadcast",
            attributes={Attr.DELIVERY_RECIPIENT_COUNT: len(aggregation_parties)},
        ):
            for party in aggregation_parties:
                results.append(await self.send_message_to_party(party, message))
        return results
