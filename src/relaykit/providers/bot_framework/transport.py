"""Message transport using the Microsoft Bot Framework SDK."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from relaykit.models.activity import Activity
from relaykit.models.delivery import DeliveryReceipt, DirectConversation
from relaykit.models.party import ChannelAccount, Party
from relaykit.providers.base import MessageTransport
from relaykit.providers.bot_framework.config import BotFrameworkConfig

if TYPE_CHECKING:
    from botbuilder.core import BotFrameworkAdapter, TurnContext

    from relaykit.telemetry.base import TelemetryProvider

logger = logging.getLogger("relaykit.providers.bot_framework")


class BotFrameworkTransport(MessageTransport):
    """Send messages and open 1:1 conversations through a ``BotFrameworkAdapter``.

    Every party carries its own service URL, so one transport can serve
    all channels the bot is registered on.
    """

    def __init__(
        self,
        config: BotFrameworkConfig,
        *,
        telemetry: TelemetryProvider | None = None,
    ) -> None:
        try:
            from botbuilder.core import BotFrameworkAdapter, BotFrameworkAdapterSettings
        except ImportError as exc:
            raise ImportError(
                "botbuilder-core is required for BotFrameworkTransport. "
                "Install it with: pip install relaykit[botframework]"
            ) from exc
        from relaykit.telemetry.noop import NoopTelemetryProvider

        self._config = config
        self._telemetry = telemetry or NoopTelemetryProvider()
        settings_kwargs: dict[str, Any] = {
            "app_id": config.app_id,
            "app_password": config.app_password.get_secret_value(),
        }
        if config.tenant_id != "common":
            settings_kwargs["channel_auth_tenant"] = config.tenant_id
        self._adapter: BotFrameworkAdapter = BotFrameworkAdapter(
            BotFrameworkAdapterSettings(**settings_kwargs)
        )

    @property
    def adapter(self) -> BotFrameworkAdapter:
        """The underlying Bot Framework adapter."""
        return self._adapter

    async def send_message(
        self,
        party: Party,
        message: Activity | str,
        *,
        sender: ChannelAccount | None = None,
    ) -> DeliveryReceipt | None:
        from botbuilder.schema import Activity as BotActivity
        from botbuilder.schema import ChannelAccount as BotChannelAccount

        text = message.text if isinstance(message, Activity) else message
        if not text:
            logger.warning("Refusing to send an empty message to %s", party)
            return None

        reference = self._conversation_reference(party, sender)
        outgoing = BotActivity(
            type="message",
            text=text,
            from_property=BotChannelAccount(id=sender.id, name=sender.name) if sender else None,
        )
        message_id: str | None = None

        async def _send_callback(turn_context: TurnContext) -> None:
            nonlocal message_id
            response = await turn_context.send_activity(outgoing)
            if response and response.id:
                message_id = response.id

        t0 = time.monotonic()
        try:
            await self._adapter.continue_conversation(
                reference,
                _send_callback,
                self._config.app_id,
            )
        except Exception:
            logger.exception("Failed to send message to %s", party)
            return None
        self._telemetry.record_metric(
            "relaykit.transport.send_ms",
            (time.monotonic() - t0) * 1000,
            unit="ms",
            attributes={"transport": self.name, "channel_id": party.channel_id},
        )
        return DeliveryReceipt(id=message_id)

    async def create_direct_conversation(
        self, bot: Party, owner: Party
    ) -> DirectConversation | None:
        from botbuilder.schema import (
            ChannelAccount as BotChannelAccount,
        )
        from botbuilder.schema import (
            ConversationParameters,
            ConversationReference,
        )

        if bot.channel_account is None or owner.channel_account is None:
            logger.warning("Cannot create a direct conversation without both accounts")
            return None

        params = ConversationParameters(
            is_group=False,
            bot=BotChannelAccount(id=bot.channel_account.id, name=bot.channel_account.name),
            members=[
                BotChannelAccount(id=owner.channel_account.id, name=owner.channel_account.name)
            ],
            tenant_id=self._config.tenant_id,
        )
        created: dict[str, Any] = {}

        async def _created_callback(turn_context: TurnContext) -> None:
            conversation = turn_context.activity.conversation
            if conversation is not None and conversation.id:
                created["id"] = conversation.id
                created["raw"] = conversation.serialize()

        try:
            await self._adapter.create_conversation(
                ConversationReference(service_url=owner.service_url, channel_id=owner.channel_id),
                _created_callback,
                params,
            )
        except Exception:
            logger.exception("Failed to create a direct conversation with %s", owner)
            return None

        if "id" not in created:
            return None
        return DirectConversation(id=str(created["id"]), raw=created.get("raw") or {})

    @staticmethod
    def _conversation_reference(party: Party, sender: ChannelAccount | None) -> Any:
        from botbuilder.schema import ChannelAccount as BotChannelAccount
        from botbuilder.schema import ConversationAccount, ConversationReference

        account = party.channel_account
        return ConversationReference(
            channel_id=party.channel_id,
            service_url=party.service_url,
            conversation=ConversationAccount(
                id=party.conversation_account.id,
                is_group=party.conversation_account.is_group,
            ),
            user=BotChannelAccount(id=account.id, name=account.name) if account else None,
            bot=BotChannelAccount(id=sender.id, name=sender.name) if sender else None,
        )

    async def close(self) -> None:
        self._adapter = None  # type: ignore[assignment]
