"""Back-channel control messages.

An agent UI accepts a pending request without ordinary chat text by
sending a message whose text starts with the back-channel marker and
whose channel data carries the client party to engage with::

    {"backchannel": {"conversationId": "<Party JSON>"}}

The sender of that message becomes the engagement owner.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import ValidationError

from relaykit.core.errors import BackChannelError
from relaykit.models.activity import Activity
from relaykit.models.config import DEFAULT_BACK_CHANNEL_ID, DEFAULT_PARTY_PROPERTY_ID
from relaykit.models.party import Party
from relaykit.models.result import RoutingResult
from relaykit.store.base import RoutingDataStore

logger = logging.getLogger("relaykit.backchannel")


class BackChannelHandler:
    """Detects back-channel messages and turns them into engagements."""

    def __init__(
        self,
        store: RoutingDataStore,
        *,
        back_channel_id: str = DEFAULT_BACK_CHANNEL_ID,
        party_property_id: str = DEFAULT_PARTY_PROPERTY_ID,
    ) -> None:
        self._store = store
        self.back_channel_id = back_channel_id
        self.party_property_id = party_property_id

    def is_back_channel_message(self, activity: Activity) -> bool:
        return bool(activity.text) and activity.text.startswith(self.back_channel_id)  # type: ignore[union-attr]

    def extract_client_party(self, activity: Activity) -> Party:
        """Decode the client party carried in *activity*'s channel data.

        Raises:
            BackChannelError: If the channel data is missing or malformed.
        """
        channel_data = activity.channel_data
        if not channel_data:
            raise BackChannelError("No channel data")

        section = channel_data.get(self.back_channel_id)
        if not isinstance(section, Mapping):
            raise BackChannelError(f"Channel data has no {self.back_channel_id!r} object")

        document = section.get(self.party_property_id)
        if not document or not isinstance(document, str | bytes | Mapping):
            raise BackChannelError(
                f"Channel data has no party document under "
                f"{self.back_channel_id!r}.{self.party_property_id!r}"
            )

        try:
            return Party.from_json(document)
        except ValidationError as exc:
            raise BackChannelError(
                f"Malformed party document ({exc.error_count()} validation errors)"
            ) from exc

    async def handle(self, activity: Activity | None) -> RoutingResult:
        """Engage the sender with the party named in a back-channel message.

        Returns ``NO_ACTION_TAKEN`` when *activity* is not a back-channel
        message, ``ERROR`` when it is but cannot be honoured, or the result
        of the engagement otherwise. Never raises for bad input.
        """
        if activity is None or not activity.text:
            return RoutingResult.error(
                "The given activity is either None or the message is missing",
                activity=activity,
            )

        if not self.is_back_channel_message(activity):
            return RoutingResult.no_action(activity)

        if activity.from_account is None:
            return RoutingResult.error("Back-channel message has no sender", activity=activity)

        try:
            client = self.extract_client_party(activity)
        except BackChannelError as exc:
            logger.warning("Ignoring back-channel message: %s", exc)
            return RoutingResult.error(str(exc), activity=activity)

        owner = activity.sender_party()
        logger.info("Back-channel accept: owner=%s client=%s", owner, client)
        result = await self._store.add_engagement_and_clear_pending_request(owner, client)
        return result.model_copy(update={"activity": activity})
