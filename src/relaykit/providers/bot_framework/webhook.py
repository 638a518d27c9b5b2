"""Bot Framework webhook parsing helpers."""

from __future__ import annotations

import re
from typing import Any

from pydantic import ValidationError

from relaykit.models.activity import Activity
from relaykit.models.enums import ActivityType

_AT_MENTION_RE = re.compile(r"<at>[^<]*</at>\s*")


def _is_group(payload: dict[str, Any]) -> bool:
    conversation = payload.get("conversation", {})
    return bool(conversation.get("isGroup", False)) or conversation.get("conversationType") in (
        "groupChat",
        "channel",
    )


def parse_activity(payload: dict[str, Any]) -> Activity | None:
    """Convert a Bot Framework Activity payload into an :class:`Activity`.

    ``<at>BotName</at>`` mention tags are stripped from group chat
    messages so the back-channel marker and forwarded text are clean.
    Returns ``None`` when the payload lacks a channel or conversation.
    """
    if not payload.get("channelId") or not payload.get("conversation", {}).get("id"):
        return None
    try:
        activity = Activity.model_validate(payload)
    except ValidationError:
        return None

    if activity.type == ActivityType.MESSAGE and activity.text and _is_group(payload):
        activity = activity.with_text(_AT_MENTION_RE.sub("", activity.text).strip())
    return activity


def _member_ids(payload: dict[str, Any], key: str) -> list[str]:
    if payload.get("type") != ActivityType.CONVERSATION_UPDATE:
        return []
    return [m["id"] for m in payload.get(key) or [] if m.get("id")]


def is_bot_added(payload: dict[str, Any], bot_id: str | None = None) -> bool:
    """Whether a ``conversationUpdate`` payload adds the bot to a conversation.

    The bot is identified by *bot_id*, or by the payload's recipient when
    omitted. Adding the bot is when its identity on that channel should
    be tracked.
    """
    target = bot_id or (payload.get("recipient") or {}).get("id")
    return bool(target) and target in _member_ids(payload, "membersAdded")


def members_removed(payload: dict[str, Any]) -> list[str]:
    """IDs of members removed by a ``conversationUpdate`` payload."""
    return _member_ids(payload, "membersRemoved")
