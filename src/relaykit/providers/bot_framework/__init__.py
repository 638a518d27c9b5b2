"""Microsoft Bot Framework transport."""

from relaykit.providers.bot_framework.config import BotFrameworkConfig
from relaykit.providers.bot_framework.transport import BotFrameworkTransport
from relaykit.providers.bot_framework.webhook import (
    is_bot_added,
    members_removed,
    parse_activity,
)

__all__ = [
    "BotFrameworkConfig",
    "BotFrameworkTransport",
    "is_bot_added",
    "members_removed",
    "parse_activity",
]
