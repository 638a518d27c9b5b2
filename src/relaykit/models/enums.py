"""All string enums for RelayKit."""

from __future__ import annotations

from enum import StrEnum, unique


@unique
class EngagementRole(StrEnum):
    OWNER = "owner"
    CLIENT = "client"

    @property
    def other(self) -> EngagementRole:
        """The opposite role in an engagement."""
        return EngagementRole.CLIENT if self is EngagementRole.OWNER else EngagementRole.OWNER


@unique
class RoutingResultType(StrEnum):
    NO_ACTION_TAKEN = "no_action_taken"
    OK = "ok"
    # Pending request created
    ENGAGEMENT_INITIATED = "engagement_initiated"
    ENGAGEMENT_ADDED = "engagement_added"
    ENGAGEMENT_REJECTED = "engagement_rejected"
    ENGAGEMENT_REMOVED = "engagement_removed"
    FAILED_TO_FORWARD_MESSAGE = "failed_to_forward_message"
    ERROR = "error"


@unique
class ActivityType(StrEnum):
    MESSAGE = "message"
    CONVERSATION_UPDATE = "conversationUpdate"
    MESSAGE_REACTION = "messageReaction"
    TYPING = "typing"
    EVENT = "event"
