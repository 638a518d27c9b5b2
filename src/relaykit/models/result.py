"""Routing result model."""

from __future__ import annotations

from pydantic import BaseModel

from relaykit.models.activity import Activity
from relaykit.models.delivery import DeliveryReceipt, DirectConversation
from relaykit.models.enums import RoutingResultType
from relaykit.models.party import Party

_FAILURE_TYPES = frozenset(
    {RoutingResultType.ERROR, RoutingResultType.FAILED_TO_FORWARD_MESSAGE}
)


class RoutingResult(BaseModel):
    """Outcome of a routing operation.

    Carries enough context (both parties, the originating activity, the
    error text) for the caller to react without re-deriving state.
    Delivery results also name the ``recipient`` and carry the transport
    ``receipt``.
    """

    type: RoutingResultType = RoutingResultType.NO_ACTION_TAKEN
    owner: Party | None = None
    client: Party | None = None
    activity: Activity | None = None
    error_message: str | None = None
    direct_conversation: DirectConversation | None = None
    recipient: Party | None = None
    receipt: DeliveryReceipt | None = None

    @property
    def is_success(self) -> bool:
        return self.type not in _FAILURE_TYPES

    @classmethod
    def no_action(cls, activity: Activity | None = None) -> RoutingResult:
        return cls(type=RoutingResultType.NO_ACTION_TAKEN, activity=activity)

    @classmethod
    def error(
        cls,
        message: str,
        *,
        owner: Party | None = None,
        client: Party | None = None,
        activity: Activity | None = None,
    ) -> RoutingResult:
        return cls(
            type=RoutingResultType.ERROR,
            error_message=message,
            owner=owner,
            client=client,
            activity=activity,
        )
