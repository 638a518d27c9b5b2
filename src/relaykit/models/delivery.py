"""Delivery and transport result models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DeliveryReceipt(BaseModel):
    """Returned by a transport when a message was accepted for delivery."""

    id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class DirectConversation(BaseModel):
    """Response of a direct (1:1) conversation creation.

    ``id`` is whatever the channel returned; it is not guaranteed to
    match the conversation ID seen on subsequent activities.
    """

    id: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)
