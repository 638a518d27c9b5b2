"""Relay webhook transport — POSTs routing actions to a configurable URL.

The receiving service owns the actual channel connections. Two JSON
actions are posted::

    {"action": "send_message", "recipient": <Party>, "sender": <ChannelAccount>,
     "content": {"type": "text", "body": "..."}}

    {"action": "create_direct_conversation", "bot": <Party>, "owner": <Party>}

A 2xx response counts as success; ``send_message`` may answer with
``{"message_id": ...}`` and ``create_direct_conversation`` must answer with
``{"id": ...}``.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import TYPE_CHECKING, Any

from relaykit.models.activity import Activity
from relaykit.models.delivery import DeliveryReceipt, DirectConversation
from relaykit.models.party import ChannelAccount, Party
from relaykit.providers.base import MessageTransport
from relaykit.providers.http.config import HTTPTransportConfig

if TYPE_CHECKING:
    import httpx

    from relaykit.telemetry.base import TelemetryProvider

logger = logging.getLogger("relaykit.providers.http")

SIGNATURE_HEADER = "X-RelayKit-Signature"


class WebhookHTTPTransport(MessageTransport):
    """Transport that delegates delivery to a relay webhook over HTTP."""

    def __init__(
        self,
        config: HTTPTransportConfig,
        *,
        telemetry: TelemetryProvider | None = None,
    ) -> None:
        try:
            import httpx as _httpx
        except ImportError as exc:
            raise ImportError(
                "httpx is required for WebhookHTTPTransport. "
                "Install it with: pip install relaykit[httpx]"
            ) from exc
        from relaykit.telemetry.noop import NoopTelemetryProvider

        self._config = config
        self._httpx = _httpx
        self._client: httpx.AsyncClient = _httpx.AsyncClient(timeout=config.timeout)
        self._telemetry = telemetry or NoopTelemetryProvider()

    async def send_message(
        self,
        party: Party,
        message: Activity | str,
        *,
        sender: ChannelAccount | None = None,
    ) -> DeliveryReceipt | None:
        text = message.text if isinstance(message, Activity) else message
        if not text:
            logger.warning("Refusing to send an empty message to %s", party)
            return None

        payload: dict[str, Any] = {
            "action": "send_message",
            "recipient": party.model_dump(mode="json", by_alias=True, exclude_none=True),
            "sender": sender.model_dump(mode="json", by_alias=True) if sender else None,
            "content": {"type": "text", "body": text},
        }
        t0 = time.monotonic()
        data = await self._post(payload)
        self._telemetry.record_metric(
            "relaykit.transport.post_ms",
            (time.monotonic() - t0) * 1000,
            unit="ms",
            attributes={"transport": self.name, "action": "send_message"},
        )
        if data is None:
            return None
        return DeliveryReceipt(id=data.get("message_id"), metadata=data)

    async def create_direct_conversation(
        self, bot: Party, owner: Party
    ) -> DirectConversation | None:
        payload = {
            "action": "create_direct_conversation",
            "bot": bot.model_dump(mode="json", by_alias=True, exclude_none=True),
            "owner": owner.model_dump(mode="json", by_alias=True, exclude_none=True),
        }
        data = await self._post(payload)
        if data is None or not data.get("id"):
            return None
        return DirectConversation(id=str(data["id"]), raw=data)

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        body = json.dumps(payload)
        try:
            resp = await self._client.post(
                self._config.webhook_url,
                content=body,
                headers=self._build_headers(body),
            )
            resp.raise_for_status()
        except self._httpx.TimeoutException:
            logger.warning("Webhook %s timed out", payload["action"])
            return None
        except self._httpx.HTTPStatusError as exc:
            logger.warning(
                "Webhook %s failed with HTTP %d",
                payload["action"],
                exc.response.status_code,
            )
            return None
        except self._httpx.HTTPError as exc:
            logger.warning("Webhook %s failed: %s", payload["action"], exc)
            return None

        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _build_headers(self, body: str) -> dict[str, str]:
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            **self._config.headers,
        }
        if self._config.secret is not None:
            signature = hmac.new(
                self._config.secret.get_secret_value().encode(),
                body.encode(),
                hashlib.sha256,
            ).hexdigest()
            headers[SIGNATURE_HEADER] = signature
        return headers

    async def close(self) -> None:
        await self._client.aclose()
