"""Relay webhook transport configuration."""

from __future__ import annotations

import ipaddress
from urllib.parse import urlparse

from pydantic import BaseModel, Field, SecretStr, field_validator

_LOCAL_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "0.0.0.0"})  # noqa: S104  # nosec B104


def _is_internal_address(hostname: str) -> bool:
    try:
        addr = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return addr.is_private or addr.is_reserved or addr.is_loopback or addr.is_link_local


class HTTPTransportConfig(BaseModel):
    """Where and how to reach the relay webhook.

    ``secret`` enables an HMAC-SHA256 signature of every request body.
    """

    webhook_url: str
    secret: SecretStr | None = None
    timeout: float = Field(default=30.0, gt=0)
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("webhook_url")
    @classmethod
    def _public_http_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError("webhook_url must be an absolute http(s) URL")
        hostname = parsed.hostname.lower()
        if hostname in _LOCAL_HOSTNAMES or _is_internal_address(hostname):
            raise ValueError(f"webhook_url must not target an internal host: {hostname}")
        return v
