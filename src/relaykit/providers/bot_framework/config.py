"""Bot Framework transport configuration."""

from __future__ import annotations

from pydantic import BaseModel, SecretStr, field_validator


class BotFrameworkConfig(BaseModel):
    """Microsoft Bot Framework credentials.

    Example::

        BotFrameworkConfig(app_id="...", app_password="...")
    """

    app_id: str
    app_password: SecretStr
    tenant_id: str = "common"

    @field_validator("app_id")
    @classmethod
    def _app_id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("app_id must not be blank")
        return v
