from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, SecretStr, field_validator

from .dispatcher import DEFAULT_API, DEFAULT_HEADERS
from .models import Network


class ProxySettings(BaseModel):
    enabled: bool = False
    url: str | None = None
    username: str | None = None
    password: SecretStr | None = None

    model_config = {"extra": "forbid"}


class PollingSettings(BaseModel):
    interval: float = Field(default=0.5, ge=0)
    max_attempts: int | None = Field(default=120, ge=1)
    timeout: float | None = Field(default=None, gt=0)

    model_config = {"extra": "forbid"}


class Credentials(BaseModel):
    api_key: SecretStr = SecretStr("")
    api_secret: SecretStr = SecretStr("")

    model_config = {"extra": "forbid"}

    @field_validator("api_key", "api_secret", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # YAML reads all-digit keys as numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value


class Settings(BaseModel):
    api: str = DEFAULT_API
    network: Network = Network.MAIN
    credentials: Credentials | None = None
    headers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)
    request_timeout: float | None = Field(default=30.0, gt=0)

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("api")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        # paths are appended with a leading slash
        return value.rstrip("/")

    def redacted(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        creds = data.get("credentials")
        if isinstance(creds, dict):
            for key in ("api_key", "api_secret"):
                if creds.get(key):
                    creds[key] = "***"
        proxy = data.get("proxy")
        if isinstance(proxy, dict) and proxy.get("password") is not None:
            proxy["password"] = "***"
        return data
