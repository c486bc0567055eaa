from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

LOCAL_API_BASE = "http://localhost:9000"


def _strip(url: str | None) -> str | None:
    if not url:
        return None
    return url.rstrip("/")


class Settings(BaseSettings):
    API_PUBLIC_BASE: str = LOCAL_API_BASE
    API_URL: str | None = None
    API_INTERNAL_BASE: str | None = None

    HTTP_TIMEOUT_SECONDS: float = 90.0

    SSR_TIMEOUT_MS: int = 8000
    SSR_DEFAULT_REVALIDATE: int = 120

    CHAT_UNREAD_POLL_SECONDS: float = 30.0
    CHAT_TYPING_DEBOUNCE_SECONDS: float = 2.0
    CHAT_SOCKET_TOKEN_LEEWAY_SECONDS: int = 15
    CHAT_LEGACY_IDENTIFY: bool = False
    CHAT_TRANSPORTS: list[str] = ["websocket", "polling"]

    REDIS_URL: str | None = None

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: Literal["debug", "info", "warning", "error"] = "info"

    @property
    def api_url(self) -> str:
        """REST root, always ending in ``/api``."""
        explicit = _strip(self.API_URL)
        if explicit:
            return explicit
        return f"{_strip(self.API_PUBLIC_BASE) or LOCAL_API_BASE}/api"

    @property
    def server_api_base(self) -> str:
        """Origin used by server-side page loaders (no ``/api`` suffix)."""
        return (
            _strip(self.API_INTERNAL_BASE)
            or _strip(self.API_PUBLIC_BASE)
            or LOCAL_API_BASE
        )

    @property
    def socket_base_url(self) -> str:
        return _strip(self.API_PUBLIC_BASE) or LOCAL_API_BASE

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
