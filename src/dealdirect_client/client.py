"""Composition root: one API client, one auth session, one chat session."""
from __future__ import annotations

import logging
from types import TracebackType

import httpx

from dealdirect_client.config import Settings, settings as default_settings
from dealdirect_client.infrastructure.auth.socket_token import SocketTokenCache
from dealdirect_client.infrastructure.http.auth_api import AuthApi
from dealdirect_client.infrastructure.http.chat_api import ChatApi
from dealdirect_client.infrastructure.http.client import ApiClient
from dealdirect_client.infrastructure.http.content_api import ContentApi
from dealdirect_client.infrastructure.http.property_api import PropertyApi
from dealdirect_client.infrastructure.transport.socketio_notifier import SocketIONotifier
from dealdirect_client.services.auth_session import AuthSession
from dealdirect_client.services.chat_session import ChatSession, NotifierFactory

logger = logging.getLogger(__name__)


class DealDirectClient:
    def __init__(
        self,
        config: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        notifier_factory: NotifierFactory | None = None,
    ) -> None:
        cfg = config or default_settings
        self.http = ApiClient(cfg.api_url, timeout=cfg.HTTP_TIMEOUT_SECONDS, transport=transport)
        self.auth_api = AuthApi(self.http)
        self.properties = PropertyApi(self.http)
        self.content = ContentApi(self.http)
        self.chat_api = ChatApi(self.http)

        self.auth = AuthSession(self.auth_api)
        self.http.set_auth_error_handler(self.auth.handle_auth_error)

        def _default_notifier() -> SocketIONotifier:
            return SocketIONotifier(transports=cfg.CHAT_TRANSPORTS)

        self.chat = ChatSession(
            self.chat_api,
            notifier_factory or _default_notifier,
            socket_url=cfg.socket_base_url,
            headers_provider=self._socket_headers,
            token_cache=SocketTokenCache(
                self.chat_api.socket_token,
                leeway_seconds=cfg.CHAT_SOCKET_TOKEN_LEEWAY_SECONDS,
            ),
            unread_poll_seconds=cfg.CHAT_UNREAD_POLL_SECONDS,
            typing_debounce_seconds=cfg.CHAT_TYPING_DEBOUNCE_SECONDS,
            legacy_identify=cfg.CHAT_LEGACY_IDENTIFY,
        )
        self._unsubscribe_chat = self.auth.subscribe(self.chat.on_auth_changed)

    def _socket_headers(self) -> dict[str, str]:
        cookie = self.http.cookie_header()
        return {"Cookie": cookie} if cookie else {}

    async def start(self) -> bool:
        """Prime the CSRF cookie and restore any existing session."""
        await self.http.fetch_csrf_token()
        restored = await self.auth.check_auth()
        logger.info("Client started (authenticated=%s)", restored)
        return restored

    async def aclose(self) -> None:
        self._unsubscribe_chat()
        await self.chat.stop()
        await self.http.aclose()

    async def __aenter__(self) -> DealDirectClient:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
