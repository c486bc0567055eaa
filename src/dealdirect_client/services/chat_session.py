"""Chat session: REST store for truth, live channel for notifications.

The ``MessageStore`` is authoritative for conversations, messages and unread
counts. The ``LiveNotifier`` only tells us that something changed; every push
that matters is followed by a REST re-fetch. One live connection exists per
authenticated session and it is torn down whenever the user changes or signs
out.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Awaitable, Callable

from dealdirect_client.application.exceptions import AppError
from dealdirect_client.application.ports.notifier import LiveNotifier
from dealdirect_client.application.ports.store import MessageStore
from dealdirect_client.domain.entities.conversation import Conversation
from dealdirect_client.domain.entities.message import Message
from dealdirect_client.domain.entities.typing_indicator import TypingIndicator
from dealdirect_client.domain.entities.user import User
from dealdirect_client.domain.value_objects.enums import AuthState, ConnectionState, MessageType
from dealdirect_client.infrastructure.auth.socket_token import SocketTokenCache
from dealdirect_client.infrastructure.mappers.message import dict_to_message, message_to_dict
from dealdirect_client.infrastructure.transport import protocol as events
from dealdirect_client.services.typing_indicator import TypingDebouncer
from dealdirect_client.services.unread_poller import UnreadPoller

logger = logging.getLogger(__name__)

NotifierFactory = Callable[[], LiveNotifier]
HeadersProvider = Callable[[], dict[str, str]]


def _no_headers() -> dict[str, str]:
    return {}


class ChatSession:
    def __init__(
        self,
        store: MessageStore,
        notifier_factory: NotifierFactory,
        *,
        socket_url: str,
        headers_provider: HeadersProvider = _no_headers,
        token_cache: SocketTokenCache | None = None,
        unread_poll_seconds: float = 30.0,
        typing_debounce_seconds: float = 2.0,
        legacy_identify: bool = False,
    ) -> None:
        self._store = store
        self._notifier_factory = notifier_factory
        self._socket_url = socket_url
        self._headers_provider = headers_provider
        self._token_cache = token_cache or SocketTokenCache(store.socket_token)
        self._legacy_identify = legacy_identify

        self._notifier: LiveNotifier | None = None
        self._epoch = 0
        self._unread_floor: dict[str, int] = {}
        self._typing = TypingDebouncer(
            self._emit_typing, self._emit_stop_typing, delay=typing_debounce_seconds,
        )
        self._poller = UnreadPoller(self.fetch_unread_count, interval=unread_poll_seconds)

        self.user: User | None = None
        self.connection_state = ConnectionState.DISCONNECTED
        self.conversations: list[Conversation] = []
        self.current_conversation: Conversation | None = None
        self.messages: list[Message] = []
        self.unread_count = 0
        self.online_users: frozenset[str] = frozenset()
        self.typing: TypingIndicator | None = None
        self.loading = False
        self.is_chat_open = False

    @property
    def active(self) -> bool:
        return self.user is not None

    # -- lifecycle ----------------------------------------------------------

    async def on_auth_changed(self, state: AuthState, user: User | None) -> None:
        """Auth-session listener."""
        if state == AuthState.AUTHENTICATED and user is not None:
            if self.user is not None and self.user.id == user.id and self._notifier is not None:
                self.user = user
                return
            await self.start(user)
        else:
            await self.stop()

    async def start(self, user: User) -> None:
        if self._notifier is not None or self.user is not None:
            await self.stop()

        self.user = user
        epoch = self._epoch
        notifier = self._notifier_factory()
        self._notifier = notifier
        self._bind(notifier)
        self.connection_state = ConnectionState.CONNECTING

        try:
            await notifier.connect(self._socket_url, headers=self._headers_provider())
        except AppError as exc:
            logger.warning("Live channel unavailable, continuing with REST only: %s", exc.detail)
            if epoch == self._epoch:
                self.connection_state = ConnectionState.DISCONNECTED

        if epoch != self._epoch:
            return
        self._poller.start()
        await self.fetch_conversations()
        await self.fetch_unread_count()

    async def stop(self) -> None:
        """Tear down the live channel and drop all per-user state."""
        self._epoch += 1
        notifier, self._notifier = self._notifier, None
        self._typing.cancel()
        await self._poller.stop()
        if notifier is not None:
            try:
                await notifier.disconnect()
            except Exception:
                logger.warning("Live channel disconnect failed", exc_info=True)
        self._token_cache.clear()

        self.user = None
        self.connection_state = ConnectionState.DISCONNECTED
        self.conversations = []
        self.current_conversation = None
        self.messages = []
        self.unread_count = 0
        self.online_users = frozenset()
        self.typing = None
        self.loading = False
        self.is_chat_open = False
        self._unread_floor.clear()

    def _bind(self, notifier: LiveNotifier) -> None:
        handlers: dict[str, Callable[[Any], Awaitable[None]]] = {
            events.CONNECT: self._on_connect,
            events.DISCONNECT: self._on_disconnect,
            events.AUTHENTICATED: self._on_authenticated,
            events.AUTH_ERROR: self._on_auth_error,
            events.AUTH_REQUIRED: self._on_auth_required,
            events.USERS_ONLINE: self._on_users_online,
            events.RECEIVE_MESSAGE: self._on_receive_message,
            events.USER_TYPING: self._on_user_typing,
            events.USER_STOP_TYPING: self._on_user_stop_typing,
        }
        for event, handler in handlers.items():
            notifier.on(event, self._guarded(notifier, event, handler))

    def _guarded(
        self,
        notifier: LiveNotifier,
        event: str,
        handler: Callable[[Any], Awaitable[None]],
    ) -> Callable[..., Awaitable[None]]:
        async def dispatch(*args: Any) -> None:
            if notifier is not self._notifier:
                logger.debug("Ignoring %s from a closed live channel", event)
                return
            try:
                await handler(args[0] if args else None)
            except Exception:
                logger.exception("Live event handler failed: %s", event)

        return dispatch

    # -- live events --------------------------------------------------------

    async def _on_connect(self, _data: Any) -> None:
        epoch = self._epoch
        try:
            token = await self._token_cache.get()
        except AppError as exc:
            logger.warning("Failed to get socket auth token: %s", exc.detail)
            token = None
        if epoch != self._epoch:
            return

        if token:
            self.connection_state = ConnectionState.AWAITING_ACK
            await self._emit(events.AUTHENTICATE, {"token": token})
        else:
            self.connection_state = ConnectionState.UNTRUSTED
            if self._legacy_identify and self.user is not None:
                logger.warning("Identifying live channel without a token")
                await self._emit(events.USER_ONLINE, self.user.id)

        if self.current_conversation is not None:
            await self._emit(events.JOIN_CONVERSATION, self.current_conversation.id)

    async def _on_disconnect(self, reason: Any) -> None:
        logger.info("Live channel disconnected: %s", reason)
        self.connection_state = ConnectionState.CONNECTING

    async def _on_authenticated(self, data: Any) -> None:
        payload = events.AuthenticatedPayload.model_validate(events.as_dict(data))
        logger.info("Live channel authenticated for user %s", payload.user_id)
        self.connection_state = ConnectionState.LIVE

    async def _on_auth_error(self, data: Any) -> None:
        payload = events.AuthErrorPayload.model_validate(events.as_dict(data))
        logger.error("Live channel authentication error: %s %s", payload.code, payload.message)
        self._token_cache.clear()
        self.connection_state = ConnectionState.UNTRUSTED

    async def _on_auth_required(self, data: Any) -> None:
        logger.warning("Live channel auth required: %s", events.as_dict(data).get("message"))

    async def _on_users_online(self, data: Any) -> None:
        users = data if isinstance(data, list) else []
        self.online_users = frozenset(str(u) for u in users)

    async def _on_receive_message(self, data: Any) -> None:
        if not isinstance(data, dict):
            return
        epoch = self._epoch
        self._apply_inbound(dict_to_message(data))
        await self.fetch_conversations()
        if epoch == self._epoch:
            await self.fetch_unread_count()

    async def _on_user_typing(self, data: Any) -> None:
        payload = events.TypingPayload.model_validate(events.as_dict(data))
        if self.user is not None and payload.user_id == self.user.id:
            return
        self.typing = TypingIndicator(user_id=payload.user_id, user_name=payload.user_name)

    async def _on_user_stop_typing(self, _data: Any) -> None:
        self.typing = None

    def _apply_inbound(self, message: Message) -> None:
        current = self.current_conversation
        if current is not None and message.conversation_id == current.id:
            self._append(message)
            return
        if self.user is not None and message.sender_id == self.user.id:
            return
        if not message.conversation_id:
            return

        cid = message.conversation_id
        known = next((c.my_unread_count for c in self.conversations if c.id == cid), 0)
        self._unread_floor[cid] = max(self._unread_floor.get(cid, 0), known) + 1
        self.conversations = [self._with_floor(c) for c in self.conversations]
        self.unread_count += 1

    def _append(self, message: Message) -> None:
        if any(m.id == message.id for m in self.messages):
            return
        self.messages = [*self.messages, message]

    def _with_floor(self, conversation: Conversation) -> Conversation:
        floor = self._unread_floor.get(conversation.id)
        if floor is None or conversation.my_unread_count >= floor:
            return conversation
        return dataclasses.replace(conversation, my_unread_count=floor)

    # -- REST ---------------------------------------------------------------

    async def fetch_conversations(self) -> list[Conversation] | None:
        if not self.active:
            return None
        epoch = self._epoch
        try:
            conversations = await self._store.list_conversations()
        except AppError as exc:
            logger.error("Error fetching conversations: %s", exc.detail)
            return None
        if epoch != self._epoch:
            return None
        self.conversations = [self._with_floor(c) for c in conversations]
        return self.conversations

    async def fetch_unread_count(self) -> int | None:
        if not self.active:
            return None
        epoch = self._epoch
        try:
            count = await self._store.unread_count()
        except AppError as exc:
            logger.error("Error fetching unread count: %s", exc.detail)
            return None
        if epoch != self._epoch:
            return None
        self.unread_count = max(count, sum(self._unread_floor.values()))
        return self.unread_count

    async def fetch_messages(self, conversation_id: str) -> list[Message] | None:
        if not self.active:
            return None
        epoch = self._epoch
        self.loading = True
        try:
            messages = await self._store.list_messages(conversation_id)
        except AppError as exc:
            logger.error("Error fetching messages for %s: %s", conversation_id, exc.detail)
            return None
        finally:
            if epoch == self._epoch:
                self.loading = False
        if epoch != self._epoch:
            return None
        current = self.current_conversation
        if current is not None and current.id != conversation_id:
            logger.debug("Discarding messages for %s, %s is open", conversation_id, current.id)
            return messages
        self.messages = list(messages)
        return self.messages

    async def start_conversation(self, property_id: str, owner_id: str) -> Conversation | None:
        if not self.active:
            return None
        epoch = self._epoch
        try:
            conversation = await self._store.start_conversation(property_id, owner_id)
        except AppError as exc:
            logger.error("Error starting conversation: %s", exc.detail)
            return None
        if epoch != self._epoch:
            return None
        self.current_conversation = conversation
        await self.fetch_conversations()
        return conversation

    async def send_message(
        self,
        conversation_id: str,
        text: str,
        message_type: str | None = None,
    ) -> Message | None:
        """Persist over REST, then relay the stored message to the room."""
        if not self.active:
            return None
        if self._typing.active == conversation_id:
            await self._typing.flush()

        epoch = self._epoch
        try:
            message = await self._store.send_message(conversation_id, text, message_type)
        except AppError as exc:
            logger.error("Error sending message: %s", exc.detail)
            return None
        if epoch != self._epoch:
            return None

        current = self.current_conversation
        if current is None or current.id == conversation_id:
            self._append(message)
        await self._emit(
            events.SEND_MESSAGE,
            {"conversationId": conversation_id, "message": message_to_dict(message)},
        )
        await self.fetch_conversations()
        return message

    async def send_visit_request(
        self,
        conversation_id: str,
        property_title: str | None,
        date: str,
        time: str,
    ) -> Message | None:
        text = f'Site visit requested for "{property_title or "Property"}" on {date} at {time}.'
        return await self.send_message(conversation_id, text, MessageType.VISIT_REQUEST.value)

    async def accept_visit(self, conversation_id: str, request: Message) -> Message | None:
        if request.message_type != MessageType.VISIT_REQUEST:
            logger.warning("Message %s is not a visit request", request.id)
            return None
        text = f"Site visit request accepted. {request.text}"
        return await self.send_message(conversation_id, text, MessageType.VISIT_CONFIRMATION.value)

    async def report_message(self, message_id: str, reason: str) -> bool:
        if not self.active:
            return False
        try:
            return await self._store.report_message(message_id, reason)
        except AppError as exc:
            logger.error("Error reporting message %s: %s", message_id, exc.detail)
            return False

    # -- rooms and UI -------------------------------------------------------

    async def join_conversation(self, conversation_id: str) -> None:
        await self._emit(events.JOIN_CONVERSATION, conversation_id)

    async def leave_conversation(self, conversation_id: str) -> None:
        await self._emit(events.LEAVE_CONVERSATION, conversation_id)

    async def open_chat(self, conversation: Conversation | None = None) -> None:
        previous = self.current_conversation
        if previous is not None and (conversation is None or previous.id != conversation.id):
            if self._typing.active == previous.id:
                await self._typing.flush()
            await self.leave_conversation(previous.id)

        self.current_conversation = conversation
        self.is_chat_open = True
        if conversation is None:
            return

        self._unread_floor.pop(conversation.id, None)
        self.messages = []
        self.typing = None
        await self.join_conversation(conversation.id)
        await self.fetch_messages(conversation.id)
        await self.fetch_unread_count()

    async def close_chat(self) -> None:
        current = self.current_conversation
        if current is not None:
            if self._typing.active == current.id:
                await self._typing.flush()
            await self.leave_conversation(current.id)
        self.is_chat_open = False
        self.current_conversation = None
        self.messages = []
        self.typing = None

    def is_user_online(self, user_id: str) -> bool:
        return user_id in self.online_users

    async def notify_typing(self, conversation_id: str) -> None:
        """Call on every keystroke; emissions are debounced."""
        if not self.active:
            return
        await self._typing.keystroke(conversation_id)

    # -- emit helpers -------------------------------------------------------

    async def _emit(self, event: str, data: Any = None) -> None:
        notifier = self._notifier
        if notifier is None:
            return
        try:
            await notifier.emit(event, data)
        except Exception:
            logger.warning("Live emit %s failed", event, exc_info=True)

    async def _emit_typing(self, conversation_id: str) -> None:
        if self.user is None:
            return
        await self._emit(
            events.TYPING,
            {"conversationId": conversation_id, "userId": self.user.id, "userName": self.user.name},
        )

    async def _emit_stop_typing(self, conversation_id: str) -> None:
        if self.user is None:
            return
        await self._emit(events.STOP_TYPING, {"conversationId": conversation_id, "userId": self.user.id})
