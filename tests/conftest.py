"""Shared test fixtures."""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import pytest

from dealdirect_client.application.exceptions import AppError, NetworkError
from dealdirect_client.domain.entities.conversation import Conversation
from dealdirect_client.domain.entities.message import Message
from dealdirect_client.domain.entities.user import User
from dealdirect_client.domain.value_objects.enums import MessageType, UserRole

_ids = itertools.count(1)


def make_user(
    *,
    user_id: str = "u-buyer",
    name: str = "Asha",
    role: str = UserRole.USER,
    is_verified: bool = True,
) -> User:
    return User(
        id=user_id,
        name=name,
        email=f"{user_id}@example.com",
        role=role,
        is_verified=is_verified,
    )


def make_user_dict(**overrides: Any) -> dict[str, Any]:
    data = {
        "_id": "u-buyer",
        "name": "Asha",
        "email": "asha@example.com",
        "role": "user",
        "isVerified": True,
    }
    data.update(overrides)
    return data


def make_conversation(
    *,
    conversation_id: str = "c-1",
    unread: int = 0,
    participants: tuple[str, ...] = ("u-buyer", "u-owner"),
    property_title: str | None = "2BHK in Indiranagar",
) -> Conversation:
    return Conversation(
        id=conversation_id,
        participants=participants,
        property_id="p-1",
        property_title=property_title,
        other_participant_name="Ravi",
        last_message=None,
        my_unread_count=unread,
        updated_at=datetime.now(timezone.utc),
    )


def make_message(
    *,
    message_id: str | None = None,
    conversation_id: str = "c-1",
    sender_id: str = "u-owner",
    sender_name: str = "Ravi",
    text: str = "hello",
    message_type: str = MessageType.TEXT,
) -> Message:
    return Message(
        id=message_id or f"m-{next(_ids)}",
        conversation_id=conversation_id,
        sender_id=sender_id,
        sender_name=sender_name,
        text=text,
        message_type=message_type,
        created_at=datetime.now(timezone.utc),
    )


def make_message_dict(**overrides: Any) -> dict[str, Any]:
    data = {
        "_id": f"m-{next(_ids)}",
        "conversation": "c-1",
        "sender": {"_id": "u-owner", "name": "Ravi"},
        "text": "hello",
        "messageType": "text",
        "createdAt": "2024-05-01T10:00:00.000Z",
    }
    data.update(overrides)
    return data


# -- chat fakes -------------------------------------------------------------


@dataclass
class FakeMessageStore:
    """In-memory REST store; ``fail`` names operations that raise."""

    user_id: str = "u-buyer"
    token: str | None = "sock-token"
    conversations: list[Conversation] = field(default_factory=list)
    messages: dict[str, list[Message]] = field(default_factory=dict)
    unread: int = 0
    fail: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)
    reported: list[tuple[str, str]] = field(default_factory=list)

    def _enter(self, op: str) -> None:
        self.calls.append(op)
        if op in self.fail:
            raise NetworkError(f"{op} unavailable")

    async def socket_token(self) -> str | None:
        self._enter("socket_token")
        return self.token

    async def list_conversations(self) -> list[Conversation]:
        self._enter("list_conversations")
        return list(self.conversations)

    async def unread_count(self) -> int:
        self._enter("unread_count")
        return self.unread

    async def list_messages(self, conversation_id: str) -> list[Message]:
        self._enter("list_messages")
        return list(self.messages.get(conversation_id, []))

    async def start_conversation(self, property_id: str, owner_id: str) -> Conversation:
        self._enter("start_conversation")
        conv = make_conversation(conversation_id=f"c-{property_id}", participants=(self.user_id, owner_id))
        self.conversations.append(conv)
        return conv

    async def send_message(
        self,
        conversation_id: str,
        text: str,
        message_type: str | None = None,
    ) -> Message:
        self._enter("send_message")
        msg = make_message(
            message_id=f"srv-{next(_ids)}",
            conversation_id=conversation_id,
            sender_id=self.user_id,
            sender_name="Me",
            text=text,
            message_type=message_type or MessageType.TEXT,
        )
        self.messages.setdefault(conversation_id, []).append(msg)
        return msg

    async def report_message(self, message_id: str, reason: str) -> bool:
        self._enter("report_message")
        self.reported.append((message_id, reason))
        return True


class FakeNotifier:
    """LiveNotifier double. With a relay attached it behaves like a shared server."""

    def __init__(self, relay: FakeRelay | None = None, *, fail_connect: bool = False) -> None:
        self.relay = relay
        self.fail_connect = fail_connect
        self.handlers: dict[str, Any] = {}
        self.emitted: list[tuple[str, Any]] = []
        self.connected = False
        self.disconnects = 0

    def on(self, event: str, handler: Any) -> None:
        self.handlers[event] = handler

    async def connect(self, url: str, *, headers: dict[str, str] | None = None) -> None:
        if self.fail_connect:
            raise NetworkError("connection refused")
        self.connected = True
        await self.fire("connect")

    async def recover(self) -> None:
        """Transport retry finally succeeds after a failed first connect."""
        self.fail_connect = False
        self.connected = True
        await self.fire("connect")

    async def emit(self, event: str, data: Any = None) -> None:
        if not self.connected:
            return
        self.emitted.append((event, data))
        if self.relay is not None:
            await self.relay.handle(self, event, data)

    async def disconnect(self) -> None:
        self.connected = False
        self.disconnects += 1

    async def fire(self, event: str, *args: Any) -> None:
        handler = self.handlers.get(event)
        if handler is not None:
            await handler(*args)

    def events(self, name: str) -> list[Any]:
        return [data for event, data in self.emitted if event == name]


class FakeRelay:
    """Minimal chat server: token auth, rooms, and message relay."""

    def __init__(self, valid_tokens: dict[str, str]) -> None:
        self.valid_tokens = valid_tokens
        self.rooms: dict[str, set[FakeNotifier]] = {}

    async def handle(self, sender: FakeNotifier, event: str, data: Any) -> None:
        if event == "authenticate":
            user_id = self.valid_tokens.get((data or {}).get("token"))
            if user_id is None:
                await sender.fire("auth_error", {"code": "INVALID_TOKEN", "message": "bad token"})
            else:
                await sender.fire("authenticated", {"userId": user_id})
        elif event == "join_conversation":
            self.rooms.setdefault(data, set()).add(sender)
        elif event == "leave_conversation":
            self.rooms.get(data, set()).discard(sender)
        elif event == "send_message":
            for peer in list(self.rooms.get(data["conversationId"], set())):
                if peer is not sender and peer.connected:
                    await peer.fire("receive_message", data["message"])
        elif event in {"typing", "stop_typing"}:
            name = "user_typing" if event == "typing" else "user_stop_typing"
            for peer in list(self.rooms.get(data["conversationId"], set())):
                if peer is not sender and peer.connected:
                    await peer.fire(name, data)


# -- auth fakes -------------------------------------------------------------


class FakeAuthApi:
    """Scripted AuthApi. Each entry is a response dict or an exception to raise."""

    def __init__(self, **responses: Any) -> None:
        self.responses: dict[str, Any] = {
            "me": AppError("not logged in"),
            "logout": {"success": True},
            "my_property_count": 0,
        }
        self.responses.update(responses)
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    async def _call(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        result = self.responses.get(name, {"success": True})
        if isinstance(result, Exception):
            raise result
        return result

    def called(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]

    async def me(self):
        return await self._call("me")

    async def login(self, email, password):
        return await self._call("login", email, password)

    async def verify_mfa(self, email, code, mfa_token):
        return await self._call("verify_mfa", email, code, mfa_token)

    async def change_password_required(self, email, new_password, temp_token):
        return await self._call("change_password_required", email, new_password, temp_token)

    async def register(self, payload):
        return await self._call("register", payload)

    async def register_direct(self, payload):
        return await self._call("register_direct", payload)

    async def verify_otp(self, email, otp):
        return await self._call("verify_otp", email, otp)

    async def resend_otp(self, email):
        return await self._call("resend_otp", email)

    async def forgot_password(self, email):
        return await self._call("forgot_password", email)

    async def reset_password(self, token, password):
        return await self._call("reset_password", token, password)

    async def logout(self):
        return await self._call("logout")

    async def my_property_count(self):
        return await self._call("my_property_count")


@dataclass
class FakePageCache:
    store: dict[str, Any] = field(default_factory=dict)
    ttls: dict[str, int] = field(default_factory=dict)

    async def get(self, key: str) -> Any | None:
        return self.store.get(key)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self.store[key] = value
        self.ttls[key] = ttl_seconds


@pytest.fixture
def buyer() -> User:
    return make_user()


@pytest.fixture
def owner() -> User:
    return make_user(user_id="u-owner", name="Ravi", role=UserRole.OWNER)

