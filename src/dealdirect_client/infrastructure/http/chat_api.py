"""REST side of chat: the authoritative message store."""
from __future__ import annotations

from typing import Any

from dealdirect_client.application.exceptions import AppError
from dealdirect_client.domain.entities.conversation import Conversation
from dealdirect_client.domain.entities.message import Message
from dealdirect_client.infrastructure.http.client import ApiClient
from dealdirect_client.infrastructure.mappers.conversation import dict_to_conversation
from dealdirect_client.infrastructure.mappers.message import dict_to_message


def _ensure_success(data: dict[str, Any], what: str) -> dict[str, Any]:
    if not data.get("success"):
        raise AppError(data.get("message") or f"Failed to load {what}")
    return data


def _require(data: dict[str, Any], key: str) -> dict[str, Any]:
    if not data.get("success") or not isinstance(data.get(key), dict):
        raise AppError(data.get("message") or f"Response carried no {key}")
    return data[key]


class ChatApi:
    """Implements application.ports.store.MessageStore."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def socket_token(self) -> str | None:
        data = await self._client.get("/chat/socket-token")
        if data.get("success") and data.get("token"):
            return data["token"]
        return None

    async def list_conversations(self) -> list[Conversation]:
        data = _ensure_success(await self._client.get("/chat/conversations"), "conversations")
        return [dict_to_conversation(c) for c in data.get("conversations") or []]

    async def unread_count(self) -> int:
        data = _ensure_success(await self._client.get("/chat/unread-count"), "unread count")
        return int(data.get("unreadCount") or 0)

    async def list_messages(self, conversation_id: str) -> list[Message]:
        data = _ensure_success(await self._client.get(f"/chat/messages/{conversation_id}"), "messages")
        return [dict_to_message(m) for m in data.get("messages") or []]

    async def start_conversation(self, property_id: str, owner_id: str) -> Conversation:
        data = await self._client.post(
            "/chat/conversation/start",
            json={"propertyId": property_id, "ownerId": owner_id},
        )
        return dict_to_conversation(_require(data, "conversation"))

    async def send_message(
        self,
        conversation_id: str,
        text: str,
        message_type: str | None = None,
    ) -> Message:
        body: dict[str, Any] = {"conversationId": conversation_id, "text": text}
        if message_type:
            body["messageType"] = message_type
        data = await self._client.post("/chat/message/send", json=body)
        return dict_to_message(_require(data, "message"))

    async def report_message(self, message_id: str, reason: str) -> bool:
        data = await self._client.post(
            "/chat/message/report", json={"messageId": message_id, "reason": reason},
        )
        return bool(data.get("success"))
