from __future__ import annotations

from typing import Protocol

from dealdirect_client.domain.entities.conversation import Conversation
from dealdirect_client.domain.entities.message import Message


class MessageStore(Protocol):
    """Authoritative, REST-backed chat resources."""

    async def socket_token(self) -> str | None: ...

    async def list_conversations(self) -> list[Conversation]: ...

    async def unread_count(self) -> int: ...

    async def list_messages(self, conversation_id: str) -> list[Message]: ...

    async def start_conversation(self, property_id: str, owner_id: str) -> Conversation: ...

    async def send_message(
        self,
        conversation_id: str,
        text: str,
        message_type: str | None = None,
    ) -> Message: ...

    async def report_message(self, message_id: str, reason: str) -> bool: ...
