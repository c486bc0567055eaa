from __future__ import annotations

from typing import Any

from dealdirect_client.domain.entities.message import Message
from dealdirect_client.domain.value_objects.enums import MessageType
from dealdirect_client.infrastructure.mappers._common import parse_ts, ref_id


def dict_to_message(data: dict[str, Any]) -> Message:
    sender = data.get("sender")
    return Message(
        id=ref_id(data) or "",
        conversation_id=ref_id(data.get("conversation") or data.get("conversationId")) or "",
        sender_id=ref_id(sender),
        sender_name=sender.get("name") if isinstance(sender, dict) else None,
        text=data.get("text") or "",
        message_type=data.get("messageType") or MessageType.TEXT.value,
        created_at=parse_ts(data.get("createdAt")),
    )


def message_to_dict(message: Message) -> dict[str, Any]:
    """Wire shape relayed to the other participant over the live channel."""
    return {
        "_id": message.id,
        "conversation": message.conversation_id,
        "sender": {"_id": message.sender_id, "name": message.sender_name},
        "text": message.text,
        "messageType": message.message_type,
        "createdAt": message.created_at.isoformat() if message.created_at else None,
    }
