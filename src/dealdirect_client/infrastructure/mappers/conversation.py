from __future__ import annotations

from typing import Any

from dealdirect_client.domain.entities.conversation import Conversation, LastMessagePreview
from dealdirect_client.infrastructure.mappers._common import parse_ts, ref_id


def _preview(data: dict[str, Any] | None) -> LastMessagePreview | None:
    if not data or not data.get("text"):
        return None
    return LastMessagePreview(
        text=data["text"],
        sender_id=ref_id(data.get("sender")),
        created_at=parse_ts(data.get("createdAt")),
    )


def dict_to_conversation(data: dict[str, Any]) -> Conversation:
    prop = data.get("property")
    other = data.get("otherParticipant") or {}
    participants = tuple(
        pid for pid in (ref_id(p) for p in data.get("participants") or []) if pid
    )
    return Conversation(
        id=ref_id(data) or "",
        participants=participants,
        property_id=ref_id(prop),
        property_title=prop.get("title") if isinstance(prop, dict) else None,
        other_participant_name=other.get("name") if isinstance(other, dict) else None,
        last_message=_preview(data.get("lastMessage")),
        my_unread_count=int(data.get("myUnreadCount") or 0),
        updated_at=parse_ts(data.get("updatedAt")),
    )
