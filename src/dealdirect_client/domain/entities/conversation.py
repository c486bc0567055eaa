from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class LastMessagePreview:
    text: str
    sender_id: str | None
    created_at: datetime | None


@dataclass(frozen=True, slots=True)
class Conversation:
    id: str
    participants: tuple[str, ...]
    property_id: str | None
    property_title: str | None
    other_participant_name: str | None
    last_message: LastMessagePreview | None
    my_unread_count: int
    updated_at: datetime | None
