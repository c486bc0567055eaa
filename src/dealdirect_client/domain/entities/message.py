from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    conversation_id: str
    sender_id: str | None
    sender_name: str | None
    text: str
    message_type: str
    created_at: datetime | None
