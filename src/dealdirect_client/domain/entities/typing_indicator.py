from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TypingIndicator:
    user_id: str
    user_name: str | None
