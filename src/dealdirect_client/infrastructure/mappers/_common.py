from __future__ import annotations

from datetime import datetime
from typing import Any


def ref_id(value: Any) -> str | None:
    """Return the id of a populated document or a bare reference."""
    if value is None:
        return None
    if isinstance(value, dict):
        raw = value.get("_id") or value.get("id")
        return str(raw) if raw is not None else None
    return str(value)


def parse_ts(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
