"""Strip internal details from backend error bodies before they reach callers."""
from __future__ import annotations

import re
from typing import Any

GENERIC_MESSAGE = "An error occurred"

_SENSITIVE_PATTERNS = [
    re.compile(r"at\s+\w+\s+\([^)]+:\d+:\d+\)", re.IGNORECASE),
    re.compile(r"at\s+[^\n]+\n", re.IGNORECASE),
    re.compile(r"Error:\s*$", re.IGNORECASE),
    re.compile(r"/[a-z]:/", re.IGNORECASE),
    re.compile(r"/home/|/var/|/usr/", re.IGNORECASE),
    re.compile(r"node_modules", re.IGNORECASE),
    re.compile(r"__dirname|__filename", re.IGNORECASE),
    re.compile(r"MongoError|MongoServerError", re.IGNORECASE),
    re.compile(r"CastError|ValidationError", re.IGNORECASE),
    re.compile(r"ECONNREFUSED|ETIMEDOUT", re.IGNORECASE),
    re.compile(r"errno|syscall|code:\s*'[A-Z_]+'", re.IGNORECASE),
]


def sanitize_message(message: Any) -> str:
    if not message or not isinstance(message, str):
        return GENERIC_MESSAGE
    cleaned = message
    for pattern in _SENSITIVE_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return cleaned or GENERIC_MESSAGE


def sanitize_payload(payload: Any) -> dict[str, Any]:
    """Return a copy of an error body without stack traces."""
    if not isinstance(payload, dict):
        return {}
    data = dict(payload)
    if "message" in data:
        data["message"] = sanitize_message(data["message"])
    data.pop("stack", None)
    error = data.get("error")
    if isinstance(error, dict) and "stack" in error:
        data["error"] = {k: v for k, v in error.items() if k != "stack"}
    return data
