"""Client-side checks run before any request is sent."""
from __future__ import annotations

import re

from dealdirect_client.application.exceptions import ValidationError

PHONE_RE = re.compile(r"^[6-9]\d{9}$")
MFA_CODE_RE = re.compile(r"^\d{6}$")
PASSWORD_SPECIALS = "@$!%*?&#^()-_=+"
MIN_REPORT_REASON_LENGTH = 10


def validate_phone(phone: str | None) -> str:
    cleaned = (phone or "").strip()
    if not cleaned:
        raise ValidationError("Please enter your phone number")
    if not PHONE_RE.match(cleaned):
        raise ValidationError("Please enter a valid 10-digit phone number")
    return cleaned


def validate_password(password: str | None) -> str:
    if not password or len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")
    if not re.search(r"[a-z]", password):
        raise ValidationError("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        raise ValidationError("Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        raise ValidationError("Password must contain at least one number")
    if not any(ch in PASSWORD_SPECIALS for ch in password):
        raise ValidationError(
            f"Password must contain at least one special character ({PASSWORD_SPECIALS})"
        )
    return password


def validate_mfa_code(code: str | None) -> str:
    cleaned = (code or "").strip()
    if not MFA_CODE_RE.match(cleaned):
        raise ValidationError("Please enter a valid 6-digit MFA code")
    return cleaned


def validate_report_reason(reason: str | None) -> str:
    trimmed = (reason or "").strip()
    if len(trimmed) < MIN_REPORT_REASON_LENGTH:
        raise ValidationError(
            f"Please describe the issue (at least {MIN_REPORT_REASON_LENGTH} characters)"
        )
    return trimmed
