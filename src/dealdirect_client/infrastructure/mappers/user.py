from __future__ import annotations

from typing import Any

from dealdirect_client.domain.entities.user import BlockedAccount, User
from dealdirect_client.domain.value_objects.enums import UserRole
from dealdirect_client.infrastructure.mappers._common import ref_id


def dict_to_user(data: dict[str, Any]) -> User:
    return User(
        id=ref_id(data) or "",
        name=data.get("name") or "User",
        email=data.get("email"),
        role=data.get("role") or UserRole.USER.value,
        phone=data.get("phone"),
        is_verified=data.get("isVerified") is True,
        requires_password_change=bool(data.get("requiresPasswordChange")),
    )


def dict_to_blocked(data: dict[str, Any]) -> BlockedAccount:
    return BlockedAccount(
        message=data.get("message") or "Your account has been blocked",
        reason=data.get("blockReason") or "No reason provided",
        blocked_at=data.get("blockedAt"),
    )
