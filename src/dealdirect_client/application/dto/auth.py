from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dealdirect_client.domain.entities.user import BlockedAccount, User
from dealdirect_client.domain.value_objects.enums import UserRole


@dataclass(frozen=True, slots=True)
class AuthResult:
    """Outcome of every auth-session action."""

    success: bool
    message: str | None = None
    user: User | None = None
    requires_mfa: bool = False
    password_change_required: bool = False
    otp_required: bool = False
    blocked: BlockedAccount | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PendingAuth:
    email: str
    mfa_token: str | None = None
    temp_token: str | None = None


@dataclass(frozen=True, slots=True)
class RegistrationRequest:
    name: str
    email: str
    password: str
    phone: str
    role: UserRole = UserRole.USER
    agree_terms: bool = False

    @property
    def is_owner(self) -> bool:
        return self.role == UserRole.OWNER

    def to_payload(self) -> dict[str, Any]:
        role = UserRole.OWNER if self.is_owner else UserRole.USER
        return {
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "role": role.value,
            "phone": self.phone.strip(),
        }
