from __future__ import annotations

from dataclasses import dataclass

from dealdirect_client.domain.value_objects.enums import UserRole

_BUYER_ROLES = frozenset({UserRole.USER, UserRole.BUYER})


@dataclass(frozen=True, slots=True)
class User:
    id: str
    name: str
    email: str | None
    role: str
    phone: str | None = None
    is_verified: bool = False
    requires_password_change: bool = False

    @property
    def is_owner(self) -> bool:
        return self.role == UserRole.OWNER

    @property
    def is_buyer(self) -> bool:
        return self.role in _BUYER_ROLES

    def has_role(self, role: str | list[str] | tuple[str, ...]) -> bool:
        """``buyer`` and ``user`` are the same role."""
        wanted = [role] if isinstance(role, str) else list(role)
        if self.is_buyer and any(r in _BUYER_ROLES for r in wanted):
            return True
        return self.role in wanted


@dataclass(frozen=True, slots=True)
class BlockedAccount:
    message: str
    reason: str
    blocked_at: str | None
