from __future__ import annotations

from enum import StrEnum


class UserRole(StrEnum):
    USER = "user"
    BUYER = "buyer"
    OWNER = "owner"
    AGENT = "agent"
    ADMIN = "admin"


class MessageType(StrEnum):
    TEXT = "text"
    VISIT_REQUEST = "visit_request"
    VISIT_CONFIRMATION = "visit_confirmation"


class AuthState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AWAITING_MFA = "awaiting_mfa"
    AWAITING_PASSWORD_CHANGE = "awaiting_password_change"
    AUTHENTICATED = "authenticated"


class AuthErrorKind(StrEnum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AWAITING_ACK = "awaiting_ack"
    LIVE = "live"
    UNTRUSTED = "untrusted"
