"""Live channel event names and payload models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Client -> server
AUTHENTICATE = "authenticate"
USER_ONLINE = "user_online"
JOIN_CONVERSATION = "join_conversation"
LEAVE_CONVERSATION = "leave_conversation"
TYPING = "typing"
STOP_TYPING = "stop_typing"
SEND_MESSAGE = "send_message"

# Server -> client
CONNECT = "connect"
DISCONNECT = "disconnect"
AUTHENTICATED = "authenticated"
AUTH_ERROR = "auth_error"
AUTH_REQUIRED = "auth_required"
USERS_ONLINE = "users_online"
RECEIVE_MESSAGE = "receive_message"
USER_TYPING = "user_typing"
USER_STOP_TYPING = "user_stop_typing"


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AuthenticatedPayload(_Payload):
    user_id: str | None = Field(None, alias="userId")


class AuthErrorPayload(_Payload):
    code: str | None = None
    message: str | None = None


class TypingPayload(_Payload):
    conversation_id: str | None = Field(None, alias="conversationId")
    user_id: str = Field(alias="userId")
    user_name: str | None = Field(None, alias="userName")


def as_dict(data: Any) -> dict[str, Any]:
    return data if isinstance(data, dict) else {}
