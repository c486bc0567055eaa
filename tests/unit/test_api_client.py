from __future__ import annotations

import json

import httpx
import pytest

from dealdirect_client.application.exceptions import (
    ApiError,
    AppError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    ValidationError,
)
from dealdirect_client.domain.value_objects.enums import AuthErrorKind
from dealdirect_client.infrastructure.http.chat_api import ChatApi
from dealdirect_client.infrastructure.http.client import ApiClient
from dealdirect_client.infrastructure.http.content_api import ContentApi
from dealdirect_client.infrastructure.http.property_api import PropertyApi
from dealdirect_client.infrastructure.http.sanitize import sanitize_message

API = "http://api.test/api"


class Backend:
    def __init__(self, routes: dict[tuple[str, str], httpx.Response] | None = None) -> None:
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path.removeprefix("/api"))
        if key in self.routes:
            return self.routes[key]
        return httpx.Response(200, json={"success": True})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _client(backend: Backend, **kwargs) -> ApiClient:
    return ApiClient(API, transport=httpx.MockTransport(backend), **kwargs)


@pytest.mark.asyncio
async def test_csrf_header_only_on_state_changing_methods():
    backend = Backend()
    async with _client(backend) as api:
        api.cookies.set("csrf_token", "tok-1")

        await api.get("/users/me")
        assert "X-CSRF-Token" not in backend.last.headers

        for method in ("post", "put", "patch", "delete"):
            await getattr(api, method)("/things")
            assert backend.last.headers["X-CSRF-Token"] == "tok-1"


@pytest.mark.asyncio
async def test_fetch_csrf_token():
    backend = Backend({("GET", "/csrf-token"): httpx.Response(200, json={"csrfToken": "abc"})})
    async with _client(backend) as api:
        assert await api.fetch_csrf_token() == "abc"

    failing = Backend({("GET", "/csrf-token"): httpx.Response(500, json={})})
    async with _client(failing) as api:
        assert await api.fetch_csrf_token() is None


@pytest.mark.asyncio
async def test_empty_body_decodes_to_empty_dict():
    backend = Backend({("POST", "/users/logout"): httpx.Response(204)})
    async with _client(backend) as api:
        assert await api.post("/users/logout") == {}


@pytest.mark.asyncio
async def test_401_notifies_auth_handler_and_raises():
    seen: list[tuple[AuthErrorKind, str]] = []

    async def handler(kind, message):
        seen.append((kind, message))

    backend = Backend({("GET", "/users/me"): httpx.Response(401, json={})})
    async with _client(backend, on_auth_error=handler) as api:
        with pytest.raises(UnauthorizedError) as exc_info:
            await api.get("/users/me")

    assert exc_info.value.status_code == 401
    assert seen == [(AuthErrorKind.UNAUTHORIZED, "Your session has expired. Please log in again.")]


@pytest.mark.asyncio
async def test_403_forwards_backend_message():
    seen: list[tuple[AuthErrorKind, str]] = []

    async def handler(kind, message):
        seen.append((kind, message))

    backend = Backend({("DELETE", "/things"): httpx.Response(403, json={"message": "Owners only"})})
    async with _client(backend) as api:
        api.set_auth_error_handler(handler)
        with pytest.raises(ApiError):
            await api.delete("/things")

    assert seen == [(AuthErrorKind.FORBIDDEN, "Owners only")]


@pytest.mark.asyncio
@pytest.mark.parametrize(("status", "exc_type"), [(404, NotFoundError), (429, RateLimitedError), (500, ApiError)])
async def test_status_mapping(status, exc_type):
    backend = Backend({("GET", "/x"): httpx.Response(status, json={"message": "nope"})})
    async with _client(backend) as api:
        with pytest.raises(exc_type) as exc_info:
            await api.get("/x")

    assert exc_info.value.detail == "nope"


@pytest.mark.asyncio
async def test_error_body_is_sanitised():
    body = {
        "message": "MongoServerError: duplicate key at /var/app/node_modules/x.js",
        "stack": "Error\n    at foo (/home/app/index.js:1:1)",
        "error": {"code": 11000, "stack": "..."},
    }
    backend = Backend({("POST", "/users/register"): httpx.Response(400, json=body)})
    async with _client(backend) as api:
        with pytest.raises(ApiError) as exc_info:
            await api.post("/users/register", json={})

    payload = exc_info.value.payload
    assert "stack" not in payload
    assert payload["error"] == {"code": 11000}
    assert "MongoServerError" not in exc_info.value.detail
    assert "/var/" not in exc_info.value.detail


def test_sanitize_message_falls_back_to_generic():
    assert sanitize_message("ECONNREFUSED") == "An error occurred"
    assert sanitize_message(None) == "An error occurred"
    assert sanitize_message("Email already registered") == "Email already registered"


@pytest.mark.asyncio
async def test_transport_failure_becomes_network_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    async with ApiClient(API, transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(NetworkError):
            await api.get("/users/me")


@pytest.mark.asyncio
async def test_cookie_header_reflects_session_cookies():
    async with _client(Backend()) as api:
        assert api.cookie_header() is None
        api.cookies.set("token", "jwt-1")
        assert api.cookie_header() == "token=jwt-1"


@pytest.mark.asyncio
async def test_chat_api_maps_conversations_and_messages():
    backend = Backend({
        ("GET", "/chat/conversations"): httpx.Response(200, json={
            "success": True,
            "conversations": [{
                "_id": "c-1",
                "participants": [{"_id": "u-1"}, "u-2"],
                "property": {"_id": "p-1", "title": "Villa"},
                "myUnreadCount": 2,
                "lastMessage": {"text": "hi", "sender": "u-2"},
            }],
        }),
        ("POST", "/chat/message/send"): httpx.Response(200, json={
            "success": True,
            "message": {"_id": "m-9", "conversation": "c-1", "sender": {"_id": "u-1", "name": "A"},
                        "text": "hello", "createdAt": "2024-05-01T10:00:00Z"},
        }),
        ("GET", "/chat/unread-count"): httpx.Response(200, json={"success": True, "unreadCount": 5}),
    })
    async with _client(backend) as api:
        chat = ChatApi(api)
        (conv,) = await chat.list_conversations()
        message = await chat.send_message("c-1", "hello", "visit_request")
        unread = await chat.unread_count()

    assert conv.participants == ("u-1", "u-2")
    assert conv.property_title == "Villa"
    assert conv.my_unread_count == 2
    assert conv.last_message.sender_id == "u-2"
    assert message.id == "m-9"
    assert message.created_at.year == 2024
    assert json.loads(backend.requests[1].content) == {
        "conversationId": "c-1", "text": "hello", "messageType": "visit_request",
    }
    assert unread == 5


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "call",
    [
        lambda chat: chat.list_conversations(),
        lambda chat: chat.unread_count(),
        lambda chat: chat.list_messages("c-1"),
    ],
)
async def test_chat_api_rejects_unsuccessful_payloads(call):
    failed = httpx.Response(200, json={"success": False, "message": "temporarily unavailable"})
    backend = Backend({
        ("GET", "/chat/conversations"): failed,
        ("GET", "/chat/unread-count"): failed,
        ("GET", "/chat/messages/c-1"): failed,
    })
    async with _client(backend) as api:
        with pytest.raises(AppError) as exc_info:
            await call(ChatApi(api))

    assert exc_info.value.detail == "temporarily unavailable"


@pytest.mark.asyncio
async def test_property_report_validates_reason_locally():
    backend = Backend()
    async with _client(backend) as api:
        properties = PropertyApi(api)
        with pytest.raises(ValidationError):
            await properties.report("p-1", "  short  ")
        await properties.report("p-1", "  Listing photos are fake  ")

    assert len(backend.requests) == 1
    assert json.loads(backend.last.content) == {"reason": "Listing photos are fake"}


@pytest.mark.asyncio
async def test_contact_unknown_category_falls_back_to_general():
    backend = Backend()
    async with _client(backend) as api:
        await ContentApi(api).submit_contact(" Hello ", " Need help ", category="spam")

    assert json.loads(backend.last.content) == {
        "subject": "Hello", "message": "Need help", "category": "general",
    }
