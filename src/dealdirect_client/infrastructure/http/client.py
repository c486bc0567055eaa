"""Cookie-session HTTP client for the marketplace REST API."""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Awaitable, Callable

import httpx

from dealdirect_client.application.exceptions import (
    AppError,
    NetworkError,
    error_for_status,
)
from dealdirect_client.domain.value_objects.enums import AuthErrorKind
from dealdirect_client.infrastructure.http.sanitize import sanitize_payload

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
STATE_CHANGING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

_DEFAULT_MESSAGES = {
    AuthErrorKind.UNAUTHORIZED: "Your session has expired. Please log in again.",
    AuthErrorKind.FORBIDDEN: "You do not have permission to access this resource.",
}

AuthErrorHandler = Callable[[AuthErrorKind, str], Awaitable[None]]


class ApiClient:
    """Wraps one ``httpx.AsyncClient``; its cookie jar carries the session."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 90.0,
        transport: httpx.AsyncBaseTransport | None = None,
        on_auth_error: AuthErrorHandler | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._on_auth_error = on_auth_error

    def set_auth_error_handler(self, handler: AuthErrorHandler | None) -> None:
        self._on_auth_error = handler

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def cookie_header(self) -> str | None:
        pairs = [f"{c.name}={c.value}" for c in self._client.cookies.jar]
        return "; ".join(pairs) or None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        method = method.upper()
        headers: dict[str, str] = {}
        if method in STATE_CHANGING_METHODS:
            csrf = self._client.cookies.get(CSRF_COOKIE_NAME)
            if csrf:
                headers[CSRF_HEADER_NAME] = csrf

        try:
            resp = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                data=data,
                files=files,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request timed out: {method} {path}") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request failed: {method} {path}") from exc

        if resp.is_success:
            return self._decode(resp)

        await self._raise_for_status(resp)

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            return {}

    async def _raise_for_status(self, resp: httpx.Response) -> None:
        status = resp.status_code
        payload = sanitize_payload(self._decode(resp))
        message = payload.get("message")

        if status == 401:
            logger.warning("Session expired or unauthorized: %s", resp.request.url.path)
            await self._notify(AuthErrorKind.UNAUTHORIZED, message)
        elif status == 403:
            logger.warning("Access forbidden: %s", resp.request.url.path)
            await self._notify(AuthErrorKind.FORBIDDEN, message)
        elif status == 429:
            logger.warning("Rate limited: %s", resp.request.url.path)

        exc_cls = error_for_status(status)
        raise exc_cls(status, message or f"Request failed with status {status}", payload)

    async def _notify(self, kind: AuthErrorKind, message: str | None) -> None:
        if self._on_auth_error is None:
            return
        await self._on_auth_error(kind, message or _DEFAULT_MESSAGES[kind])

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def fetch_csrf_token(self) -> str | None:
        try:
            data = await self.get("/csrf-token")
        except AppError:
            logger.warning("Failed to fetch CSRF token", exc_info=True)
            return None
        return data.get("csrfToken") if isinstance(data, dict) else None

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
