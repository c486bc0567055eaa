from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class ValidationError(AppError):
    """Input rejected locally; no request was sent."""


class NetworkError(AppError):
    """The backend could not be reached or did not answer in time."""


class ApiError(AppError):
    """The backend answered with a 4xx/5xx status."""

    def __init__(
        self,
        status_code: int,
        detail: str = "",
        payload: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.payload = payload or {}
        super().__init__(detail)


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class RateLimitedError(ApiError):
    pass


_BY_STATUS: dict[int, type[ApiError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    429: RateLimitedError,
}


def error_for_status(status_code: int) -> type[ApiError]:
    return _BY_STATUS.get(status_code, ApiError)
