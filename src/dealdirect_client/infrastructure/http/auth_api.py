from __future__ import annotations

from typing import Any

from dealdirect_client.infrastructure.http.client import ApiClient


class AuthApi:
    """``/users`` endpoints. Returns raw response bodies."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def me(self) -> dict[str, Any]:
        return await self._client.get("/users/me")

    async def login(self, email: str, password: str) -> dict[str, Any]:
        return await self._client.post("/users/login", json={"email": email, "password": password})

    async def verify_mfa(self, email: str, code: str, mfa_token: str | None) -> dict[str, Any]:
        return await self._client.post(
            "/users/verify-mfa",
            json={"email": email, "code": code, "mfaToken": mfa_token},
        )

    async def change_password_required(
        self, email: str, new_password: str, temp_token: str | None,
    ) -> dict[str, Any]:
        return await self._client.post(
            "/users/change-password-required",
            json={"email": email, "newPassword": new_password, "tempToken": temp_token},
        )

    async def register(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._client.post("/users/register", json=payload)

    async def register_direct(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._client.post("/users/register-direct", json=payload)

    async def verify_otp(self, email: str, otp: str) -> dict[str, Any]:
        return await self._client.post("/users/verify-otp", json={"email": email, "otp": otp})

    async def resend_otp(self, email: str) -> dict[str, Any]:
        return await self._client.post("/users/resend-otp", json={"email": email})

    async def forgot_password(self, email: str) -> dict[str, Any]:
        return await self._client.post("/users/forgot-password", json={"email": email})

    async def reset_password(self, token: str, password: str) -> dict[str, Any]:
        return await self._client.post(
            "/users/reset-password", json={"token": token, "password": password},
        )

    async def logout(self) -> dict[str, Any]:
        return await self._client.post("/users/logout")

    async def get_profile(self) -> dict[str, Any]:
        return await self._client.get("/users/profile")

    async def update_profile(
        self,
        fields: dict[str, Any],
        *,
        image: tuple[str, bytes, str] | None = None,
    ) -> dict[str, Any]:
        """Multipart update; ``image`` is ``(filename, content, content_type)``."""
        files = {"profileImage": image} if image else None
        data = {k: str(v) for k, v in fields.items() if v is not None}
        return await self._client.put("/users/profile", data=data, files=files)

    async def change_password(self, current_password: str, new_password: str) -> dict[str, Any]:
        return await self._client.put(
            "/users/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    async def my_property_count(self) -> int:
        data = await self._client.get("/properties/my-properties")
        if isinstance(data.get("count"), int):
            return data["count"]
        items = data.get("data")
        return len(items) if isinstance(items, list) else 0
