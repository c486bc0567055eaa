from __future__ import annotations

from typing import Any

from dealdirect_client.application.dto.agreement import AgreementRequest
from dealdirect_client.application.exceptions import ValidationError
from dealdirect_client.infrastructure.http.client import ApiClient

CONTACT_CATEGORIES = frozenset(
    {"general", "property", "partnership", "support", "feedback", "complaint", "other"}
)


class ContentApi:
    """Contact form, agreements, blog and notifications."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def submit_contact(self, subject: str, message: str, category: str = "general") -> dict[str, Any]:
        if not subject.strip() or not message.strip():
            raise ValidationError("Please fill in the subject and message")
        if category not in CONTACT_CATEGORIES:
            category = "general"
        return await self._client.post(
            "/contact",
            json={"subject": subject.strip(), "message": message.strip(), "category": category},
        )

    async def generate_agreement(self, request: AgreementRequest) -> dict[str, Any]:
        return await self._client.post("/agreements/generate", json=request.to_payload())

    async def list_blogs(self, page: int = 1, limit: int = 9) -> dict[str, Any]:
        return await self._client.get("/blogs", params={"page": page, "limit": limit})

    async def get_blog(self, slug: str) -> dict[str, Any]:
        return await self._client.get(f"/blogs/{slug}")

    async def notifications(self) -> dict[str, Any]:
        return await self._client.get("/notifications")

    async def mark_notification_read(self, notification_id: str) -> dict[str, Any]:
        return await self._client.patch(f"/notifications/{notification_id}/read")

    async def mark_all_notifications_read(self) -> dict[str, Any]:
        return await self._client.patch("/notifications/mark-all/read")
