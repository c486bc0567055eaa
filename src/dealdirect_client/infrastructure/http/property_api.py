from __future__ import annotations

from typing import Any

from dealdirect_client.application.policies.validation import validate_report_reason
from dealdirect_client.infrastructure.http.client import ApiClient


class PropertyApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list(self, **params: Any) -> dict[str, Any]:
        return await self._client.get("/properties/list", params=params or None)

    async def search(self, query: str) -> dict[str, Any]:
        return await self._client.get("/properties/search", params={"q": query})

    async def get(self, property_id: str) -> dict[str, Any]:
        return await self._client.get(f"/properties/{property_id}")

    async def my_properties(self) -> dict[str, Any]:
        return await self._client.get("/properties/my-properties")

    async def saved(self) -> dict[str, Any]:
        return await self._client.get("/properties/saved")

    async def remove_saved(self, property_id: str) -> dict[str, Any]:
        return await self._client.delete(f"/properties/saved/{property_id}")

    async def mark_interested(self, property_id: str) -> dict[str, Any]:
        return await self._client.post(f"/properties/interested/{property_id}", json={})

    async def check_interested(self, property_id: str) -> bool:
        data = await self._client.get(f"/properties/interested/{property_id}/check")
        return bool(data.get("success") and data.get("isInterested"))

    async def remove_interest(self, property_id: str) -> dict[str, Any]:
        return await self._client.delete(f"/properties/interested/{property_id}")

    async def report(self, property_id: str, reason: str) -> dict[str, Any]:
        trimmed = validate_report_reason(reason)
        return await self._client.post(f"/properties/{property_id}/report", json={"reason": trimmed})
