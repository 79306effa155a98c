"""Pages API - single record reads and writes."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .client import NotionClient


class PagesAPI:
    def __init__(self, client: "NotionClient"):
        self._client = client

    async def retrieve(self, page_id: str) -> dict[str, Any]:
        return await self._client._get(f"/pages/{page_id}")

    async def create(self, database_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        """Create a page as a new row of ``database_id``."""
        return await self._client._post(
            "/pages",
            {"parent": {"database_id": database_id}, "properties": properties},
        )

    async def update(self, page_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        return await self._client._patch(f"/pages/{page_id}", {"properties": properties})
