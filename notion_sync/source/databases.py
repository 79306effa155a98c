"""Databases API - schema retrieval and paginated queries."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .client import NotionClient


class DatabasesAPI:
    def __init__(self, client: "NotionClient"):
        self._client = client

    async def retrieve(self, database_id: str) -> dict[str, Any]:
        """Get a database's title and property schema.

        Returns:
            {"id": ..., "title": [...], "properties": {key: {"type": ..., "name": ...}}}
        """
        return await self._client._get(f"/databases/{database_id}")

    async def query(
        self,
        database_id: str,
        start_cursor: str | None = None,
        page_size: int = 100,
        filter: dict | None = None,
    ) -> dict[str, Any]:
        """Query one page of records.

        Returns:
            {"results": [...], "next_cursor": str | None, "has_more": bool}
        """
        body: dict[str, Any] = {"page_size": min(page_size, 100)}
        if start_cursor:
            body["start_cursor"] = start_cursor
        if filter:
            body["filter"] = filter
        return await self._client._post(f"/databases/{database_id}/query", body)
