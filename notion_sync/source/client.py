"""Notion API client - typed wrapper for the databases and pages endpoints.

Usage:
    async with NotionClient.from_settings() as notion:
        schema = await notion.databases.retrieve(database_id)
        page = await notion.databases.query(database_id, page_size=100)
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

import httpx

from ..config import settings
from ..sync.errors import SourceUnavailable

if TYPE_CHECKING:
    from .databases import DatabasesAPI
    from .pages import PagesAPI


class NotionClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.notion.com/v1",
        notion_version: str = "2022-06-28",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.notion_version = notion_version
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._databases: DatabasesAPI | None = None
        self._pages: PagesAPI | None = None

    @classmethod
    def from_settings(cls, transport: httpx.AsyncBaseTransport | None = None) -> "NotionClient":
        return cls(
            settings.notion_api_key,
            base_url=settings.notion_api_base,
            notion_version=settings.notion_version,
            timeout=settings.notion_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "NotionClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Notion-Version": self.notion_version,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

        from .databases import DatabasesAPI
        from .pages import PagesAPI

        self._databases = DatabasesAPI(self)
        self._pages = PagesAPI(self)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()

    @property
    def databases(self) -> "DatabasesAPI":
        """Databases API."""
        if not self._databases:
            raise RuntimeError("Client not initialized. Use 'async with' context.")
        return self._databases

    @property
    def pages(self) -> "PagesAPI":
        """Pages API."""
        if not self._pages:
            raise RuntimeError("Client not initialized. Use 'async with' context.")
        return self._pages

    # HTTP methods
    async def _request(self, method: str, endpoint: str, data: dict | None = None) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, endpoint, json=data)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailable(
                f"{method} {endpoint} failed ({e.response.status_code})",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnavailable(f"{method} {endpoint} failed: {e}") from e
        return resp.json()

    async def _get(self, endpoint: str) -> dict[str, Any]:
        """Make GET request."""
        return await self._request("GET", endpoint)

    async def _post(self, endpoint: str, data: dict | None = None) -> dict[str, Any]:
        """Make POST request."""
        return await self._request("POST", endpoint, data or {})

    async def _patch(self, endpoint: str, data: dict | None = None) -> dict[str, Any]:
        """Make PATCH request."""
        return await self._request("PATCH", endpoint, data or {})
