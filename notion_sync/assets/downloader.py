"""Image downloader for source-hosted files."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from ..sync.errors import AssetMirrorFailure

# Expired source-hosted URLs answer with an XML/HTML error document.
_MARKUP_MARKERS = ("xml", "text", "html")


@dataclass(frozen=True)
class DownloadedAsset:
    data: bytes
    content_type: str | None
    final_url: str | None = None


class AssetDownloader:
    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        timeout_seconds: float = 30.0,
        max_bytes: int = 20 * 1024 * 1024,
    ):
        self.user_agent = user_agent
        self.max_bytes = max_bytes
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(timeout_seconds),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def fetch(self, url: str) -> DownloadedAsset:
        if not isinstance(url, str) or not url.strip():
            raise AssetMirrorFailure("url required")
        url = url.strip()

        try:
            async with self.client.stream("GET", url, headers={"User-Agent": self.user_agent}) as resp:
                try:
                    resp.raise_for_status()
                except httpx.HTTPStatusError as e:
                    raise AssetMirrorFailure(f"download failed ({resp.status_code}): {url}") from e

                ct = (resp.headers.get("content-type") or "").lower()
                if any(marker in ct for marker in _MARKUP_MARKERS):
                    raise AssetMirrorFailure(f"not image data ({ct}): {url}")

                chunks: list[bytes] = []
                size = 0
                async for chunk in resp.aiter_bytes():
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise AssetMirrorFailure(f"asset larger than {self.max_bytes} bytes: {url}")
                    chunks.append(chunk)
                final_url = str(resp.url) if resp.url else None
        except httpx.HTTPError as e:
            raise AssetMirrorFailure(f"download failed: {url}: {e}") from e

        data = b"".join(chunks)
        if not data:
            raise AssetMirrorFailure(f"empty body: {url}")
        return DownloadedAsset(data=data, content_type=ct or None, final_url=final_url)
