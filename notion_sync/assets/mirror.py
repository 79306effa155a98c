"""Asset mirroring - re-host source images under deterministic object keys."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from ..config import settings
from ..sync.errors import AssetMirrorFailure
from .blobstore import BlobstoreError, ObjectStore
from .downloader import AssetDownloader

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp", "svg")
_URL_EXT_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg)$", re.IGNORECASE)
_CONTENT_TYPE_EXT = (
    ("jpeg", "jpg"),
    ("jpg", "jpg"),
    ("png", "png"),
    ("gif", "gif"),
    ("webp", "webp"),
    ("svg", "svg"),
)


def extension_for(url: str, content_type: str | None) -> str:
    """Extension from the URL path, else from the content type, else jpg."""
    path = urlparse(url).path if isinstance(url, str) else ""
    m = _URL_EXT_RE.search(path or "")
    if m:
        return m.group(1).lower()
    ct = (content_type or "").lower()
    for marker, ext in _CONTENT_TYPE_EXT:
        if marker in ct:
            return ext
    return "jpg"


def object_key(tenant_id: str, record_id, ext: str) -> str:
    return f"{tenant_id}/{record_id}.{ext}"


class AssetMirror:
    def __init__(self, store: ObjectStore, downloader: AssetDownloader):
        self.store = store
        self.downloader = downloader

    @classmethod
    def from_settings(cls, downloader: AssetDownloader | None = None) -> "AssetMirror":
        return cls(
            ObjectStore(settings.blobstore_dir, settings.asset_public_base_url),
            downloader
            or AssetDownloader(
                user_agent=settings.asset_user_agent,
                timeout_seconds=settings.asset_timeout_seconds,
            ),
        )

    async def aclose(self) -> None:
        await self.downloader.aclose()

    async def mirror(self, source_url: str, tenant_id: str, record_id, *, bucket: str) -> str | None:
        """Copy ``source_url`` into the store; None on any failure."""
        try:
            asset = await self.downloader.fetch(source_url)
            ext = extension_for(source_url, asset.content_type)
            key = object_key(tenant_id, record_id, ext)
            await self.store.put_object(bucket, key, asset.data, asset.content_type)
            return self.store.get_public_url(bucket, key)
        except (AssetMirrorFailure, BlobstoreError, OSError) as e:
            logger.warning("Asset mirror failed for record %s: %s", record_id, e)
            return None

    async def release(self, tenant_id: str, record_id, asset_url: str | None, *, bucket: str) -> None:
        """Delete the mirrored object for a record.

        With no stored URL every candidate extension is removed. Missing
        objects are fine; storage errors propagate.
        """
        key = self.store.key_from_public_url(bucket, asset_url) if asset_url else None
        if key:
            await self.store.delete_object(bucket, key)
            return
        for ext in IMAGE_EXTENSIONS:
            await self.store.delete_object(bucket, object_key(tenant_id, record_id, ext))
