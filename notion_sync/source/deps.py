"""FastAPI dependencies for the source client and asset mirror."""

from __future__ import annotations

from ..assets.mirror import AssetMirror
from ..config import settings
from .client import NotionClient


async def get_source():
    async with NotionClient.from_settings() as source:
        yield source


async def get_mirror():
    """Yield an AssetMirror, or None when mirroring is disabled."""
    if not settings.asset_mirror_enabled:
        yield None
        return
    mirror = AssetMirror.from_settings()
    try:
        yield mirror
    finally:
        await mirror.aclose()
