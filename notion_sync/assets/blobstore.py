"""Filesystem object store for mirrored assets.

Layout:
  <root>/<bucket>/<tenant_id>/<record_id>.<ext>

Objects are addressed by deterministic keys, so a write for the same record
replaces the previous object. Public URLs are ``<public_base_url>/<bucket>/<key>``.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from urllib.parse import urlparse


class BlobstoreError(Exception):
    pass


def _check_segment(value: str, what: str) -> str:
    value = (value or "").strip().strip("/")
    if not value:
        raise BlobstoreError(f"{what} required")
    parts = value.split("/")
    if any(p in ("", ".", "..") for p in parts) or "\\" in value:
        raise BlobstoreError(f"invalid {what}: {value!r}")
    return value


class ObjectStore:
    def __init__(self, root_dir: str | Path, public_base_url: str):
        self.root_dir = Path(root_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def path_for(self, bucket: str, key: str) -> Path:
        return self.root_dir / _check_segment(bucket, "bucket") / _check_segment(key, "key")

    def exists(self, bucket: str, key: str) -> bool:
        return self.path_for(bucket, key).is_file()

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/{_check_segment(bucket, 'bucket')}/{_check_segment(key, 'key')}"

    def key_from_public_url(self, bucket: str, url: str | None) -> str | None:
        """Recover the object key from a URL handed out by ``get_public_url``.

        URLs from another base fall back to the last two path segments
        (``<tenant_id>/<file>``).
        """
        if not isinstance(url, str) or not url.strip():
            return None
        prefix = f"{self.public_base_url}/{bucket}/"
        if url.startswith(prefix):
            key = url[len(prefix):].split("?", 1)[0]
            return key or None
        path = urlparse(url).path.strip("/")
        parts = [p for p in path.split("/") if p]
        if len(parts) < 2:
            return None
        return "/".join(parts[-2:])

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str | None = None,
    ) -> Path:
        """Write bytes atomically, overwriting any existing object at ``key``."""
        dest = self.path_for(bucket, key)
        dest.parent.mkdir(parents=True, exist_ok=True)

        fd = None
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f"{dest.name}.tmp.",
                dir=str(dest.parent),
            )
            with os.fdopen(fd, "wb") as f:
                fd = None
                f.write(data or b"")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, dest)
            tmp_path = None
        finally:
            if fd is not None:
                try:
                    os.close(fd)
                except OSError:
                    pass
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

        return dest

    async def delete_object(self, bucket: str, key: str) -> bool:
        """Remove an object; returns False when it was already gone."""
        path = self.path_for(bucket, key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
