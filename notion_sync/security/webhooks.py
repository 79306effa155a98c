"""Change-notification signature validation."""

from __future__ import annotations

import hashlib
import hmac

from fastapi import HTTPException

from ..config import settings

SIGNATURE_HEADER = "x-notion-signature"


def expected_signature(body: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_notion_signature(body: bytes, signature: str | None) -> None:
    """Verify the ``sha256=<hex>`` HMAC of the raw body when a secret is configured."""
    secret = settings.webhook_secret
    if not secret:
        if settings.security_fail_closed or settings.is_production:
            raise HTTPException(status_code=503, detail="Webhook secret not configured")
        return

    provided = (signature or "").strip()
    if not provided:
        raise HTTPException(status_code=401, detail="Missing webhook signature")
    if not provided.startswith("sha256="):
        raise HTTPException(status_code=401, detail="Malformed webhook signature")

    if not hmac.compare_digest(provided, expected_signature(body, secret)):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")
