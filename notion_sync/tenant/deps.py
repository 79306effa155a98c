"""FastAPI dependencies for tenant resolution."""

from __future__ import annotations

import hmac

from fastapi import HTTPException, Request

from ..config import settings


async def get_tenant_id(request: Request) -> str:
    """Resolve the calling tenant from request headers.

    Identity is established upstream; when a per-tenant token is configured
    it must also be presented.
    """
    tenant_id = request.headers.get(settings.tenant_header, "").strip()
    if not tenant_id:
        raise HTTPException(status_code=401, detail="Missing tenant identity")

    expected_token = settings.tenant_access_tokens_map.get(tenant_id)
    provided_token = request.headers.get(settings.tenant_token_header, "").strip()

    if expected_token:
        if not provided_token or not hmac.compare_digest(provided_token, expected_token):
            raise HTTPException(status_code=403, detail="Tenant access token required")
    elif settings.tenant_auth_required:
        raise HTTPException(status_code=403, detail="Tenant authorization required")

    return tenant_id
