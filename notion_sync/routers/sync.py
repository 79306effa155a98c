"""On-demand full sync trigger."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..tenant.deps import get_tenant_id
from ..source.deps import get_mirror, get_source
from ..sync.errors import TenantNotConfigured
from ..sync.record_types import LOGICAL_TYPES
from ..sync.sync_engine import run_full_sync

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("/{logical_type}")
async def trigger_sync(
    logical_type: str,
    tenant_id: str = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
    source=Depends(get_source),
    mirror=Depends(get_mirror),
):
    if logical_type not in LOGICAL_TYPES:
        raise HTTPException(status_code=404, detail=f"Unknown record type: {logical_type}")

    try:
        result = await run_full_sync(db, source, tenant_id, logical_type, mirror=mirror)
    except TenantNotConfigured as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not result.success:
        logger.warning("Sync of %s for %s failed: %s", logical_type, tenant_id, result.error)
        return JSONResponse(status_code=500, content=result.model_dump(mode="json"))
    return result.model_dump(mode="json")
