"""Create new records in the source and mirror them locally."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.record import RecordCreate
from ..tenant.deps import get_tenant_id
from ..services import record_svc
from ..source.deps import get_mirror, get_source
from ..sync.errors import SourceUnavailable, TenantNotConfigured
from ..sync.record_types import LOGICAL_TYPES

router = APIRouter(prefix="/records", tags=["records"])


def _serialize(record) -> dict:
    data = {}
    for attr in inspect(record).mapper.column_attrs:
        value = getattr(record, attr.key)
        data[attr.key] = value.isoformat() if hasattr(value, "isoformat") else value
    data["id"] = str(record.id)
    for key in ("asset_id", "place_id"):
        if data.get(key) is not None:
            data[key] = str(data[key])
    return data


@router.post("/{logical_type}", status_code=201)
async def create_record(
    logical_type: str,
    data: RecordCreate,
    tenant_id: str = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
    source=Depends(get_source),
    mirror=Depends(get_mirror),
):
    if logical_type not in LOGICAL_TYPES:
        raise HTTPException(status_code=404, detail=f"Unknown record type: {logical_type}")

    try:
        record = await record_svc.create_record(
            db, source, tenant_id, logical_type, data.values, mirror=mirror
        )
    except TenantNotConfigured as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SourceUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _serialize(record)
