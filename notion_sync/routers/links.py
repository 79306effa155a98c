"""Source database link management."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.link import LinkCreate, LinkResponse
from ..tenant.deps import get_tenant_id
from ..services import link_svc
from ..source.deps import get_source
from ..sync.errors import SourceUnavailable

router = APIRouter(prefix="/links", tags=["links"])


@router.get("")
async def list_links(
    tenant_id: str = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    links = await link_svc.list_links(db, tenant_id)
    return [LinkResponse.model_validate(link).model_dump(mode="json") for link in links]


@router.post("", status_code=201)
async def create_link(
    data: LinkCreate,
    tenant_id: str = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
    source=Depends(get_source),
):
    try:
        link = await link_svc.link_database(
            db,
            source,
            tenant_id,
            data.database_id,
            display_name=data.display_name,
            type_tag=data.type_tag,
            period=data.period,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SourceUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))
    return LinkResponse.model_validate(link).model_dump(mode="json")


async def _get_link_or_404(db: AsyncSession, tenant_id: str, link_id: uuid.UUID):
    link = await link_svc.get_link(db, tenant_id, link_id)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")
    return link


@router.post("/{link_id}/refresh")
async def refresh_link(
    link_id: uuid.UUID,
    tenant_id: str = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
    source=Depends(get_source),
):
    link = await _get_link_or_404(db, tenant_id, link_id)
    try:
        link = await link_svc.refresh_link(db, source, link)
    except SourceUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))
    return LinkResponse.model_validate(link).model_dump(mode="json")


@router.delete("/{link_id}", status_code=204)
async def delete_link(
    link_id: uuid.UUID,
    tenant_id: str = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    link = await _get_link_or_404(db, tenant_id, link_id)
    await link_svc.unlink_database(db, link)
