"""Tenant and database link service."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import TRACKING_PERIODS, Tenant, TenantDatabaseLink, normalize_database_id
from ..sync.discovery import refresh_classification
from ..sync.record_types import LOGICAL_TYPES
from ..sync.schema import list_database_schema


async def get_or_create_tenant(db: AsyncSession, tenant_id: str, name: str | None = None) -> Tenant:
    tenant = await db.get(Tenant, tenant_id)
    if tenant:
        return tenant
    tenant = Tenant(id=tenant_id, name=name)
    db.add(tenant)
    await db.flush()
    return tenant


async def list_links(db: AsyncSession, tenant_id: str) -> list[TenantDatabaseLink]:
    stmt = (
        select(TenantDatabaseLink)
        .where(TenantDatabaseLink.tenant_id == tenant_id)
        .order_by(TenantDatabaseLink.created_at)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_link(db: AsyncSession, tenant_id: str, link_id: uuid.UUID) -> TenantDatabaseLink | None:
    stmt = select(TenantDatabaseLink).where(
        TenantDatabaseLink.id == link_id,
        TenantDatabaseLink.tenant_id == tenant_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def link_database(
    db: AsyncSession,
    source,
    tenant_id: str,
    database_id: str,
    *,
    display_name: str | None = None,
    type_tag: str | None = None,
    period: str | None = None,
) -> TenantDatabaseLink:
    """Connect (or re-link) a source database for a tenant.

    The live schema is fetched so the link starts with a declared schema and
    a display name; SourceUnavailable propagates.
    """
    if type_tag is not None and type_tag not in LOGICAL_TYPES:
        raise ValueError(f"Unknown type tag: {type_tag}")
    if period is not None and period not in TRACKING_PERIODS:
        raise ValueError(f"Unknown tracking period: {period}")

    schema = await list_database_schema(source, database_id)
    await get_or_create_tenant(db, tenant_id)

    key = normalize_database_id(database_id)
    stmt = select(TenantDatabaseLink).where(
        TenantDatabaseLink.tenant_id == tenant_id,
        TenantDatabaseLink.database_key == key,
    )
    link = (await db.execute(stmt)).scalar_one_or_none()
    if link is None:
        link = TenantDatabaseLink(tenant_id=tenant_id, database_key=key)
        db.add(link)

    link.external_database_id = database_id
    link.display_name = display_name or schema.title or link.display_name
    link.type_tag = type_tag
    link.period = period
    link.declared_schema = schema.to_json()
    refresh_classification(link)

    await db.commit()
    await db.refresh(link)
    return link


async def refresh_link(db: AsyncSession, source, link: TenantDatabaseLink) -> TenantDatabaseLink:
    """Re-read the schema and title, then re-run classification."""
    schema = await list_database_schema(source, link.external_database_id)
    if schema.title:
        link.display_name = schema.title
    link.declared_schema = schema.to_json()
    refresh_classification(link)
    await db.commit()
    await db.refresh(link)
    return link


async def unlink_database(db: AsyncSession, link: TenantDatabaseLink) -> None:
    await db.delete(link)
    await db.commit()
