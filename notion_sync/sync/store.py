"""Local store access keyed on (tenant_id, external_id)."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

# Keeps IN (...) lists under SQLite bound-parameter limits.
_CHUNK = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def id_variants(external_id: str) -> list[str]:
    """The id as given plus its dashed/undashed UUID forms."""
    raw = (external_id or "").strip()
    compact = raw.replace("-", "").lower()
    variants = [raw]
    if compact and compact not in variants:
        variants.append(compact)
    if len(compact) == 32:
        try:
            dashed = str(uuid.UUID(hex=compact))
        except ValueError:
            dashed = None
        if dashed and dashed not in variants:
            variants.append(dashed)
    return variants


async def select_external_ids(
    db: AsyncSession,
    model,
    tenant_id: str,
    database_id: str,
) -> set[str]:
    result = await db.execute(
        select(model.external_id).where(
            model.tenant_id == tenant_id,
            model.external_database_id == database_id,
        )
    )
    return set(result.scalars().all())


async def get_record(db: AsyncSession, model, tenant_id: str, external_id: str):
    result = await db.execute(
        select(model).where(
            model.tenant_id == tenant_id,
            model.external_id.in_(id_variants(external_id)),
        )
    )
    return result.scalars().first()


async def select_records(
    db: AsyncSession,
    model,
    tenant_id: str,
    external_ids: Iterable[str],
) -> list:
    ids = list(dict.fromkeys(external_ids))
    records: list = []
    for start in range(0, len(ids), _CHUNK):
        result = await db.execute(
            select(model).where(
                model.tenant_id == tenant_id,
                model.external_id.in_(ids[start:start + _CHUNK]),
            )
        )
        records.extend(result.scalars().all())
    return records


async def upsert_records(
    db: AsyncSession,
    model,
    tenant_id: str,
    rows: list[dict[str, Any]],
) -> tuple[int, int]:
    """Insert or update rows keyed on ``external_id``; returns (created, updated).

    The caller commits.
    """
    existing = {
        r.external_id: r
        for r in await select_records(db, model, tenant_id, [row["external_id"] for row in rows])
    }
    now = _utcnow()
    created = updated = 0

    for row in rows:
        record = existing.get(row["external_id"])
        if record:
            for key, val in row.items():
                setattr(record, key, val)
            record.last_synced_at = now
            updated += 1
        else:
            record = model(tenant_id=tenant_id, last_synced_at=now, **row)
            db.add(record)
            existing[row["external_id"]] = record
            created += 1

    await db.flush()
    return created, updated


async def delete_records(
    db: AsyncSession,
    model,
    tenant_id: str,
    external_ids: Iterable[str],
    database_id: str | None = None,
) -> int:
    ids = list(dict.fromkeys(external_ids))
    deleted = 0
    for start in range(0, len(ids), _CHUNK):
        stmt = delete(model).where(
            model.tenant_id == tenant_id,
            model.external_id.in_(ids[start:start + _CHUNK]),
        )
        if database_id is not None:
            stmt = stmt.where(model.external_database_id == database_id)
        result = await db.execute(stmt)
        deleted += result.rowcount or 0
    return deleted
