"""Sync engine - full reconciliation passes and narrow single-record operations.

A full pass runs Fetching -> Diffing -> Upserting -> Deleting ->
AssetMirroring -> Done. The walk is all-or-nothing: if any page fetch fails
the pass stops before touching the local store. Every upsert is committed
before the first delete, and assets are mirrored only after their rows are
committed.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..assets.blobstore import BlobstoreError
from ..config import settings
from ..models import FinanceAsset, FinanceInvestment, FinancePlace, TenantDatabaseLink
from ..schemas.sync import SyncResult
from .differ import diff_ids
from .discovery import find_link_for_type
from .errors import DeleteFailure, PaginationProtocolViolation, SourceUnavailable
from .extractor import first_file_url, page_icon_url
from .field_mapper import FieldPlan, apply_plan, build_field_plan
from .record_types import RECORD_TYPES, RecordType, get_record_type
from .schema import DatabaseSchema, list_database_schema
from .store import (
    delete_records,
    id_variants,
    select_external_ids,
    select_records,
    upsert_records,
)
from .walker import ExternalRecord, walk

logger = logging.getLogger(__name__)


class SyncPhase(str, Enum):
    FETCHING = "fetching"
    DIFFING = "diffing"
    UPSERTING = "upserting"
    DELETING = "deleting"
    ASSET_MIRRORING = "asset_mirroring"
    DONE = "done"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _compact(value: str | None) -> str:
    return (value or "").replace("-", "").lower()


def plan_for(record_type: RecordType, schema: DatabaseSchema) -> FieldPlan:
    return build_field_plan(schema, list(record_type.rules), title_column=record_type.title_column)


def build_row(
    record_type: RecordType,
    plan: FieldPlan,
    schema: DatabaseSchema,
    record: ExternalRecord,
) -> tuple[dict[str, Any], str | None]:
    """Local row values for one source record, plus its image source URL."""
    mapped = apply_plan(plan, schema, record.raw_properties)
    row = dict(mapped.canonical)
    row["external_id"] = record.external_id
    row["external_database_id"] = record.external_database_id
    row["overflow_properties"] = mapped.overflow
    if record_type.period:
        row["period"] = record_type.period

    source_url = None
    if record_type.asset_column:
        source_url = first_file_url(mapped.canonical.get(record_type.asset_column))
    elif record_type.asset_from_icon:
        source_url = page_icon_url(record.icon)
    return row, source_url


async def resolve_investment_links(db: AsyncSession, tenant_id: str, external_ids: list[str]) -> None:
    """Point investments at their local asset/place rows; backfill price from the asset."""
    investments = await select_records(db, FinanceInvestment, tenant_id, external_ids)
    if not investments:
        return

    result = await db.execute(select(FinanceAsset).where(FinanceAsset.tenant_id == tenant_id))
    assets = {_compact(a.external_id): a for a in result.scalars().all()}
    result = await db.execute(select(FinancePlace).where(FinancePlace.tenant_id == tenant_id))
    places = {_compact(p.external_id): p for p in result.scalars().all()}

    for inv in investments:
        asset = assets.get(_compact(inv.asset_external_id)) if inv.asset_external_id else None
        place = places.get(_compact(inv.place_external_id)) if inv.place_external_id else None
        inv.asset_id = asset.id if asset else None
        inv.place_id = place.id if place else None
        if inv.current_price is None and asset is not None and asset.current_price is not None:
            inv.current_price = asset.current_price


async def _release_row_asset(mirror, record_type: RecordType, tenant_id: str, row) -> None:
    if mirror is None or not record_type.has_assets:
        return
    await mirror.release(tenant_id, row.id, row.asset_url, bucket=record_type.bucket)


async def _delete_rows(
    db: AsyncSession,
    mirror,
    record_type: RecordType,
    tenant_id: str,
    rows: list,
    database_id: str | None = None,
) -> tuple[int, list[DeleteFailure]]:
    """Release each row's asset, then delete the rows whose asset is gone.

    A row whose asset cannot be released is kept, so no object is orphaned.
    """
    failures: list[DeleteFailure] = []
    deletable: list[str] = []
    for row in rows:
        try:
            await _release_row_asset(mirror, record_type, tenant_id, row)
        except (BlobstoreError, OSError) as e:
            logger.warning("Keeping %s: asset release failed: %s", row.external_id, e)
            failures.append(DeleteFailure(row.external_id, f"asset release failed: {e}"))
            continue
        deletable.append(row.external_id)

    if not deletable:
        return 0, failures

    try:
        deleted = await delete_records(db, record_type.model, tenant_id, deletable, database_id)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Delete of %d %s rows failed", len(deletable), record_type.logical_type)
        failures.extend(DeleteFailure(eid, str(e)) for eid in deletable)
        return 0, failures
    return deleted, failures


async def mirror_assets(
    db: AsyncSession,
    mirror,
    record_type: RecordType,
    tenant_id: str,
    sources: dict[str, str | None],
) -> tuple[int, list[str]]:
    """Mirror images for committed rows with bounded concurrency.

    Rows whose record no longer references an image get their durable copy
    released and ``asset_url`` cleared. A failed download keeps the previous
    durable copy, or leaves the pointer unset.
    """
    rows = await select_records(db, record_type.model, tenant_id, list(sources))
    semaphore = asyncio.Semaphore(max(1, settings.sync_max_concurrency))
    errors: list[str] = []

    async def _one(row) -> tuple[Any, str | None, bool]:
        source_url = sources.get(row.external_id)
        async with semaphore:
            if source_url:
                url = await mirror.mirror(source_url, tenant_id, row.id, bucket=record_type.bucket)
                if url is not None and row.asset_url and row.asset_url != url:
                    # A new extension means a new key; drop the previous object.
                    try:
                        await mirror.release(tenant_id, row.id, row.asset_url, bucket=record_type.bucket)
                    except (BlobstoreError, OSError) as e:
                        errors.append(f"asset release failed for {row.external_id}: {e}")
                return row, url, url is not None
            if row.asset_url:
                try:
                    await mirror.release(tenant_id, row.id, row.asset_url, bucket=record_type.bucket)
                except (BlobstoreError, OSError) as e:
                    errors.append(f"asset release failed for {row.external_id}: {e}")
                    return row, row.asset_url, False
            return row, None, False

    outcomes = await asyncio.gather(*(_one(row) for row in rows))

    mirrored = 0
    for row, url, copied in outcomes:
        if copied:
            mirrored += 1
            row.asset_url = url
        elif sources.get(row.external_id) is None:
            row.asset_url = url
    await db.commit()
    return mirrored, errors


async def run_full_sync(
    db: AsyncSession,
    source,
    tenant_id: str,
    logical_type: str,
    *,
    mirror=None,
    link: TenantDatabaseLink | None = None,
    page_size: int | None = None,
    max_pages: int | None = None,
) -> SyncResult:
    """Reconcile one tenant's local table with its linked source database.

    Raises TenantNotConfigured when no database of ``logical_type`` is linked;
    every other failure is reported in the returned SyncResult.
    """
    record_type = get_record_type(logical_type)
    if link is None:
        link = await find_link_for_type(db, tenant_id, logical_type)
    database_id = link.external_database_id
    result = SyncResult(logical_type=logical_type)

    # Fetching: the schema and the complete record set, or nothing.
    result.phase = SyncPhase.FETCHING.value
    try:
        schema = await list_database_schema(source, database_id)
        records = await walk(
            source,
            database_id,
            page_size=page_size or settings.sync_page_size,
            max_pages=max_pages or settings.sync_max_pages,
        )
    except (SourceUnavailable, PaginationProtocolViolation) as e:
        logger.warning("Sync of %s for %s aborted while fetching: %s", logical_type, tenant_id, e)
        result.success = False
        result.error = str(e)
        return result

    plan = plan_for(record_type, schema)
    result.unrecognized_properties = list(plan.unrecognized)

    result.phase = SyncPhase.DIFFING.value
    try:
        previous = await select_external_ids(db, record_type.model, tenant_id, database_id)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Diff of %s for %s failed", logical_type, tenant_id)
        result.success = False
        result.error = f"diff failed: {e}"
        return result
    diff = diff_ids(previous, (r.external_id for r in records))

    result.phase = SyncPhase.UPSERTING.value
    rows: list[dict[str, Any]] = []
    sources: dict[str, str | None] = {}
    for record in records:
        row, source_url = build_row(record_type, plan, schema, record)
        rows.append(row)
        sources[record.external_id] = source_url

    try:
        created, updated = await upsert_records(db, record_type.model, tenant_id, rows)
        if record_type.model is FinanceInvestment:
            await resolve_investment_links(db, tenant_id, list(sources))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Upsert of %s for %s failed", logical_type, tenant_id)
        result.success = False
        result.error = f"upsert failed: {e}"
        return result

    result.synced = len(sources)
    result.created = created
    result.updated = updated
    result.added = len(diff.added)
    result.removed = len(diff.removed)
    result.added_ids = diff.added
    result.removed_ids = diff.removed

    result.phase = SyncPhase.DELETING.value
    if diff.removed:
        try:
            stale = await select_records(db, record_type.model, tenant_id, diff.removed)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("Loading removed %s rows for %s failed", logical_type, tenant_id)
            failures = [DeleteFailure(eid, str(e)) for eid in diff.removed]
        else:
            _, failures = await _delete_rows(db, mirror, record_type, tenant_id, stale, database_id)
        if failures:
            result.success = False
            result.deletions = "error"
            result.errors.extend(str(f) for f in failures)
            result.error = f"{len(failures)} removed record(s) could not be deleted"

    result.phase = SyncPhase.ASSET_MIRRORING.value
    now = _utcnow()
    try:
        if mirror is not None and record_type.has_assets and sources:
            mirrored, errors = await mirror_assets(db, mirror, record_type, tenant_id, sources)
            result.assets_mirrored = mirrored
            result.errors.extend(errors)

        await db.refresh(link)
        link.last_sync_at = now
        link.declared_schema = schema.to_json()
        await db.commit()
    except SQLAlchemyError as e:
        # Upserts and deletes are already committed; only bookkeeping is lost.
        await db.rollback()
        logger.exception("Finishing %s sync for %s failed", logical_type, tenant_id)
        result.success = False
        result.error = f"finalize failed: {e}"
        return result

    result.phase = SyncPhase.DONE.value
    result.last_synced_at = now
    logger.info(
        "Synced %s for %s: %d records, +%d -%d, %d assets",
        logical_type, tenant_id, result.synced, result.added, result.removed, result.assets_mirrored,
    )
    return result


# ---------------------------------------------------------------------------
# Narrow operations (webhook path)
# ---------------------------------------------------------------------------


async def delete_single_record(
    db: AsyncSession,
    tenant_id: str,
    logical_type: str,
    record_id: str,
    *,
    mirror=None,
) -> int:
    """Delete one record (any id form) for one tenant, releasing its asset first.

    Raises DeleteFailure when the asset or the row cannot be removed.
    """
    record_type = get_record_type(logical_type)
    model = record_type.model
    result = await db.execute(
        select(model).where(model.tenant_id == tenant_id, model.external_id.in_(id_variants(record_id)))
    )
    rows = list(result.scalars().all())
    if not rows:
        return 0

    deleted, failures = await _delete_rows(db, mirror, record_type, tenant_id, rows)
    if failures:
        raise failures[0]
    return deleted


async def upsert_single_record(
    db: AsyncSession,
    source,
    tenant_id: str,
    logical_type: str,
    database_id: str,
    record_id: str,
    *,
    mirror=None,
) -> tuple[str, int]:
    """Fetch one page and upsert it; an archived or missing page is deleted instead.

    Returns ``(action, affected)``. Other fetch failures raise SourceUnavailable.
    """
    record_type = get_record_type(logical_type)
    if not record_type.narrow_updates:
        raise ValueError(f"{logical_type} does not support single-record updates")

    schema = await list_database_schema(source, database_id)
    try:
        page = await source.pages.retrieve(record_id)
    except SourceUnavailable as e:
        if not e.not_found:
            raise
        logger.info("Page %s no longer exists; removing it for %s", record_id, tenant_id)
        deleted = await delete_single_record(db, tenant_id, logical_type, record_id, mirror=mirror)
        return "delete", deleted
    if page.get("archived") or page.get("in_trash"):
        deleted = await delete_single_record(db, tenant_id, logical_type, record_id, mirror=mirror)
        return "delete", deleted

    record = ExternalRecord.from_page(page, database_id)
    plan = plan_for(record_type, schema)
    row, source_url = build_row(record_type, plan, schema, record)

    await upsert_records(db, record_type.model, tenant_id, [row])
    await db.commit()

    if mirror is not None and record_type.has_assets:
        await mirror_assets(db, mirror, record_type, tenant_id, {record.external_id: source_url})
    return "upsert", 1


def _record_types_by_table() -> list[RecordType]:
    seen: set[str] = set()
    out: list[RecordType] = []
    for record_type in RECORD_TYPES.values():
        table = record_type.model.__tablename__
        if table not in seen:
            seen.add(table)
            out.append(record_type)
    return out


async def delete_record_everywhere(
    db: AsyncSession,
    record_id: str,
    *,
    mirror=None,
) -> list[tuple[str, str, int]]:
    """Delete a record from every table and tenant; used when the parent database is unknown.

    Returns ``(tenant_id, logical_type, deleted)`` per affected tenant/table.
    """
    affected: list[tuple[str, str, int]] = []
    for record_type in _record_types_by_table():
        model = record_type.model
        result = await db.execute(
            select(model.tenant_id).where(model.external_id.in_(id_variants(record_id))).distinct()
        )
        for tenant_id in result.scalars().all():
            deleted = await delete_single_record(
                db, tenant_id, record_type.logical_type, record_id, mirror=mirror
            )
            affected.append((tenant_id, record_type.logical_type, deleted))
    return affected
