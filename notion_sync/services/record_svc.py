"""Record creation - the only local-to-source write path.

Brand-new records are written to the source first and then mirrored back
through the same mapping a sync pass uses, so the local row always reflects
what the source stored.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import FinanceInvestment
from ..sync.discovery import find_link_for_type
from ..sync.field_mapper import build_source_properties
from ..sync.record_types import get_record_type
from ..sync.schema import list_database_schema
from ..sync.store import get_record, upsert_records
from ..sync.sync_engine import mirror_assets, resolve_investment_links, build_row, plan_for
from ..sync.walker import ExternalRecord

logger = logging.getLogger(__name__)


async def create_record(
    db: AsyncSession,
    source,
    tenant_id: str,
    logical_type: str,
    values: dict[str, Any],
    *,
    mirror=None,
):
    """Create a source record from ``{column: value}`` and upsert it locally.

    Raises TenantNotConfigured, ValueError (a column this tenant's schema
    cannot hold) and SourceUnavailable.
    """
    record_type = get_record_type(logical_type)
    link = await find_link_for_type(db, tenant_id, logical_type)
    database_id = link.external_database_id

    schema = await list_database_schema(source, database_id)
    plan = plan_for(record_type, schema)
    properties = build_source_properties(plan, schema, values)

    created = await source.pages.create(database_id, properties)
    # Re-read so computed properties (formulas, rollups) are populated.
    page = await source.pages.retrieve(created["id"])

    record = ExternalRecord.from_page(page, database_id)
    row, source_url = build_row(record_type, plan, schema, record)
    await upsert_records(db, record_type.model, tenant_id, [row])
    if record_type.model is FinanceInvestment:
        await resolve_investment_links(db, tenant_id, [record.external_id])
    await db.commit()

    if mirror is not None and record_type.has_assets:
        await mirror_assets(db, mirror, record_type, tenant_id, {record.external_id: source_url})

    logger.info("Created %s record %s for %s", logical_type, record.external_id, tenant_id)
    local = await get_record(db, record_type.model, tenant_id, record.external_id)
    await db.refresh(local)
    return local
