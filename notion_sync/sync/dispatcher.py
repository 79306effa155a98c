"""Change notification dispatch.

A notification names a record and (usually) its parent database. Handling is
a function of the source's current state, so duplicate or out-of-order
deliveries converge on the same local result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..schemas.sync import DispatchResult, TenantOutcome
from .discovery import find_links_for_database
from .errors import SourceUnavailable, SyncError
from .record_types import get_record_type
from .sync_engine import (
    delete_record_everywhere,
    delete_single_record,
    run_full_sync,
    upsert_single_record,
)

logger = logging.getLogger(__name__)

EVENT_KINDS = ("created", "updated", "deleted")

# Source event type -> kind
SOURCE_EVENT_KINDS: dict[str, str] = {
    "page.created": "created",
    "page.undeleted": "created",
    "page.properties_updated": "updated",
    "page.content_updated": "updated",
    "page.moved": "updated",
    "page.deleted": "deleted",
}


@dataclass(frozen=True)
class ChangeNotification:
    event_kind: str
    record_id: str
    external_database_id: str | None = None

    def __post_init__(self):
        if self.event_kind not in EVENT_KINDS:
            raise ValueError(f"Unsupported event kind: {self.event_kind}")


def _planned_action(event_kind: str, logical_type: str) -> str:
    if event_kind == "deleted":
        return "delete"
    if settings.webhook_narrow_updates and get_record_type(logical_type).narrow_updates:
        return "upsert"
    return "full_sync"


async def dispatch(
    db: AsyncSession,
    source,
    notification: ChangeNotification,
    *,
    mirror=None,
) -> DispatchResult:
    """Apply one notification for every tenant that links its database.

    Failures are recorded per tenant; ``DispatchResult.success`` is False if
    any tenant's handling failed.
    """
    result = DispatchResult(
        event_kind=notification.event_kind,
        record_id=notification.record_id,
        external_database_id=notification.external_database_id,
    )

    if notification.event_kind == "deleted" and not notification.external_database_id:
        try:
            for tenant_id, logical_type, deleted in await delete_record_everywhere(
                db, notification.record_id, mirror=mirror
            ):
                result.outcomes.append(
                    TenantOutcome(tenant_id=tenant_id, logical_type=logical_type, action="delete", affected=deleted)
                )
        except SyncError as e:
            logger.warning("Delete of %s failed: %s", notification.record_id, e)
            result.outcomes.append(
                TenantOutcome(tenant_id="*", logical_type="*", action="delete", success=False, error=str(e))
            )
        return result

    if not notification.external_database_id:
        logger.info("Notification for %s has no database; nothing to do", notification.record_id)
        return result

    for match in await find_links_for_database(db, notification.external_database_id):
        outcome = TenantOutcome(
            tenant_id=match.tenant_id,
            logical_type=match.logical_type,
            action=_planned_action(notification.event_kind, match.logical_type),
        )
        try:
            if outcome.action == "delete":
                outcome.affected = await delete_single_record(
                    db, match.tenant_id, match.logical_type, notification.record_id, mirror=mirror
                )
            elif outcome.action == "upsert":
                # An archived or vanished page turns into a delete.
                outcome.action, outcome.affected = await upsert_single_record(
                    db,
                    source,
                    match.tenant_id,
                    match.logical_type,
                    match.external_database_id,
                    notification.record_id,
                    mirror=mirror,
                )
            else:
                sync = await run_full_sync(
                    db, source, match.tenant_id, match.logical_type, mirror=mirror, link=match.link
                )
                outcome.affected = sync.synced
                outcome.success = sync.success
                outcome.error = sync.error
        except SyncError as e:
            logger.warning(
                "Dispatch %s for %s/%s failed: %s",
                notification.event_kind, match.tenant_id, match.logical_type, e,
            )
            outcome.success = False
            outcome.error = str(e)
        result.outcomes.append(outcome)

    return result


# ---------------------------------------------------------------------------
# Source event payloads
# ---------------------------------------------------------------------------


def is_verification_handshake(payload: dict) -> bool:
    """The one-time subscription payload carrying only ``verification_token``."""
    return payload.get("verification_token") is not None and len(payload) <= 2


def notification_from_event(payload: dict) -> ChangeNotification | None:
    """Build a notification from a source event, or None for events we ignore."""
    kind = SOURCE_EVENT_KINDS.get(payload.get("type") or "")
    entity = payload.get("entity") or {}
    if kind is None or not isinstance(entity, dict) or not entity.get("id"):
        return None
    if entity.get("type", "page") != "page":
        return None

    database_id = None
    data = payload.get("data")
    parent = data.get("parent") if isinstance(data, dict) else None
    if isinstance(parent, dict) and parent.get("type") == "database":
        database_id = parent.get("id")
    return ChangeNotification(event_kind=kind, record_id=entity["id"], external_database_id=database_id)


async def resolve_parent_database(source, record_id: str) -> str | None:
    """Look up the parent database of a page; None if it has none or is gone."""
    try:
        page = await source.pages.retrieve(record_id)
    except SourceUnavailable as e:
        logger.info("Could not resolve parent database for %s: %s", record_id, e)
        return None
    parent = page.get("parent") or {}
    return parent.get("database_id")
