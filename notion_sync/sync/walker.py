"""Cursor pagination over a source database query."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .errors import PaginationProtocolViolation

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 1000


@dataclass
class ExternalRecord:
    """One source page, alive only for the duration of a pass."""

    external_id: str
    external_database_id: str
    raw_properties: dict[str, Any] = field(default_factory=dict)
    icon: dict | None = None
    last_edited_time: str | None = None

    @classmethod
    def from_page(cls, page: dict[str, Any], database_id: str) -> "ExternalRecord":
        props = page.get("properties")
        icon = page.get("icon")
        edited = page.get("last_edited_time")
        return cls(
            external_id=str(page["id"]),
            external_database_id=database_id,
            raw_properties=props if isinstance(props, dict) else {},
            icon=icon if isinstance(icon, dict) else None,
            last_edited_time=edited if isinstance(edited, str) else None,
        )


async def walk(
    source,
    database_id: str,
    *,
    page_size: int = 100,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> list[ExternalRecord]:
    """Fetch every record of a database, or fail.

    Never returns a partial set: a fetch error propagates (SourceUnavailable),
    and a cursor that stalls or a walk that exceeds ``max_pages`` raises
    PaginationProtocolViolation.
    """
    records: list[ExternalRecord] = []
    cursor: str | None = None
    pages = 0

    while True:
        if pages >= max_pages:
            raise PaginationProtocolViolation(
                f"database {database_id} exceeded {max_pages} pages"
            )

        resp = await source.databases.query(database_id, start_cursor=cursor, page_size=page_size)
        pages += 1

        for page in resp.get("results") or []:
            if isinstance(page, dict) and page.get("id") and not page.get("archived"):
                records.append(ExternalRecord.from_page(page, database_id))

        if not resp.get("has_more"):
            break

        next_cursor = resp.get("next_cursor")
        if not isinstance(next_cursor, str) or not next_cursor:
            raise PaginationProtocolViolation(
                f"database {database_id} reported more pages without a cursor"
            )
        if next_cursor == cursor:
            raise PaginationProtocolViolation(
                f"database {database_id} returned a stalled cursor after {pages} pages"
            )
        cursor = next_cursor

    logger.debug("Walked %s: %d records over %d pages", database_id, len(records), pages)
    return records
