"""Database discovery - which linked source database is which logical type.

Classification is a priority-ordered rule table evaluated once per link and
cached on ``TenantDatabaseLink.logical_type``; it is re-run only when a link
is created or explicitly refreshed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import TRACKING_PERIODS, TenantDatabaseLink, normalize_database_id
from .errors import TenantNotConfigured
from .record_types import LOGICAL_TYPES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveryRule:
    predicate: Callable[[TenantDatabaseLink], bool]
    logical_type: str


def _name(link: TenantDatabaseLink) -> str:
    return (link.display_name or "").strip().lower()


def _name_has(*tokens: str) -> Callable[[TenantDatabaseLink], bool]:
    return lambda link: any(t in _name(link) for t in tokens)


def _tracking_name(period: str) -> Callable[[TenantDatabaseLink], bool]:
    return lambda link: "tracking" in _name(link) and period in _name(link)


def _build_rules() -> list[DiscoveryRule]:
    rules: list[DiscoveryRule] = []
    # Explicit tags always win over names.
    for logical_type in LOGICAL_TYPES:
        rules.append(DiscoveryRule(lambda link, lt=logical_type: link.type_tag == lt, logical_type))
    for period in TRACKING_PERIODS:
        rules.append(DiscoveryRule(lambda link, p=period: link.period == p, f"tracking_{period}"))

    rules.append(DiscoveryRule(_name_has("people"), "people"))
    rules.append(DiscoveryRule(_name_has("media"), "media"))
    rules.append(DiscoveryRule(_name_has("to-do", "todo", "action", "task"), "todos"))
    for period in TRACKING_PERIODS:
        rules.append(DiscoveryRule(_tracking_name(period), f"tracking_{period}"))
    rules.append(DiscoveryRule(_name_has("asset"), "finances_assets"))
    rules.append(DiscoveryRule(_name_has("place", "net worth"), "finances_places"))
    rules.append(DiscoveryRule(_name_has("investment"), "finances_investments"))
    return rules


DISCOVERY_RULES: list[DiscoveryRule] = _build_rules()


def classify_link(link: TenantDatabaseLink) -> str | None:
    for rule in DISCOVERY_RULES:
        if rule.predicate(link):
            return rule.logical_type
    return None


def refresh_classification(link: TenantDatabaseLink) -> str | None:
    link.logical_type = classify_link(link)
    return link.logical_type


async def find_link_for_type(
    db: AsyncSession,
    tenant_id: str,
    logical_type: str,
) -> TenantDatabaseLink:
    result = await db.execute(
        select(TenantDatabaseLink)
        .where(
            TenantDatabaseLink.tenant_id == tenant_id,
            TenantDatabaseLink.logical_type == logical_type,
        )
        .order_by(TenantDatabaseLink.created_at)
    )
    link = result.scalars().first()
    if link is None:
        raise TenantNotConfigured(tenant_id, logical_type)
    return link


@dataclass(frozen=True)
class LinkMatch:
    tenant_id: str
    logical_type: str
    external_database_id: str
    link: TenantDatabaseLink | None = None


def _declares_media_relation(link: TenantDatabaseLink, key: str) -> bool:
    for entry in (link.declared_schema or {}).values():
        if not isinstance(entry, dict) or entry.get("type") != "relation":
            continue
        if "media" not in str(entry.get("name") or "").lower():
            continue
        if normalize_database_id(entry.get("relation_database_id")) == key:
            return True
    return False


async def find_links_for_database(db: AsyncSession, database_id: str) -> list[LinkMatch]:
    """Every tenant whose links resolve ``database_id``, dashes or not.

    A tenant that has not linked the database itself but relates to it
    through a property named "media" is matched as its media database.
    """
    key = normalize_database_id(database_id)
    if not key:
        return []

    result = await db.execute(
        select(TenantDatabaseLink).where(TenantDatabaseLink.database_key == key)
    )
    matches: list[LinkMatch] = []
    matched_tenants: set[str] = set()
    for link in result.scalars().all():
        if not link.logical_type:
            continue
        matched_tenants.add(link.tenant_id)
        matches.append(LinkMatch(link.tenant_id, link.logical_type, link.external_database_id, link))

    result = await db.execute(
        select(TenantDatabaseLink).where(TenantDatabaseLink.logical_type.is_not(None))
    )
    for link in result.scalars().all():
        if link.tenant_id in matched_tenants:
            continue
        if _declares_media_relation(link, key):
            matched_tenants.add(link.tenant_id)
            matches.append(LinkMatch(link.tenant_id, "media", database_id))

    if not matches:
        logger.info("No tenant links database %s", database_id)
    return matches
