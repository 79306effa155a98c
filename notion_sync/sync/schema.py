"""Schema introspection - a source database's live property schema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PropertySchema:
    key: str
    declared_type: str
    display_name: str
    # Relation target database, when declared_type == "relation".
    relation_database_id: str | None = None


@dataclass(frozen=True)
class DatabaseSchema:
    database_id: str
    title: str
    # Declaration order is preserved; the field mapper relies on it for tie-breaks.
    properties: dict[str, PropertySchema]

    def to_json(self) -> dict[str, dict[str, Any]]:
        out: dict[str, dict[str, Any]] = {}
        for key, prop in self.properties.items():
            entry: dict[str, Any] = {"type": prop.declared_type, "name": prop.display_name}
            if prop.relation_database_id:
                entry["relation_database_id"] = prop.relation_database_id
            out[key] = entry
        return out


def _title_text(runs: Any) -> str:
    if not isinstance(runs, list):
        return ""
    return "".join(
        r.get("plain_text", "") for r in runs if isinstance(r, dict) and isinstance(r.get("plain_text"), str)
    )


def introspect(database: dict[str, Any]) -> DatabaseSchema:
    """Parse a retrieved database payload into an ordered property schema."""
    props = database.get("properties") or {}
    properties: dict[str, PropertySchema] = {}
    if isinstance(props, dict):
        for key, raw in props.items():
            if not isinstance(raw, dict):
                continue
            declared_type = raw.get("type")
            if not isinstance(declared_type, str):
                declared_type = "unknown"
            name = raw.get("name")
            relation_db = None
            if declared_type == "relation" and isinstance(raw.get("relation"), dict):
                relation_db = raw["relation"].get("database_id")
            properties[key] = PropertySchema(
                key=key,
                declared_type=declared_type,
                display_name=name if isinstance(name, str) and name else key,
                relation_database_id=relation_db if isinstance(relation_db, str) else None,
            )

    return DatabaseSchema(
        database_id=str(database.get("id") or ""),
        title=_title_text(database.get("title")),
        properties=properties,
    )


def schema_from_json(database_id: str, title: str, stored: dict | None) -> DatabaseSchema:
    """Rebuild a schema from the JSON cached on a link."""
    properties: dict[str, PropertySchema] = {}
    for key, entry in (stored or {}).items():
        if not isinstance(entry, dict):
            continue
        properties[key] = PropertySchema(
            key=key,
            declared_type=str(entry.get("type") or "unknown"),
            display_name=str(entry.get("name") or key),
            relation_database_id=entry.get("relation_database_id"),
        )
    return DatabaseSchema(database_id=database_id, title=title, properties=properties)


async def list_database_schema(source, database_id: str) -> DatabaseSchema:
    """Fetch and parse the live schema. Fetch failures surface as SourceUnavailable."""
    payload = await source.databases.retrieve(database_id)
    return introspect(payload)
