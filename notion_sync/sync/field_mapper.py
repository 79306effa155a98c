"""Field mapping between source properties and local columns.

Source schemas are tenant-editable, so properties are matched to canonical
columns by fuzzy, case-insensitive rules on their display names (optionally
restricted by declared type). A plan is built from the live schema once per
pass and then applied to every record of that pass.

Mapping is total: every declared property lands in exactly one canonical
column or in the overflow bucket, keyed by its property key and tagged with
its declared type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from .extractor import extract, is_known_type
from .schema import DatabaseSchema, PropertySchema

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Value coercion into column shapes
# ---------------------------------------------------------------------------


def _to_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, list):
        parts = [str(v) for v in value if v is not None and v != ""]
        return ", ".join(parts) or None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_list(value: Any) -> list:
    if isinstance(value, list):
        return value
    if value is None or value == "":
        return []
    return [value]


def _to_number(value: Any) -> float | None:
    if isinstance(value, list):
        value = next((v for v in value if isinstance(v, (int, float, str))), None)
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", "").strip())
        except ValueError:
            return None
    return None


def _to_date(value: Any) -> str | None:
    if isinstance(value, list):
        value = next((v for v in value if isinstance(v, str) and v), None)
    return value if isinstance(value, str) and value else None


def _to_first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value if value != "" else None


def _to_raw(value: Any) -> Any:
    return value


COERCERS: dict[str, Callable[[Any], Any]] = {
    "text": _to_text,
    "list": _to_list,
    "number": _to_number,
    "date": _to_date,
    "first": _to_first,
    "raw": _to_raw,
}


# ---------------------------------------------------------------------------
# Rules and plans
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldRule:
    """One way a property can claim a canonical column.

    ``contains`` is substring matching on the lowercased display name;
    ``equals`` is for short tokens where substring matching is too loose.
    ``any_name`` matches on declared type alone.
    """

    column: str
    contains: tuple[str, ...] = ()
    equals: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    types: tuple[str, ...] | None = None
    any_name: bool = False
    coerce: str = "raw"

    def matches(self, prop: PropertySchema) -> bool:
        if self.types is not None and prop.declared_type not in self.types:
            return False
        name = prop.display_name.strip().lower()
        if any(token in name for token in self.excludes):
            return False
        if self.any_name:
            return True
        if name in self.equals:
            return True
        return any(token in name for token in self.contains)


@dataclass
class FieldPlan:
    title_column: str
    columns: list[str]
    # property key -> rule that claimed it
    assignments: dict[str, FieldRule] = field(default_factory=dict)
    overflow_keys: list[str] = field(default_factory=list)
    unrecognized: list[str] = field(default_factory=list)

    def property_for_column(self, column: str) -> str | None:
        for key, rule in self.assignments.items():
            if rule.column == column:
                return key
        return None


@dataclass
class MappedRecord:
    canonical: dict[str, Any]
    overflow: dict[str, dict[str, Any]]


def build_field_plan(
    schema: DatabaseSchema,
    rules: list[FieldRule],
    *,
    title_column: str,
) -> FieldPlan:
    """Decide, for every property of ``schema``, its column or overflow."""
    columns = [title_column]
    for rule in rules:
        if rule.column not in columns:
            columns.append(rule.column)

    plan = FieldPlan(title_column=title_column, columns=columns)
    claimed: set[str] = set()

    title_key = next(
        (key for key, prop in schema.properties.items() if prop.declared_type == "title"),
        None,
    )
    if title_key is not None:
        plan.assignments[title_key] = FieldRule(title_column, coerce="text")
        claimed.add(title_column)

    for key, prop in schema.properties.items():
        if key == title_key:
            continue
        if not is_known_type(prop.declared_type):
            plan.unrecognized.append(key)
            plan.overflow_keys.append(key)
            continue

        for rule in rules:
            if rule.column in claimed:
                continue
            if rule.matches(prop):
                plan.assignments[key] = rule
                claimed.add(rule.column)
                break
        else:
            plan.overflow_keys.append(key)

    if plan.unrecognized:
        logger.info("Unrecognized property types kept in overflow: %s", plan.unrecognized)
    return plan


def apply_plan(
    plan: FieldPlan,
    schema: DatabaseSchema,
    raw_properties: dict[str, Any] | None,
) -> MappedRecord:
    """Map one record's raw properties through a plan."""
    raw_properties = raw_properties if isinstance(raw_properties, dict) else {}
    canonical: dict[str, Any] = {column: None for column in plan.columns}
    overflow: dict[str, dict[str, Any]] = {}

    for key, prop in schema.properties.items():
        value = extract(raw_properties.get(key), prop.declared_type)
        rule = plan.assignments.get(key)
        if rule is not None:
            canonical[rule.column] = COERCERS[rule.coerce](value)
        else:
            overflow[key] = {"type": prop.declared_type, "value": value}

    # Properties the record carries but the schema snapshot predates.
    for key, raw in raw_properties.items():
        if key in schema.properties:
            continue
        declared_type = raw.get("type") if isinstance(raw, dict) else None
        overflow[key] = {
            "type": declared_type if isinstance(declared_type, str) else "unknown",
            "value": extract(raw, declared_type),
        }

    return MappedRecord(canonical=canonical, overflow=overflow)


# ---------------------------------------------------------------------------
# Reverse direction - only used when creating brand-new source records
# ---------------------------------------------------------------------------


def _rich(content: Any) -> list[dict]:
    text = "" if content is None else str(content)
    return [{"type": "text", "text": {"content": text}}] if text else []


def encode_value(value: Any, declared_type: str) -> dict[str, Any] | None:
    """Encode a plain value as a source property payload.

    Returns None for read-only or computed types (formula, rollup, ...).
    """
    if declared_type == "title":
        return {"title": _rich(value)}
    if declared_type == "rich_text":
        return {"rich_text": _rich(value)}
    if declared_type in ("select", "status"):
        return {declared_type: {"name": str(value)} if value else None}
    if declared_type == "multi_select":
        return {"multi_select": [{"name": str(v)} for v in _to_list(value) if v]}
    if declared_type == "date":
        start = _to_date(value)
        return {"date": {"start": start} if start else None}
    if declared_type == "number":
        return {"number": _to_number(value)}
    if declared_type == "checkbox":
        return {"checkbox": bool(value)}
    if declared_type in ("url", "email", "phone_number"):
        return {declared_type: str(value) if value else None}
    if declared_type in ("people", "relation"):
        return {declared_type: [{"id": str(v)} for v in _to_list(value) if v]}
    return None


def build_source_properties(
    plan: FieldPlan,
    schema: DatabaseSchema,
    values: dict[str, Any],
) -> dict[str, Any]:
    """Turn ``{column: value}`` into a source properties payload.

    Raises ValueError when a column has no writable source property in this
    tenant's schema.
    """
    properties: dict[str, Any] = {}
    unmapped: list[str] = []
    for column, value in values.items():
        key = plan.property_for_column(column)
        if key is None:
            unmapped.append(column)
            continue
        encoded = encode_value(value, schema.properties[key].declared_type)
        if encoded is None:
            unmapped.append(column)
            continue
        properties[key] = encoded

    if unmapped:
        raise ValueError(f"No writable source property for: {', '.join(sorted(unmapped))}")
    return properties
