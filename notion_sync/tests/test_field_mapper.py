"""Tests for the schema-driven field mapper."""

from __future__ import annotations

import pytest

from notion_sync.sync.field_mapper import apply_plan, build_field_plan, build_source_properties
from notion_sync.sync.record_types import PEOPLE_RULES, TODO_RULES
from notion_sync.sync.schema import introspect

from notion_sync.tests.factories import date, files, multi_select, number, rich_text, title


def _schema(properties: dict) -> object:
    return introspect({"id": "db1", "title": [{"plain_text": "People"}], "properties": properties})


PEOPLE_SCHEMA = {
    "Full Name": {"name": "Full Name", "type": "title"},
    "Tier": {"name": "Tier", "type": "multi_select"},
    "Tier (old)": {"name": "Tier (old)", "type": "multi_select"},
    "Photo": {"name": "Photo", "type": "files"},
    "Vibe": {"name": "Vibe", "type": "rich_text"},
    "Click me": {"name": "Click me", "type": "button"},
}


def test_title_property_claims_title_column_whatever_its_name():
    schema = _schema(PEOPLE_SCHEMA)
    plan = build_field_plan(schema, list(PEOPLE_RULES), title_column="name")
    assert plan.assignments["Full Name"].column == "name"


def test_first_matching_property_wins_and_the_rest_overflow():
    schema = _schema(PEOPLE_SCHEMA)
    plan = build_field_plan(schema, list(PEOPLE_RULES), title_column="name")
    assert plan.assignments["Tier"].column == "tier"
    assert "Tier (old)" in plan.overflow_keys
    assert plan.assignments["Photo"].column == "image"


def test_unknown_types_are_reported_and_kept_in_overflow():
    schema = _schema(PEOPLE_SCHEMA)
    plan = build_field_plan(schema, list(PEOPLE_RULES), title_column="name")
    assert plan.unrecognized == ["Click me"]

    mapped = apply_plan(plan, schema, {"Click me": {"type": "button", "button": {}}})
    assert mapped.overflow["Click me"] == {"type": "button", "value": None}


def test_mapping_is_total():
    schema = _schema(PEOPLE_SCHEMA)
    plan = build_field_plan(schema, list(PEOPLE_RULES), title_column="name")
    raw = {
        "Full Name": title("Ada"),
        "Tier": multi_select("Close", "Work"),
        "Tier (old)": multi_select("Legacy"),
        "Photo": files("https://img.test/ada.png"),
        "Vibe": rich_text("curious"),
    }
    mapped = apply_plan(plan, schema, raw)

    assert mapped.canonical["name"] == "Ada"
    assert mapped.canonical["tier"] == ["Close", "Work"]
    assert mapped.canonical["image"] == [{"name": "ada.png", "url": "https://img.test/ada.png"}]
    assert mapped.overflow["Tier (old)"] == {"type": "multi_select", "value": ["Legacy"]}
    assert mapped.overflow["Vibe"] == {"type": "rich_text", "value": "curious"}
    for key in schema.properties:
        assert (key in plan.assignments) != (key in mapped.overflow)


def test_unmatched_columns_are_none_and_extra_raw_keys_overflow():
    schema = _schema(PEOPLE_SCHEMA)
    plan = build_field_plan(schema, list(PEOPLE_RULES), title_column="name")
    mapped = apply_plan(plan, schema, {"Added later": number(4)})
    assert mapped.canonical["star_sign"] is None
    assert mapped.canonical["name"] is None
    assert mapped.overflow["Added later"] == {"type": "number", "value": 4}


def test_type_restricted_rules():
    schema = _schema({
        "Task": {"name": "Task", "type": "title"},
        "Do Date": {"name": "Do Date", "type": "date"},
        "Due": {"name": "Due", "type": "date"},
        "Due note": {"name": "Due note", "type": "rich_text"},
    })
    plan = build_field_plan(schema, list(TODO_RULES), title_column="title")
    mapped = apply_plan(plan, schema, {"Do Date": date("2026-05-01"), "Due": date("2026-05-03")})
    assert mapped.canonical["do_date"] == "2026-05-01"
    assert mapped.canonical["due_date"] == "2026-05-03"
    assert "Due note" in plan.overflow_keys


def test_build_source_properties():
    schema = _schema(PEOPLE_SCHEMA)
    plan = build_field_plan(schema, list(PEOPLE_RULES), title_column="name")
    props = build_source_properties(plan, schema, {"name": "Grace", "tier": ["Close"]})
    assert props["Full Name"] == {"title": [{"type": "text", "text": {"content": "Grace"}}]}
    assert props["Tier"] == {"multi_select": [{"name": "Close"}]}


def test_build_source_properties_rejects_unmapped_columns():
    schema = _schema(PEOPLE_SCHEMA)
    plan = build_field_plan(schema, list(PEOPLE_RULES), title_column="name")
    with pytest.raises(ValueError, match="star_sign"):
        build_source_properties(plan, schema, {"star_sign": "Leo"})
