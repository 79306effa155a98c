"""Tests for property value extraction."""

from __future__ import annotations

import pytest

from notion_sync.sync.extractor import extract, first_file_url, is_known_type, page_icon_url


def test_multi_select_names():
    raw = {"type": "multi_select", "multi_select": [{"name": "A"}, {"name": "B"}]}
    assert extract(raw, "multi_select") == ["A", "B"]


def test_missing_values_extract_to_empty_defaults():
    assert extract(None, "multi_select") == []
    assert extract(None, "title") == ""
    assert extract(None, "checkbox") is False
    assert extract(None, "number") is None
    assert extract(None, "select") is None


def test_unknown_type_is_none():
    assert extract({"type": "button", "button": {}}, "button") is None
    assert not is_known_type("button")
    assert is_known_type("rollup")


@pytest.mark.parametrize(
    "raw,declared_type",
    [
        ("not a dict", "title"),
        ({"title": "oops"}, "title"),
        ({"select": ["x"]}, "select"),
        ({"date": 12}, "date"),
        ({"formula": None}, "formula"),
        ({"rollup": {"type": "array", "array": "nope"}}, "rollup"),
        ({"files": [None, 3, {"type": "file"}]}, "files"),
        ({"people": [{"id": None}, "x"]}, "people"),
        (42, None),
    ],
)
def test_extract_never_raises(raw, declared_type):
    extract(raw, declared_type)


def test_scalar_types():
    assert extract({"title": [{"plain_text": "Ada"}, {"plain_text": " L"}]}, "title") == "Ada"
    assert extract({"rich_text": [{"text": {"content": "hi"}}]}, "rich_text") == "hi"
    assert extract({"select": {"name": "Book"}}, "select") == "Book"
    assert extract({"status": {"name": "Done"}}, "status") == "Done"
    assert extract({"date": {"start": "2026-02-01", "end": None}}, "date") == "2026-02-01"
    assert extract({"number": 3.5}, "number") == 3.5
    assert extract({"number": True}, "number") is None
    assert extract({"checkbox": True}, "checkbox") is True
    assert extract({"url": ""}, "url") is None
    assert extract({"email": "a@b.c"}, "email") == "a@b.c"


def test_people_and_relation_ids():
    assert extract({"people": [{"id": "u1"}, {"id": "u2"}]}, "people") == ["u1", "u2"]
    assert extract({"relation": [{"id": "p1"}]}, "relation") == ["p1"]


def test_formula_variants():
    assert extract({"formula": {"type": "number", "number": 2}}, "formula") == 2
    assert extract({"formula": {"type": "string", "string": "x"}}, "formula") == "x"
    assert extract({"formula": {"type": "date", "date": {"start": "2026-03-01"}}}, "formula") == "2026-03-01"
    assert extract({"formula": {"type": "boolean", "boolean": False}}, "formula") is False


def test_rollup_array_is_flattened():
    raw = {
        "rollup": {
            "type": "array",
            "array": [
                {"type": "multi_select", "multi_select": [{"name": "A"}]},
                {"type": "title", "title": [{"plain_text": "T"}]},
                {"type": "number", "number": None},
            ],
        }
    }
    assert extract(raw, "rollup") == ["A", "T"]
    assert extract({"rollup": {"type": "number", "number": 7}}, "rollup") == 7


def test_files_and_icons():
    raw = {
        "files": [
            {"name": "a.png", "type": "file", "file": {"url": "https://s3/a.png"}},
            {"name": "b.png", "type": "external", "external": {"url": "https://cdn/b.png"}},
        ]
    }
    value = extract(raw, "files")
    assert value == [
        {"name": "a.png", "url": "https://s3/a.png"},
        {"name": "b.png", "url": "https://cdn/b.png"},
    ]
    assert first_file_url(value) == "https://s3/a.png"
    assert page_icon_url({"type": "emoji", "emoji": "x"}) is None
    assert page_icon_url({"type": "external", "external": {"url": "https://i/x.svg"}}) == "https://i/x.svg"


def test_unique_id_with_prefix():
    assert extract({"unique_id": {"prefix": "TASK", "number": 12}}, "unique_id") == "TASK-12"
    assert extract({"unique_id": {"prefix": None, "number": 3}}, "unique_id") == 3
