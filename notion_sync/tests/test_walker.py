"""Tests for cursor pagination."""

from __future__ import annotations

import pytest

from notion_sync.sync.errors import PaginationProtocolViolation, SourceUnavailable
from notion_sync.sync.walker import walk

from notion_sync.tests.factories import PEOPLE_DB, PEOPLE_PROPERTIES, person_page


class ScriptedDatabases:
    def __init__(self, responses):
        self.responses = list(responses)
        self.cursors = []

    async def query(self, database_id, start_cursor=None, page_size=100, filter=None):
        self.cursors.append(start_cursor)
        return self.responses.pop(0)


class ScriptedSource:
    def __init__(self, responses):
        self.databases = ScriptedDatabases(responses)


@pytest.mark.asyncio
async def test_walks_every_page(notion):
    notion.add_database(PEOPLE_DB, "People", PEOPLE_PROPERTIES)
    for i in range(5):
        notion.add_page(PEOPLE_DB, person_page(f"r{i}", f"P{i}"))

    records = await walk(notion, PEOPLE_DB, page_size=2)
    assert [r.external_id for r in records] == ["r0", "r1", "r2", "r3", "r4"]
    assert notion.query_calls == 3
    assert records[0].external_database_id == PEOPLE_DB


@pytest.mark.asyncio
async def test_archived_pages_are_skipped():
    source = ScriptedSource([
        {"results": [{"id": "a", "properties": {}}, {"id": "b", "archived": True}], "has_more": False},
    ])
    records = await walk(source, "db")
    assert [r.external_id for r in records] == ["a"]


@pytest.mark.asyncio
async def test_stalled_cursor_is_a_protocol_violation():
    source = ScriptedSource([
        {"results": [{"id": "a"}], "has_more": True, "next_cursor": "c1"},
        {"results": [{"id": "b"}], "has_more": True, "next_cursor": "c1"},
    ])
    with pytest.raises(PaginationProtocolViolation):
        await walk(source, "db")
    assert source.databases.cursors == [None, "c1"]


@pytest.mark.asyncio
async def test_more_without_cursor_is_a_protocol_violation():
    source = ScriptedSource([{"results": [], "has_more": True, "next_cursor": None}])
    with pytest.raises(PaginationProtocolViolation):
        await walk(source, "db")


@pytest.mark.asyncio
async def test_page_ceiling():
    source = ScriptedSource([
        {"results": [{"id": f"r{i}"}], "has_more": True, "next_cursor": f"c{i}"} for i in range(5)
    ])
    with pytest.raises(PaginationProtocolViolation, match="exceeded 3 pages"):
        await walk(source, "db", max_pages=3)


@pytest.mark.asyncio
async def test_fetch_failure_propagates(notion):
    notion.add_database(PEOPLE_DB, "People", PEOPLE_PROPERTIES)
    for i in range(4):
        notion.add_page(PEOPLE_DB, person_page(f"r{i}", f"P{i}"))
    notion.fail_on_query_call = 2

    with pytest.raises(SourceUnavailable):
        await walk(notion, PEOPLE_DB, page_size=2)
