"""In-memory stand-in for the Notion workspace plus property payload builders."""

from __future__ import annotations

import copy
import uuid
from typing import Any

from notion_sync.sync.errors import SourceUnavailable

PEOPLE_DB = "0f1e2d3c-4b5a-6978-8695-a4b3c2d1e0f9"
MEDIA_DB = "11111111-2222-3333-4444-555555555555"
TODOS_DB = "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

PEOPLE_PROPERTIES = {
    "Name": {"id": "title", "name": "Name", "type": "title"},
    "Tier": {"id": "t1", "name": "Tier", "type": "multi_select"},
    "Image": {"id": "i1", "name": "Image", "type": "files"},
    "Age": {"id": "a1", "name": "Age", "type": "number"},
    "Vibe": {"id": "v1", "name": "Vibe", "type": "rich_text"},
}

MEDIA_PROPERTIES = {
    "Name": {"id": "title", "name": "Name", "type": "title"},
    "Type": {"id": "c1", "name": "Type", "type": "select"},
    "Thumbnail": {"id": "th", "name": "Thumbnail", "type": "files"},
    "URL": {"id": "u1", "name": "URL", "type": "url"},
}


# ---------------------------------------------------------------------------
# Property payload builders
# ---------------------------------------------------------------------------


def title(text: str) -> dict:
    return {"type": "title", "title": [{"type": "text", "plain_text": text, "text": {"content": text}}]}


def rich_text(text: str) -> dict:
    return {"type": "rich_text", "rich_text": [{"type": "text", "plain_text": text}]}


def select(name: str | None) -> dict:
    return {"type": "select", "select": {"name": name} if name else None}


def multi_select(*names: str) -> dict:
    return {"type": "multi_select", "multi_select": [{"name": n} for n in names]}


def number(value) -> dict:
    return {"type": "number", "number": value}


def date(start: str | None) -> dict:
    return {"type": "date", "date": {"start": start} if start else None}


def files(*urls: str) -> dict:
    return {
        "type": "files",
        "files": [{"name": u.rsplit("/", 1)[-1], "type": "external", "external": {"url": u}} for u in urls],
    }


def relation(*ids: str) -> dict:
    return {"type": "relation", "relation": [{"id": i} for i in ids]}


def url(value: str | None) -> dict:
    return {"type": "url", "url": value}


def page(page_id: str, properties: dict[str, Any], *, icon: dict | None = None, archived: bool = False) -> dict:
    return {
        "object": "page",
        "id": page_id,
        "archived": archived,
        "icon": icon,
        "properties": properties,
        "last_edited_time": "2026-01-01T00:00:00.000Z",
    }


def person_page(page_id: str, name: str, *, image: str | None = None, tier: tuple[str, ...] = ()) -> dict:
    props = {"Name": title(name), "Tier": multi_select(*tier), "Age": number(30), "Vibe": rich_text("calm")}
    props["Image"] = files(image) if image else files()
    return page(page_id, props)


# ---------------------------------------------------------------------------
# Fake source
# ---------------------------------------------------------------------------


class FakeDatabases:
    def __init__(self, notion: "FakeNotion"):
        self._notion = notion

    async def retrieve(self, database_id: str) -> dict[str, Any]:
        db = self._notion.get_database(database_id)
        return {
            "object": "database",
            "id": db["id"],
            "title": [{"type": "text", "plain_text": db["title"]}],
            "properties": copy.deepcopy(db["properties"]),
        }

    async def query(self, database_id: str, start_cursor: str | None = None, page_size: int = 100, filter=None):
        self._notion.query_calls += 1
        if self._notion.fail_on_query_call == self._notion.query_calls:
            raise SourceUnavailable(f"POST /databases/{database_id}/query failed (502)", status_code=502)

        rows = self._notion.get_database(database_id)["pages"]
        offset = int(start_cursor) if start_cursor else 0
        chunk = rows[offset:offset + page_size]
        has_more = offset + page_size < len(rows)
        return {
            "object": "list",
            "results": copy.deepcopy(chunk),
            "has_more": has_more,
            "next_cursor": str(offset + page_size) if has_more else None,
        }


class FakePages:
    def __init__(self, notion: "FakeNotion"):
        self._notion = notion

    async def retrieve(self, page_id: str) -> dict[str, Any]:
        for db in self._notion.databases_by_key.values():
            for p in db["pages"]:
                if p["id"] == page_id:
                    found = copy.deepcopy(p)
                    found["parent"] = {"type": "database_id", "database_id": db["id"]}
                    return found
        raise SourceUnavailable(f"GET /pages/{page_id} failed (404)", status_code=404)

    async def create(self, database_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        db = self._notion.get_database(database_id)
        props = copy.deepcopy(properties)
        for key, value in props.items():
            value["type"] = db["properties"][key]["type"]
        created = page(str(uuid.uuid4()), props)
        db["pages"].append(created)
        self._notion.created.append((database_id, properties))
        return copy.deepcopy(created)

    async def update(self, page_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        for db in self._notion.databases_by_key.values():
            for p in db["pages"]:
                if p["id"] == page_id:
                    p["properties"].update(copy.deepcopy(properties))
                    return copy.deepcopy(p)
        raise SourceUnavailable(f"PATCH /pages/{page_id} failed (404)", status_code=404)


class FakeNotion:
    """Mirrors the ``databases``/``pages`` shape of NotionClient."""

    def __init__(self):
        self.databases_by_key: dict[str, dict] = {}
        self.query_calls = 0
        self.fail_on_query_call: int | None = None
        self.created: list[tuple[str, dict]] = []
        self._databases = FakeDatabases(self)
        self._pages = FakePages(self)

    @property
    def databases(self) -> FakeDatabases:
        return self._databases

    @property
    def pages(self) -> FakePages:
        return self._pages

    def add_database(self, database_id: str, db_title: str, properties: dict[str, Any]) -> dict:
        db = {"id": database_id, "title": db_title, "properties": copy.deepcopy(properties), "pages": []}
        self.databases_by_key[database_id.replace("-", "")] = db
        return db

    def get_database(self, database_id: str) -> dict:
        db = self.databases_by_key.get(database_id.replace("-", ""))
        if db is None:
            raise SourceUnavailable(f"GET /databases/{database_id} failed (404)", status_code=404)
        return db

    def add_page(self, database_id: str, new_page: dict) -> dict:
        self.get_database(database_id)["pages"].append(new_page)
        return new_page

    def remove_page(self, database_id: str, page_id: str) -> None:
        db = self.get_database(database_id)
        db["pages"] = [p for p in db["pages"] if p["id"] != page_id]
