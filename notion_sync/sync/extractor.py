"""Property value extraction - raw source property payload -> plain Python value.

Every declared property type has exactly one rule. ``extract`` is total: it
never raises, whatever shape the payload has. Unknown property types (the
source adds new kinds over time) normalize to None and the caller reports
them as schema drift.
"""

from __future__ import annotations

from typing import Any, Callable


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _first_plain_text(runs: Any) -> str:
    for run in _as_list(runs)[:1]:
        text = _as_dict(run).get("plain_text")
        if isinstance(text, str):
            return text
        content = _as_dict(_as_dict(run).get("text")).get("content")
        if isinstance(content, str):
            return content
    return ""


def _option_name(option: Any) -> str | None:
    name = _as_dict(option).get("name")
    return name if isinstance(name, str) and name else None


def _date_start(value: Any) -> str | None:
    start = _as_dict(value).get("start")
    return start if isinstance(start, str) and start else None


def _ids(items: Any) -> list[str]:
    out: list[str] = []
    for item in _as_list(items):
        item_id = _as_dict(item).get("id")
        if isinstance(item_id, str) and item_id:
            out.append(item_id)
    return out


def _string_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def file_url(file_obj: Any) -> str | None:
    """URL of a single file reference (uploaded or external)."""
    obj = _as_dict(file_obj)
    kind = obj.get("type")
    if kind in ("file", "external"):
        url = _as_dict(obj.get(kind)).get("url")
        if isinstance(url, str) and url:
            return url
    for key in ("file", "external"):
        url = _as_dict(obj.get(key)).get("url")
        if isinstance(url, str) and url:
            return url
    url = obj.get("url")
    return url if isinstance(url, str) and url else None


def first_file_url(files: Any) -> str | None:
    """First usable URL from an extracted ``files`` value."""
    for item in _as_list(files):
        url = file_url(item)
        if url:
            return url
    return None


def page_icon_url(icon: Any) -> str | None:
    """URL of a page icon; emoji icons have none."""
    obj = _as_dict(icon)
    if obj.get("type") == "emoji":
        return None
    return file_url(obj)


def _files(raw: dict) -> list[dict]:
    out: list[dict] = []
    for item in _as_list(raw.get("files")):
        url = file_url(item)
        if not url:
            continue
        name = _as_dict(item).get("name")
        out.append({"name": name if isinstance(name, str) else None, "url": url})
    return out


def _formula(raw: dict) -> Any:
    result = _as_dict(raw.get("formula"))
    kind = result.get("type")
    if kind == "date":
        return _date_start(result.get("date"))
    if kind == "number":
        value = result.get("number")
        return value if _is_number(value) else None
    if kind == "string":
        return _string_or_none(result.get("string"))
    if kind == "boolean":
        value = result.get("boolean")
        return value if isinstance(value, bool) else None
    return None


def _rollup(raw: dict) -> Any:
    result = _as_dict(raw.get("rollup"))
    kind = result.get("type")
    if kind == "number":
        value = result.get("number")
        return value if _is_number(value) else None
    if kind == "date":
        return _date_start(result.get("date"))
    if kind == "array":
        values = []
        for item in _as_list(result.get("array")):
            item_type = _as_dict(item).get("type")
            if item_type == "rollup":
                continue
            value = extract(item, item_type) if isinstance(item_type, str) else None
            if value is None or value == [] or value == "":
                continue
            if isinstance(value, list):
                values.extend(value)
            else:
                values.append(value)
        return values
    return None


def _unique_id(raw: dict) -> Any:
    uid = _as_dict(raw.get("unique_id"))
    number = uid.get("number")
    if not _is_number(number):
        return None
    prefix = uid.get("prefix")
    if isinstance(prefix, str) and prefix:
        return f"{prefix}-{number}"
    return number


def _number(raw: dict) -> float | int | None:
    value = raw.get("number")
    return value if _is_number(value) else None


def _checkbox(raw: dict) -> bool:
    value = raw.get("checkbox")
    return value if isinstance(value, bool) else False


_EXTRACTORS: dict[str, Callable[[dict], Any]] = {
    "title": lambda raw: _first_plain_text(raw.get("title")),
    "rich_text": lambda raw: _first_plain_text(raw.get("rich_text")),
    "select": lambda raw: _option_name(raw.get("select")),
    "status": lambda raw: _option_name(raw.get("status")),
    "multi_select": lambda raw: [
        name for name in (_option_name(o) for o in _as_list(raw.get("multi_select"))) if name
    ],
    "date": lambda raw: _date_start(raw.get("date")),
    "number": _number,
    "checkbox": _checkbox,
    "people": lambda raw: _ids(raw.get("people")),
    "relation": lambda raw: _ids(raw.get("relation")),
    "formula": _formula,
    "rollup": _rollup,
    "url": lambda raw: _string_or_none(raw.get("url")),
    "email": lambda raw: _string_or_none(raw.get("email")),
    "phone_number": lambda raw: _string_or_none(raw.get("phone_number")),
    "files": _files,
    "created_time": lambda raw: _string_or_none(raw.get("created_time")),
    "last_edited_time": lambda raw: _string_or_none(raw.get("last_edited_time")),
    "unique_id": _unique_id,
}

# What a missing property extracts to, per type.
_EMPTY: dict[str, Any] = {
    "title": "",
    "rich_text": "",
    "multi_select": [],
    "people": [],
    "relation": [],
    "files": [],
    "checkbox": False,
}


def is_known_type(declared_type: str | None) -> bool:
    return isinstance(declared_type, str) and declared_type in _EXTRACTORS


def extract(raw_property: Any, declared_type: str | None) -> Any:
    """Normalize one raw property value according to its declared type."""
    if not isinstance(declared_type, str):
        return None
    handler = _EXTRACTORS.get(declared_type)
    if handler is None:
        return None
    if not isinstance(raw_property, dict):
        return _EMPTY.get(declared_type)
    return handler(raw_property)
