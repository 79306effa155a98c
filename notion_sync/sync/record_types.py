"""Logical record types: local table, column rules, asset source, bucket."""

from __future__ import annotations

from dataclasses import dataclass

from ..models import (
    FinanceAsset,
    FinanceInvestment,
    FinancePlace,
    Media,
    Person,
    Todo,
    TrackingEntry,
    TRACKING_PERIODS,
)
from .field_mapper import FieldRule


@dataclass(frozen=True)
class RecordType:
    logical_type: str
    model: type
    title_column: str
    rules: tuple[FieldRule, ...]
    # Where the record's image comes from: a files-typed column, or the page icon.
    asset_column: str | None = None
    asset_from_icon: bool = False
    bucket: str | None = None
    # Single-record webhook upserts; investments need a full pass to resolve relations.
    narrow_updates: bool = True
    period: str | None = None

    @property
    def has_assets(self) -> bool:
        return self.bucket is not None and (self.asset_column is not None or self.asset_from_icon)


PEOPLE_RULES = (
    FieldRule("origin_of_connection", contains=("origin",), coerce="list"),
    FieldRule("star_sign", contains=("star sign", "zodiac"), coerce="text"),
    FieldRule("image", contains=("image", "photo", "picture", "avatar"), types=("files",)),
    FieldRule("currently_at", contains=("currently at", "works at", "company"), coerce="text"),
    FieldRule("age", equals=("age",), coerce="number"),
    FieldRule("tier", contains=("tier",), coerce="list"),
    FieldRule("occupation", contains=("occupation", "job"), coerce="text"),
    FieldRule("birth_date", contains=("birth date", "date of birth"), coerce="date"),
    FieldRule("birthday", contains=("birthday",), coerce="date"),
    FieldRule("contact_freq", contains=("contact freq", "frequency"), coerce="text"),
    FieldRule("from_location", equals=("from",), contains=("hometown", "from location"), coerce="text"),
    FieldRule("nicknames", contains=("nickname",), coerce="list"),
)

MEDIA_RULES = (
    FieldRule("category", equals=("type",), contains=("category",), coerce="text"),
    FieldRule("status", types=("status",), any_name=True, coerce="text"),
    FieldRule("status", contains=("status",), coerce="text"),
    FieldRule("url", contains=("url", "link"), coerce="text"),
    FieldRule("by", equals=("by",), contains=("author", "creator"), coerce="list"),
    FieldRule("topic", contains=("topic",), coerce="list"),
    FieldRule("thumbnail", contains=("thumbnail", "cover", "image"), types=("files",)),
    FieldRule("ai_synopsis", contains=("synopsis", "synopsys", "summary"), coerce="text"),
    FieldRule("created", contains=("created",), types=("date", "created_time"), coerce="date"),
    FieldRule("related_external_ids", contains=("related",), types=("relation",), coerce="list"),
)

TODO_RULES = (
    FieldRule("status", types=("status",), any_name=True, coerce="text"),
    FieldRule("status", contains=("status",), coerce="text"),
    FieldRule("priority", contains=("priority",), types=("select",), coerce="text"),
    FieldRule("do_date", contains=("do",), excludes=("due",), types=("date",), coerce="date"),
    FieldRule("due_date", contains=("due",), types=("date",), coerce="date"),
    FieldRule("mega_tags", contains=("tag",), types=("multi_select",), coerce="list"),
    FieldRule("assignee", contains=("assign",), types=("people",), coerce="list"),
    FieldRule("gcal_id", contains=("gcal",), coerce="text"),
    FieldRule("duration_hours", contains=("duration", "hour"), types=("formula", "number"), coerce="number"),
    FieldRule("start_date", contains=("start",), excludes=("end",), types=("formula", "date"), coerce="date"),
    FieldRule("end_date", contains=("end",), types=("formula", "date"), coerce="date"),
    FieldRule("projects", contains=("project",), types=("relation",), coerce="list"),
)

FINANCE_ASSET_RULES = (
    FieldRule("symbol", equals=("ticker", "symbol"), coerce="text"),
    FieldRule("current_price", equals=("price",), contains=("current price",), coerce="number"),
    FieldRule("summary", equals=("summary",), coerce="text"),
    FieldRule("currency", contains=("currency",), coerce="text"),
)

FINANCE_PLACE_RULES = (
    FieldRule("place_type", equals=("tags", "type"), coerce="first"),
    FieldRule("balance", contains=("value [bank]", "balance"), coerce="number"),
    FieldRule("total_value", contains=("value [usd]", "total"), coerce="number"),
    FieldRule("currency", contains=("currency",), coerce="text"),
)

FINANCE_INVESTMENT_RULES = (
    FieldRule("asset_external_id", equals=("asset",), types=("relation",), coerce="first"),
    FieldRule(
        "place_external_id",
        equals=("facet in nw", "facets in nw", "place"),
        types=("relation",),
        coerce="first",
    ),
    FieldRule("quantity", equals=("units", "quantity", "qty"), coerce="number"),
    FieldRule("purchase_price", equals=("price at buy", "purchase price", "buy price"), coerce="number"),
    FieldRule("purchase_date", equals=("date", "purchase date", "buy date"), coerce="date"),
    FieldRule("current_value", equals=("result", "current value", "value"), coerce="number"),
    FieldRule("current_price", equals=("current price", "price"), coerce="number"),
)

TRACKING_RULES = (
    FieldRule("entry_date", contains=("date", "day", "week", "month", "quarter", "year"), types=("date",), coerce="date"),
)


def _build_registry() -> dict[str, RecordType]:
    types = [
        RecordType(
            "people", Person, "name", PEOPLE_RULES,
            asset_column="image", bucket="people-images",
        ),
        RecordType(
            "media", Media, "name", MEDIA_RULES,
            asset_column="thumbnail", bucket="media-thumbnails",
        ),
        RecordType("todos", Todo, "title", TODO_RULES),
        RecordType(
            "finances_assets", FinanceAsset, "name", FINANCE_ASSET_RULES,
            asset_from_icon=True, bucket="finances-icons",
        ),
        RecordType(
            "finances_places", FinancePlace, "name", FINANCE_PLACE_RULES,
            asset_from_icon=True, bucket="finances-place-icons",
        ),
        RecordType(
            "finances_investments", FinanceInvestment, "name", FINANCE_INVESTMENT_RULES,
            narrow_updates=False,
        ),
    ]
    for period in TRACKING_PERIODS:
        types.append(
            RecordType(f"tracking_{period}", TrackingEntry, "title", TRACKING_RULES, period=period)
        )
    return {rt.logical_type: rt for rt in types}


RECORD_TYPES: dict[str, RecordType] = _build_registry()
LOGICAL_TYPES: tuple[str, ...] = tuple(RECORD_TYPES)


def get_record_type(logical_type: str) -> RecordType:
    try:
        return RECORD_TYPES[logical_type]
    except KeyError:
        raise ValueError(f"Unknown logical type: {logical_type}") from None
