"""Tests for the reconciliation diff."""

from __future__ import annotations

from notion_sync.sync.differ import diff_ids


def test_added_and_removed():
    result = diff_ids({"r1", "r2", "r3"}, ["r1", "r3", "r4"])
    assert result.added == ["r4"]
    assert result.removed == ["r2"]
    assert result.unchanged == ["r1", "r3"]


def test_empty_previous_adds_everything():
    result = diff_ids(set(), ["b", "a"])
    assert result.added == ["a", "b"]
    assert result.removed == []


def test_diff_is_bounded_by_inputs():
    previous = {"a", "b", "c"}
    current = {"c", "d"}
    result = diff_ids(previous, current)
    assert len(result.added) + len(result.removed) <= len(previous) + len(current)
    assert set(result.added) == current - previous
    assert set(result.removed) == previous - current
