"""Reconciliation diff between stored and freshly walked external ids."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class DiffResult:
    added: list[str]
    removed: list[str]
    unchanged: list[str]


def diff_ids(previous: Iterable[str], current: Iterable[str]) -> DiffResult:
    """added = current - previous, removed = previous - current."""
    prev = set(previous)
    curr = set(current)
    return DiffResult(
        added=sorted(curr - prev),
        removed=sorted(prev - curr),
        unchanged=sorted(prev & curr),
    )
