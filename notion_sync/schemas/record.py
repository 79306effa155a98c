"""Record creation schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class RecordCreate(BaseModel):
    # Local column name -> value, e.g. {"name": "Ada", "tier": ["Close"]}
    values: dict[str, Any]
