"""Database link schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel


class LinkCreate(BaseModel):
    database_id: str
    display_name: str | None = None
    type_tag: str | None = None
    period: str | None = None


class LinkResponse(BaseModel):
    id: uuid.UUID
    tenant_id: str
    external_database_id: str
    display_name: str | None = None
    type_tag: str | None = None
    period: str | None = None
    logical_type: str | None = None
    last_sync_at: datetime | None = None

    model_config = {"from_attributes": True}
