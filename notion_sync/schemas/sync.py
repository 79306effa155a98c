"""Sync result schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SyncResult(BaseModel):
    success: bool = True
    logical_type: str | None = None
    phase: str = "fetching"
    synced: int = 0
    created: int = 0
    updated: int = 0
    added: int = 0
    removed: int = 0
    added_ids: list[str] = []
    removed_ids: list[str] = []
    # "success" or "error"; a failed delete step never undoes committed upserts.
    deletions: str = "success"
    assets_mirrored: int = 0
    unrecognized_properties: list[str] = []
    error: str | None = None
    errors: list[str] = []
    last_synced_at: datetime | None = None


class TenantOutcome(BaseModel):
    tenant_id: str
    logical_type: str
    action: str  # "upsert", "full_sync", "delete"
    success: bool = True
    affected: int = 0
    error: str | None = None


class DispatchResult(BaseModel):
    event_kind: str
    record_id: str
    external_database_id: str | None = None
    outcomes: list[TenantOutcome] = []

    @property
    def success(self) -> bool:
        return all(o.success for o in self.outcomes)
