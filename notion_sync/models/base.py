"""Base model classes and mixins for synced tables."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class UUIDMixin:
    """Adds a UUID primary key."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )


class TimestampMixin:
    """Adds created_at / updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class TenantMixin:
    """Adds tenant_id FK for multi-tenant isolation."""

    tenant_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("tenant.id", ondelete="CASCADE"),
        index=True,
    )


class SourceSyncMixin:
    """Adds source identity, overflow bag and mirrored asset pointer.

    ``(tenant_id, external_id)`` is unique on every table using this mixin;
    each model declares the constraint in ``__table_args__``.
    """

    external_id: Mapped[str] = mapped_column(String(64), index=True)
    external_database_id: Mapped[str] = mapped_column(String(64), index=True)
    overflow_properties: Mapped[dict] = mapped_column(JSON, default=dict)
    asset_url: Mapped[str | None] = mapped_column(Text, default=None)
    last_synced_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
