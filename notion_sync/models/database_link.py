"""Tenant-to-source database link."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


def normalize_database_id(value: str | None) -> str:
    """Dash-less lowercase form; the source emits ids with and without separators."""
    return (value or "").replace("-", "").strip().lower()


class TenantDatabaseLink(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "tenant_database_link"
    __table_args__ = (
        UniqueConstraint("tenant_id", "database_key", name="uq_link_tenant_database"),
    )

    external_database_id: Mapped[str] = mapped_column(String(64))
    database_key: Mapped[str] = mapped_column(String(64), index=True)
    display_name: Mapped[str | None] = mapped_column(String(255), default=None)

    # Explicit tags set when the tenant connected the database (e.g. "finances_assets").
    type_tag: Mapped[str | None] = mapped_column(String(50), default=None)
    period: Mapped[str | None] = mapped_column(String(20), default=None)

    # Cached classification; recomputed only on refresh.
    logical_type: Mapped[str | None] = mapped_column(String(50), default=None, index=True)

    declared_schema: Mapped[dict] = mapped_column(JSON, default=dict)
    last_sync_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    tenant: Mapped["Tenant"] = relationship(back_populates="links")  # noqa: F821

    def __repr__(self) -> str:
        return f"<TenantDatabaseLink {self.tenant_id}:{self.database_key} ({self.logical_type})>"
