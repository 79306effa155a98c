"""Tracking entries - daily/weekly/monthly/quarterly/yearly journal rows."""

from __future__ import annotations

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin

TRACKING_PERIODS = ("daily", "weekly", "monthly", "quarterly", "yearly")


class TrackingEntry(UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin, Base):
    __tablename__ = "tracking_entry"
    __table_args__ = (
        UniqueConstraint("tenant_id", "external_id", name="uq_tracking_tenant_external"),
    )

    period: Mapped[str] = mapped_column(String(20), index=True)
    title: Mapped[str | None] = mapped_column(String(500), default=None)
    entry_date: Mapped[str | None] = mapped_column(String(40), default=None)

    def __repr__(self) -> str:
        return f"<TrackingEntry {self.period} {self.title}>"
