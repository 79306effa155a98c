"""Finance models - tracked assets, holding places and individual investments."""

from __future__ import annotations

import uuid

from sqlalchemy import Float, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin


class FinanceAsset(UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin, Base):
    __tablename__ = "finance_asset"
    __table_args__ = (
        UniqueConstraint("tenant_id", "external_id", name="uq_finance_asset_tenant_external"),
    )

    name: Mapped[str | None] = mapped_column(String(255), default=None)
    symbol: Mapped[str | None] = mapped_column(String(50), default=None)
    current_price: Mapped[float | None] = mapped_column(Float, default=None)
    summary: Mapped[str | None] = mapped_column(Text, default=None)
    currency: Mapped[str | None] = mapped_column(String(20), default=None)


class FinancePlace(UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin, Base):
    __tablename__ = "finance_place"
    __table_args__ = (
        UniqueConstraint("tenant_id", "external_id", name="uq_finance_place_tenant_external"),
    )

    name: Mapped[str | None] = mapped_column(String(255), default=None)
    place_type: Mapped[str | None] = mapped_column(String(100), default=None)
    balance: Mapped[float | None] = mapped_column(Float, default=None)
    total_value: Mapped[float | None] = mapped_column(Float, default=None)
    currency: Mapped[str | None] = mapped_column(String(20), default=None)


class FinanceInvestment(UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin, Base):
    __tablename__ = "finance_investment"
    __table_args__ = (
        UniqueConstraint("tenant_id", "external_id", name="uq_finance_investment_tenant_external"),
    )

    name: Mapped[str | None] = mapped_column(String(255), default=None)
    quantity: Mapped[float | None] = mapped_column(Float, default=None)
    purchase_price: Mapped[float | None] = mapped_column(Float, default=None)
    purchase_date: Mapped[str | None] = mapped_column(String(40), default=None)
    current_value: Mapped[float | None] = mapped_column(Float, default=None)
    current_price: Mapped[float | None] = mapped_column(Float, default=None)

    # Relation targets as the source names them; resolved to local rows after upsert.
    asset_external_id: Mapped[str | None] = mapped_column(String(64), default=None)
    place_external_id: Mapped[str | None] = mapped_column(String(64), default=None)
    asset_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("finance_asset.id", ondelete="SET NULL"), default=None
    )
    place_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("finance_place.id", ondelete="SET NULL"), default=None
    )
