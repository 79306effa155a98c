"""Media model - books, videos, articles and the like."""

from __future__ import annotations

from sqlalchemy import JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin


class Media(UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin, Base):
    __tablename__ = "media"
    __table_args__ = (
        UniqueConstraint("tenant_id", "external_id", name="uq_media_tenant_external"),
    )

    name: Mapped[str | None] = mapped_column(String(500), default=None)
    category: Mapped[str | None] = mapped_column(String(100), default=None)
    status: Mapped[str | None] = mapped_column(String(100), default=None)
    url: Mapped[str | None] = mapped_column(Text, default=None)
    by: Mapped[list | None] = mapped_column(JSON, default=None)
    topic: Mapped[list | None] = mapped_column(JSON, default=None)
    thumbnail: Mapped[list | None] = mapped_column(JSON, default=None)
    ai_synopsis: Mapped[str | None] = mapped_column(Text, default=None)
    created: Mapped[str | None] = mapped_column(String(40), default=None)
    related_external_ids: Mapped[list | None] = mapped_column(JSON, default=None)

    def __repr__(self) -> str:
        return f"<Media {self.name}>"
