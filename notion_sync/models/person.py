"""Person model - rows mirrored from a tenant's People database."""

from __future__ import annotations

from sqlalchemy import JSON, Float, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin


class Person(UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin, Base):
    __tablename__ = "person"
    __table_args__ = (
        UniqueConstraint("tenant_id", "external_id", name="uq_person_tenant_external"),
    )

    name: Mapped[str | None] = mapped_column(String(255), default=None)
    origin_of_connection: Mapped[list | None] = mapped_column(JSON, default=None)
    star_sign: Mapped[str | None] = mapped_column(String(50), default=None)
    image: Mapped[list | None] = mapped_column(JSON, default=None)
    currently_at: Mapped[str | None] = mapped_column(Text, default=None)
    age: Mapped[float | None] = mapped_column(Float, default=None)
    tier: Mapped[list | None] = mapped_column(JSON, default=None)
    occupation: Mapped[str | None] = mapped_column(Text, default=None)
    birthday: Mapped[str | None] = mapped_column(String(40), default=None)
    contact_freq: Mapped[str | None] = mapped_column(String(100), default=None)
    from_location: Mapped[str | None] = mapped_column(Text, default=None)
    birth_date: Mapped[str | None] = mapped_column(String(40), default=None)
    nicknames: Mapped[list | None] = mapped_column(JSON, default=None)

    def __repr__(self) -> str:
        return f"<Person {self.name}>"
