"""Tenant model - the root of all tenant-scoped data."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class Tenant(TimestampMixin, Base):
    __tablename__ = "tenant"

    # The auth subject; identity is resolved upstream and passed through as-is.
    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(200), default=None)

    links: Mapped[list["TenantDatabaseLink"]] = relationship(  # noqa: F821
        back_populates="tenant", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Tenant {self.id}>"
