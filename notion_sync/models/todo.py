"""Todo model - items from a tenant's task list database."""

from __future__ import annotations

from sqlalchemy import JSON, Float, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin


class Todo(UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin, Base):
    __tablename__ = "todo"
    __table_args__ = (
        UniqueConstraint("tenant_id", "external_id", name="uq_todo_tenant_external"),
    )

    title: Mapped[str | None] = mapped_column(String(500), default=None)
    status: Mapped[str | None] = mapped_column(String(100), default=None)
    priority: Mapped[str | None] = mapped_column(String(50), default=None)
    do_date: Mapped[str | None] = mapped_column(String(40), default=None)
    due_date: Mapped[str | None] = mapped_column(String(40), default=None)
    mega_tags: Mapped[list | None] = mapped_column(JSON, default=None)
    assignee: Mapped[list | None] = mapped_column(JSON, default=None)
    gcal_id: Mapped[str | None] = mapped_column(Text, default=None)
    duration_hours: Mapped[float | None] = mapped_column(Float, default=None)
    start_date: Mapped[str | None] = mapped_column(String(40), default=None)
    end_date: Mapped[str | None] = mapped_column(String(40), default=None)
    projects: Mapped[list | None] = mapped_column(JSON, default=None)

    def __repr__(self) -> str:
        return f"<Todo {self.title}>"
