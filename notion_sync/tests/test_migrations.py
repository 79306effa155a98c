"""Smoke tests for Alembic migrations."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from notion_sync.config import settings
from notion_sync.models import Base


def test_alembic_upgrade_matches_models(tmp_path: Path, monkeypatch):
    db_path = tmp_path / "sync_migrations.db"
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{db_path}")

    repo_root = Path(__file__).resolve().parents[2]
    cfg = Config(str(repo_root / "notion_sync" / "alembic.ini"))
    command.upgrade(cfg, "head")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        person_columns = {c["name"] for c in inspector.get_columns("person")}
        uniques = {u["name"] for u in inspector.get_unique_constraints("media")}
    finally:
        engine.dispose()

    assert set(Base.metadata.tables) <= tables
    assert person_columns == {c.name for c in Base.metadata.tables["person"].columns}
    assert "uq_media_tenant_external" in uniques
