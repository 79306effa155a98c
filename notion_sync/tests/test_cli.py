"""CLI smoke tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from typer.testing import CliRunner

from notion_sync import database
from notion_sync.cli import app
from notion_sync.models import Base, Tenant, TenantDatabaseLink

runner = CliRunner()


@pytest.fixture
def cli_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_path = tmp_path / "cli.db"
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    with Session(sync_engine) as session:
        session.add(Tenant(id="tenant-a"))
        session.add(TenantDatabaseLink(
            tenant_id="tenant-a",
            external_database_id="db1",
            database_key="db1",
            display_name="People",
            logical_type="people",
            declared_schema={},
        ))
        session.commit()
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    monkeypatch.setattr(
        database,
        "async_session_factory",
        async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
    )
    return db_path


def test_links_lists_linked_databases(cli_db):
    result = runner.invoke(app, ["links", "tenant-a"])
    assert result.exit_code == 0, result.output
    assert "People" in result.output
    assert "people" in result.output


def test_sync_rejects_unknown_type(cli_db):
    result = runner.invoke(app, ["sync", "tenant-a", "recipes", "--no-assets"])
    assert result.exit_code == 1
    assert "Unknown logical type" in result.output
