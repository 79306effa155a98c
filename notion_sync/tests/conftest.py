"""Async test fixtures for sync tests using SQLite and a fake workspace."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from notion_sync.assets.blobstore import ObjectStore
from notion_sync.assets.downloader import AssetDownloader
from notion_sync.assets.mirror import AssetMirror
from notion_sync.database import get_db
from notion_sync.models import Base, Tenant
from notion_sync.source.deps import get_mirror, get_source

from notion_sync.tests.factories import FakeNotion


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def tenant(db: AsyncSession):
    t = Tenant(id="tenant-a", name="Tenant A")
    db.add(t)
    await db.commit()
    return t


@pytest.fixture
def notion():
    return FakeNotion()


@pytest.fixture
def images():
    """URL -> (status, content_type, body) served to the asset downloader."""
    return {}


@pytest.fixture
def object_store(tmp_path):
    return ObjectStore(tmp_path / "objects", "http://objects.test")


@pytest_asyncio.fixture
async def mirror(images, object_store):
    def handler(request: httpx.Request) -> httpx.Response:
        status, content_type, body = images.get(str(request.url), (404, "text/html", b"not found"))
        return httpx.Response(status, headers={"content-type": content_type}, content=body)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    m = AssetMirror(object_store, AssetDownloader(client=http))
    yield m
    await m.aclose()
    await http.aclose()


@pytest_asyncio.fixture
async def client(engine, notion, mirror):
    """HTTPX async test client against the sync app."""
    from notion_sync.app import app

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_source():
        yield notion

    async def override_get_mirror():
        yield mirror

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_source] = override_get_source
    app.dependency_overrides[get_mirror] = override_get_mirror

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
