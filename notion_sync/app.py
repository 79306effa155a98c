"""FastAPI application for the Notion sync service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Auto-create tables for SQLite (local dev)
    if "sqlite" in settings.database_url:
        from .database import engine
        from .models import Base
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    if settings.asset_mirror_enabled:
        settings.blobstore_dir.mkdir(parents=True, exist_ok=True)
    yield


app = FastAPI(title=settings.app_title, lifespan=lifespan)

# Import and register routers
from .routers import health, links, records, sync, webhooks  # noqa: E402

app.include_router(webhooks.router)
app.include_router(sync.router)
app.include_router(links.router)
app.include_router(records.router)
app.include_router(health.router)
