"""Health and readiness checks for the sync service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    return {"status": "healthy", "service": "notion_sync"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    if settings.asset_mirror_enabled and not settings.blobstore_dir.is_dir():
        raise HTTPException(status_code=503, detail="Object store directory missing")
    return {"status": "ready", "service": "notion_sync"}
