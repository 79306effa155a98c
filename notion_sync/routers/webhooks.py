"""Inbound change notifications from the source workspace."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..security.webhooks import SIGNATURE_HEADER, verify_notion_signature
from ..source.deps import get_mirror, get_source
from ..sync.dispatcher import (
    ChangeNotification,
    dispatch,
    is_verification_handshake,
    notification_from_event,
    resolve_parent_database,
)
from ..sync.errors import SyncError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/notion")
async def receive_notion_event(
    request: Request,
    db: AsyncSession = Depends(get_db),
    source=Depends(get_source),
    mirror=Depends(get_mirror),
):
    """Apply one change notification for every tenant linked to its database.

    Any handling failure answers 500 so the source redelivers.
    """
    raw_body = await request.body()
    try:
        payload = json.loads(raw_body.decode("utf-8")) if raw_body else {}
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON body")

    if is_verification_handshake(payload):
        logger.info("Webhook verification handshake received")
        return {"ok": True}

    verify_notion_signature(raw_body, request.headers.get(SIGNATURE_HEADER))

    notification = notification_from_event(payload)
    if notification is None:
        return {"ok": True, "ignored": True}

    if not notification.external_database_id and notification.event_kind != "deleted":
        database_id = await resolve_parent_database(source, notification.record_id)
        if not database_id:
            return {"ok": True, "ignored": True}
        notification = ChangeNotification(
            event_kind=notification.event_kind,
            record_id=notification.record_id,
            external_database_id=database_id,
        )

    try:
        result = await dispatch(db, source, notification, mirror=mirror)
    except SyncError:
        logger.exception("Webhook dispatch failed for %s", notification.record_id)
        raise HTTPException(status_code=500, detail="Webhook handling failed")

    body = {"ok": result.success, **result.model_dump(mode="json")}
    if not result.success:
        return JSONResponse(status_code=500, content=body)
    return body
