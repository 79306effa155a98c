"""Webhook signature and tenant identity tests."""

from __future__ import annotations

import json

import pytest
from httpx import AsyncClient

from notion_sync.config import settings
from notion_sync.security.webhooks import expected_signature

EVENT = {
    "type": "page.deleted",
    "entity": {"id": "r1", "type": "page"},
    "data": {"parent": {"id": "0f1e2d3c4b5a69788695a4b3c2d1e0f9", "type": "database"}},
}


def test_expected_signature_format():
    sig = expected_signature(b"{}", "secret")
    assert sig.startswith("sha256=")
    assert len(sig) == len("sha256=") + 64


@pytest.mark.asyncio
async def test_verification_handshake_is_acknowledged(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "webhook_secret", "whsec")
    resp = await client.post("/webhooks/notion", json={"verification_token": "secret_tok"})
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


@pytest.mark.asyncio
async def test_missing_signature_rejected(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "webhook_secret", "whsec")
    resp = await client.post("/webhooks/notion", json=EVENT)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_bad_signature_rejected(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "webhook_secret", "whsec")
    body = json.dumps(EVENT).encode()
    resp = await client.post(
        "/webhooks/notion",
        content=body,
        headers={"content-type": "application/json", "x-notion-signature": expected_signature(body, "other")},
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_valid_signature_accepted(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "webhook_secret", "whsec")
    body = json.dumps(EVENT).encode()
    resp = await client.post(
        "/webhooks/notion",
        content=body,
        headers={"content-type": "application/json", "x-notion-signature": expected_signature(body, "whsec")},
    )
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


@pytest.mark.asyncio
async def test_fails_closed_without_secret(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "webhook_secret", None)
    monkeypatch.setattr(settings, "security_fail_closed", True)
    resp = await client.post("/webhooks/notion", json=EVENT)
    assert resp.status_code == 503


@pytest.mark.asyncio
async def test_open_without_secret_in_development(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "webhook_secret", None)
    monkeypatch.setattr(settings, "security_fail_closed", False)
    monkeypatch.setattr(settings, "environment", "development")
    resp = await client.post("/webhooks/notion", json=EVENT)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_tenant_header_required(client: AsyncClient):
    resp = await client.get("/links")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_tenant_token_checked_when_configured(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "tenant_access_tokens", "tenant-a:tok-a")

    resp = await client.get("/links", headers={"X-Tenant-Id": "tenant-a"})
    assert resp.status_code == 403
    resp = await client.get("/links", headers={"X-Tenant-Id": "tenant-a", "X-Tenant-Token": "wrong"})
    assert resp.status_code == 403
    resp = await client.get("/links", headers={"X-Tenant-Id": "tenant-a", "X-Tenant-Token": "tok-a"})
    assert resp.status_code == 200
    resp = await client.get("/links", headers={"X-Tenant-Id": "tenant-b"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_tenant_auth_required_rejects_tenants_without_token(
    client: AsyncClient,
    monkeypatch: pytest.MonkeyPatch,
):
    monkeypatch.setattr(settings, "tenant_auth_required", True)
    monkeypatch.setattr(settings, "tenant_access_tokens", "")
    resp = await client.get("/links", headers={"X-Tenant-Id": "tenant-a"})
    assert resp.status_code == 403
