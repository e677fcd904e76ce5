"""Health endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status and version."""
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_reports_live_connections(client, subscriber_in):
    subscriber_in("conn-1", "ABC123")
    subscriber_in("conn-2")

    resp = await client.get("/api/health")
    assert resp.json()["connections"] == 2
