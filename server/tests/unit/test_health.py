"""Unit tests for health endpoints."""

import pytest


@pytest.mark.asyncio
async def test_health_ping_rpc(test_client):
    """Test the RPC-style health ping endpoint."""
    response = await test_client.post("/v1/health/ping", json={})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"
    assert data["service"] == "tour-catalog-api"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_metrics_endpoint(test_client):
    """Test the Prometheus metrics endpoint."""
    response = await test_client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "tours_created_total" in response.text
