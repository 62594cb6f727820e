"""Unit tests for health endpoints."""

import pytest


@pytest.mark.asyncio
async def test_health_check(test_client):
    """Test the health check endpoint."""
    response = await test_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "travel-booking-api"
    assert "version" in data


@pytest.mark.asyncio
async def test_ready_check(test_client):
    """Readiness pings the database."""
    response = await test_client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"


@pytest.mark.asyncio
async def test_ready_check_database_down(test_client, test_database):
    async def failing_ping():
        raise OSError("connection refused")

    test_database.ping = failing_ping

    response = await test_client.get("/ready")
    assert response.status_code == 503
    assert response.json()["checks"]["database"] == "unavailable"


@pytest.mark.asyncio
async def test_info_endpoint(test_client):
    """Test the service info endpoint."""
    response = await test_client.get("/info")
    assert response.status_code == 200
    data = response.json()
    assert data["features"]["email_notifications"] is False
    assert data["endpoints"]["api"] == "/api"


@pytest.mark.asyncio
async def test_request_id_is_echoed(test_client):
    response = await test_client.get("/info", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
