"""API tests for envelope rendering and observability endpoints."""

import pytest


@pytest.mark.asyncio
async def test_metrics_endpoint(test_client, sample_submission):
    """Business counters show up in the Prometheus output."""
    await test_client.post("/api/bookings/submit", json=sample_submission)

    response = await test_client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "bookings_submitted_total" in response.text
    assert "http_requests_total" in response.text


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(test_client):
    response = await test_client.get("/api/nope")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}


@pytest.mark.asyncio
async def test_openapi_docs(test_client):
    """OpenAPI docs are available in development."""
    response = await test_client.get("/docs")
    assert response.status_code == 200
