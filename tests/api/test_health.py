"""Tests for health endpoints."""

from stockmaster import __version__


async def test_root_health_check(api_client):
    """Root health endpoint answers without touching services."""
    response = await api_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_api_health_check(api_client):
    response = await api_client.get("/api/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == __version__
    assert data["uptime_seconds"] >= 0


async def test_db_health_reports_schema_version(api_client):
    response = await api_client.get("/api/health/db")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"]["available"] is True
    assert data["database"]["details"] == {"engine": "sqlite", "schema_version": "001"}


async def test_unknown_route_uses_error_format(api_client):
    response = await api_client.get("/api/nothing-here")

    assert response.status_code == 404
    data = response.json()
    assert data["error_code"] == "NOT_FOUND"
    assert data["path"] == "/api/nothing-here"
