"""Health & Readiness routes.

Tests:
    - Liveness always 200 with service name and version
    - Readiness 200 with tool count when DB and dispatcher are up
    - Readiness 503 without a database manager
    - Readiness 503 without a dispatcher
"""

import pytest

import parallels_bridge.infrastructure.database as db_module
from parallels_bridge import __version__
from parallels_bridge.main import app


@pytest.mark.asyncio
async def test_liveness(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy", "service": "parallels-bridge", "version": __version__,
    }


@pytest.mark.asyncio
async def test_readiness(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["checks"]["database"] == "healthy"
    assert body["checks"]["tools"] == 13
    assert "prlctl" in body["checks"]


@pytest.mark.asyncio
async def test_readiness_without_database(client):
    db_module.db_manager = None
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
    assert response.json()["reason"] == "database_unavailable"


@pytest.mark.asyncio
async def test_readiness_without_dispatcher(client):
    app.state.dispatcher = None
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
    assert response.json()["reason"] == "dispatcher_missing"
