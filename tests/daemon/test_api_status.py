"""
Integration tests for status API endpoints.

Tests the root, health check and status endpoints.
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(make_app) -> TestClient:
    """Create FastAPI test client."""
    return TestClient(make_app({}))


@pytest.mark.integration
class TestStatusAPI:
    """Test status API endpoints."""

    def test_root_endpoint_returns_api_info(self, client: TestClient) -> None:
        """Test GET / returns API information."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "verifierd"
        assert "version" in data
        assert "docs" in data

    def test_status_reports_languages(self, client: TestClient) -> None:
        """Test GET /api/v2/status lists served languages and their versions."""
        response = client.get("/api/v2/status")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "running"
        assert data["uptimeSeconds"] >= 0
        assert data["languages"] == {"vyper": 3}

    def test_health_check_returns_healthy(self, client: TestClient) -> None:
        """Test GET /health returns healthy status."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_lifespan_keeps_injected_clients(self, make_app) -> None:
        """Test startup does not load configuration when clients are injected."""
        app = make_app({})

        with TestClient(app) as client:
            response = client.get("/api/v2/status")

        assert response.json()["languages"] == {"vyper": 3}
        assert app.state.clients is not None
