"""Tests for the Sales Analyzer API application and health endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

import sales_analyzer.data.db as app_db
from sales_analyzer.api.main import app
from sales_analyzer.data.models.user import User


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the API."""
    return TestClient(app)


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_returns_200(self, client: TestClient) -> None:
        response = client.get("/api/health")
        assert response.status_code == 200

    def test_health_returns_healthy_status(self, client: TestClient) -> None:
        data = client.get("/api/health").json()
        assert data["success"] is True
        assert data["status"] == "healthy"
        assert data["environment"]["name"] == "development"

    def test_health_reports_configuration_without_secrets(self, client: TestClient) -> None:
        data = client.get("/api/health").json()
        assert data["configuration"]["requireEmailVerification"] is True
        assert data["configuration"]["emailConfigured"] is False
        assert "test-secret" not in str(data)

    def test_health_response_is_json(self, client: TestClient) -> None:
        response = client.get("/api/health")
        assert response.headers["content-type"] == "application/json"


class TestDatabaseHealthEndpoint:
    """Tests for GET /api/health/database."""

    def test_reports_counts_and_operations(self, client: TestClient, make_user) -> None:
        make_user()

        response = client.get("/api/health/database")

        assert response.status_code == 200
        status = response.json()["status"]
        assert status["isHealthy"] is True
        assert status["dialect"] == "sqlite"
        assert status["tables"]["users"] == 1
        assert status["tables"]["actionItemTypes"] == 6
        assert status["tests"]["success"] is True
        assert [op["name"] for op in status["tests"]["operations"]] == [
            "Health Check",
            "Simple Query",
            "Create Read Delete",
        ]

    def test_scratch_row_is_removed(self, client: TestClient) -> None:
        client.get("/api/health/database")

        status = client.get("/api/health/database").json()["status"]

        assert status["tables"]["users"] == 0

    def test_runs_against_temporary_database(self, tmp_path) -> None:
        engine = app_db.get_engine()

        assert engine.url.database == (tmp_path / "api.db").as_posix()
        with app_db.get_session() as session:
            assert session.query(User).count() == 0

    def test_connection_failure(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _unreachable() -> dict:
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr("sales_analyzer.api.routes.health.get_database_status", _unreachable)

        response = client.get("/api/health/database")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Health check failed"}


class TestAppConfiguration:
    """Tests for the FastAPI app configuration."""

    def test_app_title(self) -> None:
        assert app.title == "Sales Analyzer API"

    def test_app_version(self) -> None:
        assert app.version == "0.1.0"

    def test_cors_middleware_is_configured(self) -> None:
        middleware_classes = [m.cls.__name__ for m in app.user_middleware]
        assert "CORSMiddleware" in middleware_classes


class TestErrorHandling:
    """Tests for the uniform error body."""

    def test_unknown_route_returns_404(self, client: TestClient) -> None:
        response = client.get("/api/nonexistent")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_malformed_json_is_bad_request(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        response = client.post(
            "/api/analyze",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unexpected_errors_are_masked(
        self, auth_headers: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _explode(user_id: str) -> list:
            raise RuntimeError("internal detail")

        monkeypatch.setattr(
            "sales_analyzer.api.routes.uploads.list_uploads_with_analyses", _explode
        )
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/upload", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "An unexpected error occurred"}
