"""Tests for in-progress analysis monitoring at /api/monitoring/analysis."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from sales_analyzer.api.main import app
from sales_analyzer.data.db import get_session
from sales_analyzer.data.models import Analysis
from sales_analyzer.models.enums import AnalysisStatus, AnalysisType
from sales_analyzer.services.analysis_monitor import monitoring_stats
from sales_analyzer.services.analysis_runner import create_analyses
from sales_analyzer.services.uploads import store_upload

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the API."""
    return TestClient(app)


def _analysis(user_id: str, filename: str, status: AnalysisStatus, age: timedelta) -> str:
    upload = store_upload(user_id, filename, "audio/mpeg", b"ID3audio")
    created, _ = create_analyses(user_id, [upload["id"]], AnalysisType.DEFAULT)
    with get_session() as session:
        analysis = session.get(Analysis, created[0]["id"])
        analysis.status = status.value
        analysis.created_at = NOW - age
        analysis.updated_at = NOW - age
    return created[0]["id"]


class TestMonitoringStats:
    def test_nothing_in_progress(self, user_and_headers) -> None:
        user, _ = user_and_headers

        assert monitoring_stats(user["id"], now=NOW) == {
            "totalInProgress": 0,
            "byStage": {},
            "longestRunning": None,
        }

    def test_groups_by_stage_and_finds_oldest(self, user_and_headers) -> None:
        user, _ = user_and_headers
        _analysis(user["id"], "fresh.mp3", AnalysisStatus.PENDING, timedelta(seconds=5))
        oldest = _analysis(
            user["id"], "slow.mp3", AnalysisStatus.TRANSCRIBING, timedelta(minutes=2)
        )
        _analysis(user["id"], "mid.mp3", AnalysisStatus.TRANSCRIBING, timedelta(seconds=30))
        _analysis(user["id"], "done.mp3", AnalysisStatus.COMPLETED, timedelta(hours=1))
        _analysis(user["id"], "broken.mp3", AnalysisStatus.FAILED, timedelta(hours=2))

        stats = monitoring_stats(user["id"], now=NOW)

        assert stats["totalInProgress"] == 3
        assert stats["byStage"] == {"PENDING": 1, "TRANSCRIBING": 2}
        assert stats["longestRunning"] == {
            "id": oldest,
            "filename": "slow.mp3",
            "elapsedTime": 120_000,
        }

    def test_stuck_analysis_is_logged(
        self, user_and_headers, caplog: pytest.LogCaptureFixture
    ) -> None:
        user, _ = user_and_headers
        stuck = _analysis(user["id"], "stuck.mp3", AnalysisStatus.ANALYZING, timedelta(minutes=10))

        with caplog.at_level("WARNING", logger="sales_analyzer.services.analysis_monitor"):
            monitoring_stats(user["id"], now=NOW)

        assert f"Analysis {stuck} may be stuck in ANALYZING" in caplog.text


class TestMonitoringEndpoint:
    """Tests for GET /api/monitoring/analysis."""

    def test_requires_authentication(self, client: TestClient) -> None:
        response = client.get("/api/monitoring/analysis")

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_reports_only_callers_analyses(self, client: TestClient, make_user) -> None:
        owner, owner_headers = make_user("owner@example.com")
        _, other_headers = make_user("other@example.com")
        _analysis(owner["id"], "call.mp3", AnalysisStatus.PROCESSING, timedelta(seconds=1))

        mine = client.get("/api/monitoring/analysis", headers=owner_headers).json()
        theirs = client.get("/api/monitoring/analysis", headers=other_headers).json()

        assert mine["success"] is True
        assert mine["data"]["totalInProgress"] == 1
        assert mine["data"]["byStage"] == {"PROCESSING": 1}
        assert mine["data"]["longestRunning"]["filename"] == "call.mp3"
        assert theirs["data"]["totalInProgress"] == 0

    def test_failure_is_reported(
        self, client: TestClient, auth_headers: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _broken(user_id: str) -> dict:
            raise RuntimeError("database gone")

        monkeypatch.setattr("sales_analyzer.api.routes.monitoring.monitoring_stats", _broken)

        response = client.get("/api/monitoring/analysis", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Failed to retrieve monitoring statistics",
        }
