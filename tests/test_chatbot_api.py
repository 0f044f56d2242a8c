"""Tests for the call-analysis chatbot at /api/chatbot."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from sales_analyzer.api.main import app
from sales_analyzer.services.llm_providers import LLMError


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the API."""
    return TestClient(app)


def _analyzed_upload(client: TestClient, headers: dict[str, str], name: str) -> dict[str, Any]:
    body = client.post(
        "/api/upload", files=[("files", (name, b"ID3audio", "audio/mpeg"))], headers=headers
    ).json()
    return {"uploadId": body["results"][0]["id"], "analysisId": body["analyses"][0]["id"]}


def _ask(client: TestClient, headers: dict[str, str], **payload: Any):
    return client.post("/api/chatbot", json=payload, headers=headers)


class TestAsk:
    """Tests for POST /api/chatbot."""

    def test_question_is_required(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = _ask(client, auth_headers, question="   ")

        assert response.status_code == 400
        assert response.json()["error"] == "Question is required"

    def test_no_completed_analyses(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = _ask(client, auth_headers, question="How am I doing?")

        assert response.status_code == 404
        assert response.json()["error"].startswith("No completed analyses found")

    def test_answers_over_all_completed_analyses(
        self, client: TestClient, auth_headers: dict[str, str], fake_provider
    ) -> None:
        _analyzed_upload(client, auth_headers, "first.mp3")
        _analyzed_upload(client, auth_headers, "second.mp3")

        response = _ask(client, auth_headers, question="How is my rapport?")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["question"] == "How is my rapport?"
        assert data["answer"] == fake_provider.chat_answer
        assert data["contextSource"] == "All analyses (2 calls)"
        prompt = fake_provider.prompts[-1]
        assert prompt.startswith("System instruction:\nYou are a helpful AI assistant")
        assert "User content:\n**Available Context:**" in prompt
        assert prompt.endswith("**User Question:** How is my rapport?")
        assert fake_provider.configs[-1] == {"temperature": 0.7}
        assert "Call Recording 1: second.mp3" in prompt
        assert "Call Recording 2: first.mp3" in prompt

    def test_analysis_scope_takes_precedence(
        self, client: TestClient, auth_headers: dict[str, str], fake_provider
    ) -> None:
        first = _analyzed_upload(client, auth_headers, "first.mp3")
        second = _analyzed_upload(client, auth_headers, "second.mp3")

        data = _ask(
            client,
            auth_headers,
            question="Summarize",
            analysisId=first["analysisId"],
            uploadId=second["uploadId"],
        ).json()["data"]

        assert data["contextSource"] == f"Analysis: {first['analysisId']}"
        assert "Call Recording: first.mp3" in fake_provider.prompts[-1]

    def test_upload_scope(
        self, client: TestClient, auth_headers: dict[str, str], fake_provider
    ) -> None:
        upload = _analyzed_upload(client, auth_headers, "acme.mp3")

        data = _ask(
            client, auth_headers, question="Summarize", uploadId=upload["uploadId"]
        ).json()["data"]

        assert data["contextSource"] == "Upload: acme.mp3"
        assert "**File Size:** 0 KB" in fake_provider.prompts[-1]

    def test_upload_without_completed_analysis(
        self, client: TestClient, auth_headers: dict[str, str], fake_provider
    ) -> None:
        fake_provider.error = LLMError("transcription failed")
        upload = _analyzed_upload(client, auth_headers, "broken.mp3")

        response = _ask(client, auth_headers, question="Summarize", uploadId=upload["uploadId"])

        assert response.status_code == 404
        assert response.json()["error"] == "No completed analysis found for this upload"

    def test_foreign_analysis_is_denied(self, client: TestClient, make_user) -> None:
        _, owner = make_user("owner@example.com")
        _, other = make_user("other@example.com")
        ids = _analyzed_upload(client, owner, "private.mp3")

        response = _ask(client, other, question="Leak it", analysisId=ids["analysisId"])

        assert response.status_code == 404
        assert response.json()["error"] == "Analysis not found or access denied"

    def test_foreign_upload_is_denied(self, client: TestClient, make_user) -> None:
        _, owner = make_user("owner@example.com")
        _, other = make_user("other@example.com")
        ids = _analyzed_upload(client, owner, "private.mp3")

        response = _ask(client, other, question="Leak it", uploadId=ids["uploadId"])

        assert response.status_code == 404
        assert response.json()["error"] == "Upload not found or access denied"

    @pytest.mark.parametrize(
        ("vendor_message", "expected"),
        [
            ("400 API key not valid", "AI service configuration error"),
            ("429 QUOTA_EXCEEDED", "AI service quota exceeded"),
            ("403 PERMISSION_DENIED", "AI service permission denied"),
            ("socket closed", "socket closed"),
        ],
    )
    def test_ai_failures_are_translated(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        fake_provider,
        vendor_message: str,
        expected: str,
    ) -> None:
        ids = _analyzed_upload(client, auth_headers, "call.mp3")
        fake_provider.error = LLMError(vendor_message)

        response = _ask(client, auth_headers, question="Hi", analysisId=ids["analysisId"])

        assert response.status_code == 500
        assert response.json()["error"].startswith(expected)

    def test_empty_answer_is_an_error(
        self, client: TestClient, auth_headers: dict[str, str], fake_provider
    ) -> None:
        ids = _analyzed_upload(client, auth_headers, "call.mp3")
        fake_provider.chat_answer = ""

        response = _ask(client, auth_headers, question="Hi", analysisId=ids["analysisId"])

        assert response.status_code == 500
        assert response.json()["error"] == "AI service returned an empty response"


class TestAvailableContext:
    """Tests for GET /api/chatbot."""

    def test_lists_completed_analyses(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        ids = _analyzed_upload(client, auth_headers, "call.mp3")

        data = client.get("/api/chatbot", headers=auth_headers).json()["data"]

        assert data["totalAnalyses"] == 1
        item = data["availableContext"][0]
        assert item["analysisId"] == ids["analysisId"]
        assert item["fileName"] == "call.mp3"
        assert item["overallScore"] == 8
        assert data["message"].startswith("Ready to answer questions")

    def test_empty_context_message(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        data = client.get("/api/chatbot", headers=auth_headers).json()["data"]

        assert data == {
            "availableContext": [],
            "totalAnalyses": 0,
            "message": (
                "No completed analyses found. Please upload and analyze call recordings first."
            ),
        }
