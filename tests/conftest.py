from __future__ import annotations

import gzip
import io
import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError

import sales_analyzer.data.db as app_db
from sales_analyzer.config import get_settings
from sales_analyzer.data.db import init_db
from sales_analyzer.services import auth as auth_service
from sales_analyzer.services.gemini_analysis import CallAnalysisService, set_call_analysis_service
from sales_analyzer.services.llm_providers import LLMProvider
from sales_analyzer.services.llm_service import LLMService
from sales_analyzer.services.object_storage import ObjectStore, set_object_store

TEST_PASSWORD = "Password123"


class FakeS3Client:
    """In-memory stand-in for the subset of the boto3 S3 client we use."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.multipart: dict[str, dict[str, Any]] = {}
        self.completed: list[dict[str, Any]] = []
        self.aborted: list[str] = []
        self.fail_next: str | None = None

    def _maybe_fail(self, operation: str) -> None:
        if self.fail_next == operation:
            self.fail_next = None
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, operation)

    def put_object(self, Bucket: str, Key: str, Body: bytes, **kwargs: Any) -> dict:
        self._maybe_fail("PutObject")
        self.objects[Key] = Body
        return {}

    def get_object(self, Bucket: str, Key: str) -> dict:
        self._maybe_fail("GetObject")
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": io.BytesIO(self.objects[Key])}

    def delete_object(self, Bucket: str, Key: str) -> dict:
        self._maybe_fail("DeleteObject")
        self.objects.pop(Key, None)
        return {}

    def create_multipart_upload(self, Bucket: str, Key: str, **kwargs: Any) -> dict:
        self._maybe_fail("CreateMultipartUpload")
        upload_id = f"mpu-{len(self.multipart) + 1}"
        self.multipart[upload_id] = {"Key": Key, **kwargs}
        return {"UploadId": upload_id}

    def generate_presigned_url(self, operation: str, Params: dict, ExpiresIn: int) -> str:
        return (
            f"https://storage.test/{Params['Key']}"
            f"?uploadId={Params['UploadId']}&partNumber={Params['PartNumber']}"
        )

    def complete_multipart_upload(
        self, Bucket: str, Key: str, UploadId: str, MultipartUpload: dict
    ) -> dict:
        self._maybe_fail("CompleteMultipartUpload")
        self.completed.append({"Key": Key, "UploadId": UploadId, **MultipartUpload})
        assembled = b"assembled audio"
        self.objects[Key] = gzip.compress(assembled) if Key.endswith(".gz") else assembled
        return {}

    def abort_multipart_upload(self, Bucket: str, Key: str, UploadId: str) -> dict:
        self._maybe_fail("AbortMultipartUpload")
        self.aborted.append(UploadId)
        return {}


PARAMETER_REPLY = {
    "score": 8,
    "summary": "Solid discovery",
    "strengths": ["Open questions"],
    "improvements": ["Confirm budget"],
    "specific_examples": ["Asked about timeline"],
    "recommendations": ["Send recap"],
}

CUSTOM_REPLY = {
    "summary": "Custom review",
    "key_findings": ["Prospect is interested"],
    "scores": {"rapport": 7, "closing": 9},
    "recommendations": ["Book demo"],
    "specific_examples": [],
}


class FakeProvider(LLMProvider):
    """Deterministic provider that records every prompt it receives."""

    def __init__(self) -> None:
        self.prompts: list[str] = []
        self.configs: list[dict] = []
        self.audio_calls: list[tuple[bytes, str]] = []
        self.transcript = "Rep: Hello, thanks for taking the call. Prospect: Happy to chat."
        self.chat_answer = "Your calls show strong rapport (8/10)."
        self.error: Exception | None = None

    def send_prompt(self, prompt: str, config: dict) -> str:
        self.prompts.append(prompt)
        self.configs.append(config)
        if self.error is not None:
            raise self.error
        if "Please provide a comprehensive analysis" in prompt:
            return json.dumps(CUSTOM_REPLY)
        if "Please provide your analysis in the following JSON format" in prompt:
            return "Here you go:\n" + json.dumps(PARAMETER_REPLY)
        return self.chat_answer

    def send_audio(self, prompt: str, audio: bytes, mime_type: str, config: dict) -> str:
        self.audio_calls.append((audio, mime_type))
        if self.error is not None:
            raise self.error
        return self.transcript


@pytest.fixture(autouse=True)
def settings_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Deterministic settings for every test."""
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("REQUIRE_EMAIL_VERIFICATION", "true")
    monkeypatch.setenv("AUTO_DELETE_FILES", "false")
    monkeypatch.delenv("SMTP_HOST", raising=False)
    monkeypatch.delenv("MAX_FILE_SIZE", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def fake_s3() -> Iterator[FakeS3Client]:
    client = FakeS3Client()
    set_object_store(ObjectStore(client, "test-bucket"))
    yield client
    set_object_store(None)


@pytest.fixture(autouse=True)
def fake_provider() -> Iterator[FakeProvider]:
    provider = FakeProvider()
    set_call_analysis_service(CallAnalysisService(LLMService(provider=provider)))
    yield provider
    set_call_analysis_service(None)


@pytest.fixture
def api_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Use a temporary SQLite DB for API tests."""
    db_path = tmp_path / "api.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path.as_posix()}")
    app_db._engine = None
    app_db._SessionLocal = None
    init_db()
    yield
    # Dispose engine to release connections
    if app_db._engine is not None:
        app_db._engine.dispose()
        app_db._engine = None
        app_db._SessionLocal = None


@pytest.fixture
def make_user(api_db: None):
    """Factory creating a verified user; returns (user dict, bearer headers)."""

    def _make(email: str = "rep@example.com") -> tuple[dict[str, Any], dict[str, str]]:
        user, token, error = auth_service.create_user(email, TEST_PASSWORD, "Sam", "Rep")
        assert error is None
        auth_service.verify_email_token(token)
        access = auth_service.create_access_token(user["id"], user["email"])
        return user, {"Authorization": f"Bearer {access}"}

    return _make


@pytest.fixture
def user_and_headers(make_user) -> tuple[dict[str, Any], dict[str, str]]:
    return make_user()


@pytest.fixture
def auth_headers(user_and_headers) -> dict[str, str]:
    return user_and_headers[1]


@pytest.fixture(autouse=True)
def _api_module_db(request: pytest.FixtureRequest) -> None:
    """Tests in API test files always get the temporary database."""
    if "api" in request.node.path.stem.lower():
        request.getfixturevalue("api_db")
