"""HTTP client for the Sales Analyzer API built on ``requests``."""

from __future__ import annotations

import logging
import mimetypes
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import requests

from sales_analyzer.client.polling import GlobalPollingManager, Poller
from sales_analyzer.constants.polling_constants import (
    MAX_POLL_DURATION_SECONDS,
    POLL_INTERVAL_SECONDS,
)
from sales_analyzer.models.enums import is_finished

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class SalesAnalyzerAPIError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class SalesAnalyzerClient:
    """Thin wrapper over the REST API.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``.
        token: Session token; set automatically by ``login``.
        session: Optional ``requests.Session`` (useful for tests and retries).
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = self.session.request(
            method,
            f"{self.base_url}/api{path}",
            headers=headers,
            timeout=self.timeout,
            **kwargs,
        )
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not response.ok:
            message = body.get("error") or body.get("message") or response.reason
            raise SalesAnalyzerAPIError(response.status_code, str(message))
        return body

    def register(
        self,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            "/auth/register",
            json={
                "email": email,
                "password": password,
                "firstName": first_name,
                "lastName": last_name,
            },
        )

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and keep the returned token for later calls."""
        body = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = body.get("token")
        return body["user"]

    def upload(self, paths: Iterable[str | Path]) -> dict[str, Any]:
        """Upload recordings with a multipart form; analyses start automatically."""
        handles = []
        files = []
        try:
            for path in paths:
                path = Path(path)
                content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
                handle = path.open("rb")
                handles.append(handle)
                files.append(("files", (path.name, handle, content_type)))
            return self._request("POST", "/upload", files=files)
        finally:
            for handle in handles:
                handle.close()

    def list_uploads(
        self, page: int = 1, limit: int = 20, search: str | None = None
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        return self._request("GET", "/uploads-optimized", params=params)

    def analyze(
        self,
        upload_ids: list[str],
        analysis_type: str = "default",
        custom_prompt: str | None = None,
        custom_parameters: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"uploadIds": upload_ids, "analysisType": analysis_type}
        if custom_prompt is not None:
            payload["customPrompt"] = custom_prompt
        if custom_parameters is not None:
            payload["customParameters"] = custom_parameters
        return self._request("POST", "/analyze", json=payload)

    def get_analysis(self, analysis_id: str, include: str = "summary") -> dict[str, Any]:
        body = self._request(
            "GET", f"/analysis-optimized/{analysis_id}", params={"include": include}
        )
        return body["data"]

    def ask(
        self,
        question: str,
        analysis_id: str | None = None,
        upload_id: str | None = None,
    ) -> dict[str, Any]:
        payload = {"question": question, "analysisId": analysis_id, "uploadId": upload_id}
        return self._request("POST", "/chatbot", json=payload)["data"]

    def wait_for_analysis(
        self,
        analysis_id: str,
        interval: float = POLL_INTERVAL_SECONDS,
        max_duration: float = MAX_POLL_DURATION_SECONDS,
        manager: GlobalPollingManager | None = None,
    ) -> dict[str, Any] | None:
        """Poll an analysis summary until it is COMPLETED or FAILED.

        Returns:
            The last summary seen once finished, or None if polling timed out
            before the analysis finished.
        """
        latest: dict[str, Any] = {}

        def poll() -> None:
            latest.update(self.get_analysis(analysis_id))
            logger.info("Analysis %s status: %s", analysis_id, latest.get("status"))

        poller = Poller(
            poll,
            interval=interval,
            max_duration=max_duration,
            should_stop=lambda: is_finished(latest.get("status")),
            manager=manager,
        )
        poller.run()
        return latest if is_finished(latest.get("status")) else None
