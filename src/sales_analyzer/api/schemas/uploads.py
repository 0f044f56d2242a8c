"""Pydantic schemas for the multipart (large file) upload flow."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from sales_analyzer.api.schemas.analysis import AnalysisParameterIn
from sales_analyzer.api.schemas.common import CamelModel


class CompletedPart(CamelModel):
    """A part as reported by the object store after the client uploaded it."""

    etag: str = Field(alias="ETag")
    part_number: int = Field(alias="PartNumber")

    def as_store_part(self) -> dict[str, Any]:
        return {"ETag": self.etag, "PartNumber": self.part_number}


class LargeUploadRequest(CamelModel):
    """Body of ``POST /api/upload-large``; ``action`` selects the step."""

    action: str | None = None
    file_name: str | None = None
    content_type: str | None = None
    key: str | None = None
    upload_id: str | None = None
    parts: int | list[CompletedPart] | None = None
    file_size: int | None = None
    original_content_type: str | None = None
    custom_parameters: list[AnalysisParameterIn] | None = None
