"""Pydantic schemas for analysis and chatbot requests."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from sales_analyzer.api.schemas.common import CamelModel


class AnalysisParameterIn(CamelModel):
    """One caller-defined evaluation parameter."""

    id: str | None = None
    name: str
    description: str | None = None
    prompt: str
    enabled: bool = True


class AnalyzeRequest(CamelModel):
    """Start analyses for a batch of uploads."""

    upload_ids: list[str] | None = Field(None, description="Uploads to analyze")
    analysis_type: str | None = Field(
        None, description='One of "default", "custom" or "parameters"'
    )
    custom_prompt: str | None = None
    custom_parameters: list[AnalysisParameterIn] | None = None

    def parameters_as_dicts(self) -> list[dict[str, Any]] | None:
        if self.custom_parameters is None:
            return None
        return [p.model_dump() for p in self.custom_parameters]


class ChatbotRequest(CamelModel):
    question: str | None = None
    analysis_id: str | None = None
    upload_id: str | None = None


class TranscriptionQuestionRequest(CamelModel):
    """An ad-hoc question over one or more transcriptions."""

    transcription: str | None = Field(
        None, description="Plain text or diarized JSON transcription(s)"
    )
    custom_prompt: str | None = Field(None, description="Question to answer")
    recording_ids: list[str] | None = None
