"""Ad-hoc analysis of caller-supplied transcriptions."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from sales_analyzer.api.dependencies import CurrentUser
from sales_analyzer.api.errors import ApiError, InvalidRequest
from sales_analyzer.api.schemas.analysis import TranscriptionQuestionRequest
from sales_analyzer.services.llm_providers import LLMError, describe_llm_error
from sales_analyzer.services.transcription_analysis import analyze_transcription

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyze-transcription", tags=["analysis"])


@router.post("")
def ask_about_transcription(
    payload: TranscriptionQuestionRequest, user: CurrentUser
) -> dict[str, Any]:
    """Answer a free-form question over one or more transcriptions.

    Raises:
        InvalidRequest: The transcription or the question is missing (400).
        ApiError: The AI service failed (500).
    """
    if not payload.transcription or not payload.custom_prompt:
        raise InvalidRequest("Missing transcription or custom prompt")
    try:
        result = analyze_transcription(
            payload.transcription, payload.custom_prompt, payload.recording_ids
        )
    except LLMError as exc:
        logger.exception("Transcription analysis failed for user %s", user["id"])
        raise ApiError(describe_llm_error(exc)) from exc
    return {"success": True, **result}
