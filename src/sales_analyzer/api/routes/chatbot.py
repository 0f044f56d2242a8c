"""Chatbot routes answering questions about analyzed calls."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from sales_analyzer.api.dependencies import CurrentUser
from sales_analyzer.api.errors import ApiError, InvalidRequest, NotFound
from sales_analyzer.api.schemas.analysis import ChatbotRequest
from sales_analyzer.services.chatbot import (
    ChatContextNotFound,
    answer_question,
    available_context,
)
from sales_analyzer.services.llm_providers import LLMError, describe_llm_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chatbot", tags=["chatbot"])


@router.post("")
def ask(payload: ChatbotRequest, user: CurrentUser) -> dict[str, Any]:
    """Answer a question using one analysis, one upload, or all completed analyses.

    Raises:
        InvalidRequest: The question is missing (400).
        NotFound: No usable context for the requested scope (404).
        ApiError: The AI service failed (500).
    """
    question = (payload.question or "").strip()
    if not question:
        raise InvalidRequest("Question is required")
    try:
        data = answer_question(user["id"], question, payload.analysis_id, payload.upload_id)
    except ChatContextNotFound as exc:
        raise NotFound(exc.message) from exc
    except LLMError as exc:
        logger.exception("Chatbot request failed for user %s", user["id"])
        raise ApiError(describe_llm_error(exc)) from exc
    return {"success": True, "data": data}


@router.get("")
def get_available_context(user: CurrentUser) -> dict[str, Any]:
    return {"success": True, "data": available_context(user["id"])}
