"""Ad-hoc questions over transcriptions supplied by the caller."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from sales_analyzer.services.gemini_analysis import get_call_analysis_service

logger = logging.getLogger(__name__)

TRANSCRIPTION_ANALYST_INSTRUCTIONS = """You are an expert sales and communication analyst. Analyze the call transcription(s) you are given and answer the specific question asked.

Provide a comprehensive, insightful analysis that directly addresses the question. Focus on:
- Direct answers to the specific question asked
- Key insights and patterns
- Actionable recommendations
- Specific examples from the transcription(s) when relevant

Format your response in a clear, structured manner as plain text."""


def flatten_transcription(transcription: str) -> str:
    """Render a diarized JSON transcription as ``speaker: text`` lines.

    ``english_translation`` is preferred over ``diarized_transcription`` when
    present. Anything else, including plain text, is returned unchanged.
    """
    try:
        data = json.loads(transcription)
    except ValueError:
        logger.warning("Transcription is not valid JSON, using it as plain text")
        return transcription
    if not isinstance(data, dict) or not isinstance(data.get("diarized_transcription"), list):
        return transcription
    translation = data.get("english_translation")
    turns = data["diarized_transcription"]
    if isinstance(translation, list) and translation:
        turns = translation
    return "\n".join(
        f"{turn.get('speaker')}: {turn.get('text')}" for turn in turns if isinstance(turn, dict)
    )


def analyze_transcription(
    transcription: str, question: str, recording_ids: list[str] | None = None
) -> dict[str, Any]:
    """Answer ``question`` about ``transcription``.

    Raises:
        LLMError: The AI service failed.
    """
    recording_count = len(recording_ids or [])
    logger.info("Starting custom transcription analysis for %d recordings", recording_count)
    content = (
        f"TRANSCRIPTION(S):\n{flatten_transcription(transcription)}\n\n"
        f"QUESTION TO ANSWER:\n{question}"
    )
    analysis = get_call_analysis_service().generate_chat_response(
        TRANSCRIPTION_ANALYST_INSTRUCTIONS, content
    )
    logger.info("Custom transcription analysis completed")
    return {
        "analysis": analysis,
        "metadata": {
            "recordingCount": recording_count,
            "prompt": question,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    }
