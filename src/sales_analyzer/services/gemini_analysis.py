"""Transcription and sales-call evaluation on top of the LLM service.

The model is asked for JSON; replies are parsed leniently (the outermost
``{...}`` span is extracted) and fall back to a zero-score result that keeps
the raw text as the summary when no JSON can be recovered.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from sales_analyzer.constants.analysis_parameters import (
    DEFAULT_ANALYSIS_PARAMETERS,
    AnalysisParameter,
)
from sales_analyzer.models.enums import AnalysisType
from sales_analyzer.services.llm_providers import LLMError
from sales_analyzer.services.llm_service import LLMService

logger = logging.getLogger(__name__)

TRANSCRIPTION_PROMPT = (
    "Please transcribe this audio file accurately. Focus on capturing all spoken words, "
    "including any sales conversation, questions, and responses."
)

PARAMETER_RESPONSE_FORMAT = """Please provide your analysis in the following JSON format:
{
  "score": <number from 1-10>,
  "summary": "<brief summary>",
  "strengths": ["<strength 1>", "<strength 2>"],
  "improvements": ["<improvement 1>", "<improvement 2>"],
  "specific_examples": ["<example 1>", "<example 2>"],
  "recommendations": ["<recommendation 1>", "<recommendation 2>"]
}"""

CUSTOM_RESPONSE_FORMAT = """Please provide a comprehensive analysis based on the instructions above. Format your response as JSON with the following structure:
{
  "summary": "<overall summary>",
  "key_findings": ["<finding 1>", "<finding 2>"],
  "scores": {
    "<aspect 1>": <score 1-10>,
    "<aspect 2>": <score 1-10>
  },
  "recommendations": ["<recommendation 1>", "<recommendation 2>"],
  "specific_examples": ["<example 1>", "<example 2>"]
}"""

CHAT_TEMPERATURE = 0.7

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the outermost JSON object embedded in ``text``, if any."""
    match = _JSON_BLOCK.search(text or "")
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _fallback_parameter_result(raw: str) -> dict[str, Any]:
    return {
        "score": 0,
        "summary": raw,
        "strengths": [],
        "improvements": [],
        "specific_examples": [],
        "recommendations": [],
    }


def _fallback_custom_result(raw: str) -> dict[str, Any]:
    return {
        "summary": raw,
        "key_findings": [],
        "scores": {},
        "recommendations": [],
        "specific_examples": [],
    }


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def overall_score(scores: Iterable[Any], positive_only: bool = True) -> int:
    """Rounded mean of numeric scores; 0 when there is nothing to average.

    Args:
        scores: Candidate score values; non-numeric entries are ignored.
        positive_only: Ignore scores that are not strictly positive.
    """
    numeric = [s for s in scores if _is_number(s) and (s > 0 or not positive_only)]
    if not numeric:
        return 0
    return math.floor(sum(numeric) / len(numeric) + 0.5)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class CallAnalysisService:
    """High-level AI operations used by the analysis pipeline and chatbot."""

    def __init__(self, llm: LLMService | None = None) -> None:
        self.llm = llm or LLMService()

    def transcribe_audio(self, audio: bytes, mime_type: str) -> str:
        """Transcribe an audio recording.

        Raises:
            LLMError: If the AI service rejects or fails the request.
        """
        logger.info("Starting audio transcription, size: %d bytes", len(audio))
        transcription = self.llm.transcribe(TRANSCRIPTION_PROMPT, audio, mime_type)
        logger.info("Transcription completed, length: %d characters", len(transcription))
        return transcription

    def _analyze_parameter(self, transcription: str, parameter: Mapping[str, Any]) -> dict:
        prompt = (
            f"{parameter['prompt']}\n\n"
            f"Sales Call Transcription:\n{transcription}\n\n"
            f"{PARAMETER_RESPONSE_FORMAT}"
        )
        raw = self.llm.send_raw_prompt(prompt)
        parsed = extract_json_object(raw)
        if parsed is None:
            logger.warning("Could not parse JSON for parameter %s", parameter.get("id"))
            return _fallback_parameter_result(raw)
        return parsed

    def _analyze_parameters(
        self, transcription: str, parameters: Iterable[Mapping[str, Any]], kind: AnalysisType
    ) -> dict[str, Any]:
        results: dict[str, Any] = {}
        for parameter in parameters:
            logger.info("Analyzing: %s", parameter.get("name"))
            key = str(parameter.get("id") or parameter.get("name"))
            results[key] = self._analyze_parameter(transcription, parameter)

        return {
            "type": kind.value,
            "overallScore": overall_score(r.get("score") for r in results.values()),
            "analysisDate": _now_iso(),
            "parameters": results,
        }

    def analyze_with_default_parameters(self, transcription: str) -> dict[str, Any]:
        """Evaluate the call against every built-in parameter."""
        logger.info("Starting default analysis")
        return self._analyze_parameters(
            transcription, DEFAULT_ANALYSIS_PARAMETERS.values(), AnalysisType.DEFAULT
        )

    def analyze_with_custom_parameters(
        self, transcription: str, parameters: Iterable[AnalysisParameter | Mapping[str, Any]]
    ) -> dict[str, Any]:
        """Evaluate the call against caller-supplied parameters.

        Disabled parameters (``enabled`` false) are skipped.
        """
        enabled = [p for p in parameters if p.get("enabled", True) and p.get("prompt")]
        logger.info("Starting parameter analysis with %d parameters", len(enabled))
        return self._analyze_parameters(transcription, enabled, AnalysisType.PARAMETERS)

    def analyze_with_custom_prompt(self, transcription: str, custom_prompt: str) -> dict[str, Any]:
        """Run a free-form evaluation prompt over the transcription."""
        logger.info("Starting custom analysis")
        prompt = (
            f"{custom_prompt}\n\n"
            f"Sales Call Transcription:\n{transcription}\n\n"
            f"{CUSTOM_RESPONSE_FORMAT}"
        )
        raw = self.llm.send_raw_prompt(prompt)
        result = extract_json_object(raw)
        if result is None:
            logger.warning("Could not parse JSON for custom analysis")
            result = _fallback_custom_result(raw)

        scores = result.get("scores")
        score_values = scores.values() if isinstance(scores, dict) else []
        return {
            "type": AnalysisType.CUSTOM.value,
            "overallScore": overall_score(score_values, positive_only=False),
            "analysisDate": _now_iso(),
            "customPrompt": custom_prompt,
            "result": result,
        }

    def generate_chat_response(
        self, system_instructions: str, user_content: str, temperature: float = CHAT_TEMPERATURE
    ) -> str:
        """Answer a conversational request about call data.

        Raises:
            LLMError: The AI service failed or replied with nothing.
        """
        answer = self.llm.generate_llm_response(
            system_instructions, user_content, temperature=temperature
        )
        if not answer:
            raise LLMError("AI service returned an empty response")
        return answer


_service: CallAnalysisService | None = None


def get_call_analysis_service() -> CallAnalysisService:
    """Return the shared analysis service, creating it on first use."""
    global _service
    if _service is None:
        _service = CallAnalysisService()
    return _service


def set_call_analysis_service(service: CallAnalysisService | None) -> None:
    """Replace (or reset with None) the shared analysis service."""
    global _service
    _service = service
