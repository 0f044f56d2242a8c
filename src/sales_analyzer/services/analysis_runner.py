"""Analysis lifecycle: request validation, record creation and background runs.

A run moves an Analysis through PROCESSING, TRANSCRIBING and ANALYZING to
COMPLETED, or to FAILED with the error message. Runs are scheduled by the API
layer (FastAPI ``BackgroundTasks``); nothing here retries or resumes a run.
"""

from __future__ import annotations

import gzip
import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from sqlalchemy.orm import Session

from sales_analyzer.config import get_settings
from sales_analyzer.constants.analysis_parameters import default_parameter_list
from sales_analyzer.constants.upload_constants import GZIP_MAGIC
from sales_analyzer.data.db import get_session
from sales_analyzer.data.models import Analysis, AnalysisInsight, CallMetrics, Upload
from sales_analyzer.models.enums import AnalysisStatus, AnalysisType, InsightCategory
from sales_analyzer.services.gemini_analysis import CallAnalysisService, get_call_analysis_service
from sales_analyzer.services.llm_providers import LLMError, describe_llm_error
from sales_analyzer.services.object_storage import StorageError, get_object_store
from sales_analyzer.services.serialization import analysis_summary_to_dict
from sales_analyzer.services.uploads import guess_mime_type

logger = logging.getLogger(__name__)

# analysis_result key -> (insight category, insight key)
_INSIGHT_FIELDS: tuple[tuple[str, InsightCategory, str], ...] = (
    ("summary", InsightCategory.SUMMARY, "call_summary"),
    ("sentiment", InsightCategory.SENTIMENT, "overall_sentiment"),
    ("keywords", InsightCategory.KEYWORDS, "key_topics"),
    ("actionItems", InsightCategory.ACTION_ITEMS, "follow_up_actions"),
    ("participants", InsightCategory.PARTICIPANTS, "participant_analysis"),
    ("emotions", InsightCategory.EMOTIONS, "emotional_analysis"),
    ("topics", InsightCategory.TOPICS, "conversation_topics"),
)

# metrics key in analysis_result -> CallMetrics attribute
_METRIC_FIELDS = {
    "duration": "duration",
    "participantCount": "participant_count",
    "wordCount": "word_count",
    "sentimentScore": "sentiment_score",
    "energyLevel": "energy_level",
    "talkRatio": "talk_ratio",
    "interruptionCount": "interruption_count",
    "pauseCount": "pause_count",
    "speakingPace": "speaking_pace",
}


def validate_analysis_request(
    upload_ids: Sequence[str] | None,
    analysis_type: str | None,
    custom_prompt: str | None,
    custom_parameters: Sequence[Any] | None,
) -> str | None:
    """Return the first validation error for an analyze request, or None."""
    if not upload_ids:
        return "Upload IDs are required"
    if analysis_type not in {t.value for t in AnalysisType}:
        return 'Analysis type must be "default", "custom", or "parameters"'
    if analysis_type == AnalysisType.CUSTOM and not (custom_prompt or "").strip():
        return "Custom prompt is required for custom analysis"
    if analysis_type == AnalysisType.PARAMETERS and not custom_parameters:
        return "Custom parameters are required for parameter-based analysis"
    return None


def create_analyses(
    user_id: str,
    upload_ids: Sequence[str],
    analysis_type: AnalysisType,
    custom_prompt: str | None = None,
    custom_parameters: list[dict[str, Any]] | None = None,
) -> tuple[list[dict[str, Any]], int]:
    """Create PENDING analyses for every owned upload.

    Unknown uploads and uploads owned by other users are counted as failed.

    Returns:
        (created analysis summaries, failed count).
    """
    created: list[dict[str, Any]] = []
    failed = 0
    with get_session() as session:
        for upload_id in upload_ids:
            upload = session.get(Upload, upload_id)
            if upload is None or upload.user_id != user_id:
                logger.error("Upload %s not found or not owned by %s", upload_id, user_id)
                failed += 1
                continue
            analysis = Analysis(
                status=AnalysisStatus.PENDING.value,
                analysis_type=analysis_type.stored,
                custom_prompt=custom_prompt if analysis_type == AnalysisType.CUSTOM else None,
                custom_parameters=(
                    custom_parameters if analysis_type == AnalysisType.PARAMETERS else None
                ),
                user_id=user_id,
                upload_id=upload.id,
            )
            session.add(analysis)
            session.flush()
            created.append(analysis_summary_to_dict(analysis))
            logger.info("Created analysis %s for upload %s", analysis.id, upload_id)
    return created, failed


def parameters_or_default(custom_parameters: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """Use the caller's parameters, or the built-in set when none are given."""
    if custom_parameters:
        return custom_parameters
    return [dict(p) for p in default_parameter_list()]


def decompress_if_needed(key: str, data: bytes) -> bytes:
    """Gunzip payloads stored with a ``.gz`` key or carrying the gzip magic bytes."""
    if key.lower().endswith(".gz") or data[:2] == GZIP_MAGIC:
        return gzip.decompress(data)
    return data


def _set_status(analysis_id: str, status: AnalysisStatus, **fields: Any) -> None:
    with get_session() as session:
        analysis = session.get(Analysis, analysis_id)
        if analysis is None:
            raise LookupError(f"Analysis {analysis_id} not found")
        analysis.status = status.value
        for name, value in fields.items():
            setattr(analysis, name, value)


def _analyze(
    service: CallAnalysisService,
    transcription: str,
    analysis_type: str,
    custom_prompt: str | None,
    custom_parameters: list[dict[str, Any]] | None,
) -> dict[str, Any]:
    if analysis_type == AnalysisType.CUSTOM.stored and custom_prompt:
        return service.analyze_with_custom_prompt(transcription, custom_prompt)
    if analysis_type == AnalysisType.PARAMETERS.stored and custom_parameters:
        return service.analyze_with_custom_parameters(transcription, custom_parameters)
    return service.analyze_with_default_parameters(transcription)


def extract_and_store_insights(
    session: Session, analysis_id: str, analysis_result: dict[str, Any]
) -> int:
    """Persist insights and call metrics found in an analysis result.

    Returns:
        Number of insight rows created.
    """
    created = 0
    for field, category, key in _INSIGHT_FIELDS:
        value = analysis_result.get(field)
        if not value:
            continue
        confidence = analysis_result.get("sentimentConfidence") if field == "sentiment" else None
        session.add(
            AnalysisInsight(
                analysis_id=analysis_id,
                category=category.value,
                key=key,
                value=value,
                confidence=confidence,
            )
        )
        created += 1

    metrics = analysis_result.get("metrics")
    if isinstance(metrics, dict):
        values = {attr: metrics.get(name) for name, attr in _METRIC_FIELDS.items()}
        session.add(CallMetrics(analysis_id=analysis_id, **values))
        logger.info("Stored call metrics for analysis %s", analysis_id)

    if created:
        logger.info("Stored %d insights for analysis %s", created, analysis_id)
    return created


def _cleanup_stored_file(file_url: str) -> None:
    if not get_settings().auto_delete_files:
        logger.info("Auto-cleanup disabled - keeping uploaded file %s", file_url)
        return
    try:
        get_object_store().delete_object(file_url)
    except StorageError:
        logger.exception("Auto-cleanup failed for %s", file_url)


def run_analysis(
    analysis_id: str,
    service_factory: Callable[[], CallAnalysisService] = get_call_analysis_service,
) -> None:
    """Process one analysis end to end. Never raises; failures are recorded."""
    started = time.monotonic()

    def elapsed_ms() -> int:
        return int((time.monotonic() - started) * 1000)

    file_url: str | None = None
    try:
        with get_session() as session:
            analysis = session.get(Analysis, analysis_id)
            if analysis is None:
                logger.error("Analysis %s disappeared before processing", analysis_id)
                return
            upload = analysis.upload
            file_url = upload.file_url
            filename = upload.filename
            recorded_mime = upload.mime_type
            analysis_type = analysis.analysis_type
            custom_prompt = analysis.custom_prompt
            custom_parameters = analysis.custom_parameters
            analysis.status = AnalysisStatus.PROCESSING.value

        logger.info("Processing analysis %s (%s)", analysis_id, analysis_type)
        raw = get_object_store().get_object_bytes(file_url)
        audio = decompress_if_needed(file_url, raw)
        mime_type = guess_mime_type(filename, recorded_mime)

        _set_status(analysis_id, AnalysisStatus.TRANSCRIBING)
        service = service_factory()
        transcription = service.transcribe_audio(audio, mime_type)

        _set_status(analysis_id, AnalysisStatus.ANALYZING, transcription=transcription)
        result = _analyze(service, transcription, analysis_type, custom_prompt, custom_parameters)
        result["transcription"] = transcription

        with get_session() as session:
            analysis = session.get(Analysis, analysis_id)
            analysis.status = AnalysisStatus.COMPLETED.value
            analysis.analysis_result = result
            analysis.transcription = transcription
            analysis.analysis_duration = elapsed_ms()
            analysis.error_message = None
            extract_and_store_insights(session, analysis_id, result)
        logger.info("Analysis %s completed in %d ms", analysis_id, elapsed_ms())
    except Exception as exc:
        logger.exception("Background analysis failed for %s", analysis_id)
        message = describe_llm_error(exc) if isinstance(exc, LLMError) else str(exc)
        try:
            _set_status(
                analysis_id,
                AnalysisStatus.FAILED,
                error_message=message or "Unknown error occurred",
                analysis_duration=elapsed_ms(),
            )
        except Exception:
            logger.exception("Could not record failure for analysis %s", analysis_id)

    if file_url:
        _cleanup_stored_file(file_url)
