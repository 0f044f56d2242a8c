"""Routes that start and list call analyses."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Query

from sales_analyzer.api.dependencies import CurrentUser
from sales_analyzer.api.errors import InvalidRequest, NotFound
from sales_analyzer.api.schemas.analysis import AnalyzeRequest
from sales_analyzer.models.enums import AnalysisType
from sales_analyzer.services.analysis_queries import list_analyses
from sales_analyzer.services.analysis_runner import (
    create_analyses,
    run_analysis,
    validate_analysis_request,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyze", tags=["analysis"])


def start_analyses(
    background_tasks: BackgroundTasks,
    user_id: str,
    upload_ids: Sequence[str],
    analysis_type: AnalysisType,
    custom_prompt: str | None = None,
    custom_parameters: list[dict[str, Any]] | None = None,
) -> tuple[list[dict[str, Any]], int]:
    """Create analyses and queue one background run per created analysis.

    Returns:
        (created analysis summaries, number of uploads that could not be analyzed).
    """
    analyses, failed = create_analyses(
        user_id, upload_ids, analysis_type, custom_prompt, custom_parameters
    )
    for analysis in analyses:
        background_tasks.add_task(run_analysis, analysis["id"])
    logger.info("Queued %d analyses (%d failed) for user %s", len(analyses), failed, user_id)
    return analyses, failed


@router.post("")
def analyze(
    payload: AnalyzeRequest, background_tasks: BackgroundTasks, user: CurrentUser
) -> dict[str, Any]:
    """Start analyses for the caller's uploads.

    Raises:
        InvalidRequest: Missing uploads, unknown type, or missing prompt/parameters (400).
    """
    custom_parameters = payload.parameters_as_dicts()
    error = validate_analysis_request(
        payload.upload_ids, payload.analysis_type, payload.custom_prompt, custom_parameters
    )
    if error:
        raise InvalidRequest(error)

    upload_ids = payload.upload_ids or []
    analyses, failed = start_analyses(
        background_tasks,
        user["id"],
        upload_ids,
        AnalysisType(payload.analysis_type),
        payload.custom_prompt,
        custom_parameters,
    )
    return {
        "success": True,
        "message": f"Analysis started for {len(analyses)} files",
        "analyses": analyses,
        "summary": {
            "total": len(upload_ids),
            "successful": len(analyses),
            "failed": failed,
        },
    }


@router.get("")
def get_analyses(
    user: CurrentUser,
    analysis_id: str | None = Query(None, alias="analysisId"),
) -> dict[str, Any]:
    """List the caller's analyses, or fetch one with ``analysisId``."""
    analyses = list_analyses(user["id"], analysis_id)
    if analyses is None:
        raise NotFound("Analysis not found")
    if analysis_id:
        return {"success": True, "analysis": analyses[0]}
    return {"success": True, "analyses": analyses}
