"""Read endpoints that return only the fields the caller asks for."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Path, Query

from sales_analyzer.api.dependencies import CurrentUser
from sales_analyzer.api.errors import InvalidRequest, NotFound
from sales_analyzer.services.analysis_queries import (
    AnalysisNotReady,
    IncludeMode,
    clamp_pagination,
    get_analysis_view,
    get_recent_activity,
    get_user_analytics,
    list_uploads_page,
)

router = APIRouter(tags=["optimized"])


def _meta(**extra: Any) -> dict[str, Any]:
    return {"retrievedAt": datetime.now(UTC).isoformat(), **extra}


@router.get("/analysis-optimized/{analysis_id}")
def get_analysis_optimized(
    user: CurrentUser,
    analysis_id: str = Path(description="Analysis to load"),
    include: str = Query(
        IncludeMode.SUMMARY.value, description="summary, result, transcription or all"
    ),
) -> dict[str, Any]:
    """Fetch one analysis with only the requested large fields.

    Raises:
        InvalidRequest: Unknown ``include`` value (400).
        NotFound: Missing or foreign analysis, or result requested before completion (404).
    """
    try:
        mode = IncludeMode(include)
    except ValueError as exc:
        raise InvalidRequest(
            "Invalid include parameter. Must be one of: summary, result, transcription, all"
        ) from exc

    try:
        data = get_analysis_view(user["id"], analysis_id, mode)
    except AnalysisNotReady as exc:
        raise NotFound("Analysis not found or not ready") from exc
    if data is None:
        raise NotFound("Analysis not found")
    return {"success": True, "data": data, "meta": _meta(include=mode.value)}


@router.get("/uploads-optimized")
def get_uploads_optimized(
    user: CurrentUser,
    page: int | None = Query(None),
    limit: int | None = Query(None),
    search: str | None = Query(None),
) -> dict[str, Any]:
    """Paginated uploads with latest-analysis metadata only."""
    safe_page, safe_limit = clamp_pagination(page, limit)
    result = list_uploads_page(user["id"], safe_page, safe_limit, (search or "").strip() or None)
    return {
        "success": True,
        "uploads": result["uploads"],
        "pagination": result["pagination"],
        "meta": _meta(search=search or None),
    }


@router.get("/analytics-optimized")
def get_analytics_optimized(
    user: CurrentUser,
    include_activity: bool = Query(False, alias="includeActivity"),
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": True,
        "analytics": get_user_analytics(user["id"]),
        "meta": _meta(),
    }
    if include_activity:
        body["recentActivity"] = get_recent_activity(user["id"])
    return body
