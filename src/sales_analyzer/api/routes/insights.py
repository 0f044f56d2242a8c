"""Insight listing routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from sales_analyzer.api.dependencies import CurrentUser
from sales_analyzer.api.errors import InvalidRequest
from sales_analyzer.models.enums import InsightCategory
from sales_analyzer.services.analysis_queries import list_insights

router = APIRouter(prefix="/insights", tags=["insights"])


@router.get("")
def get_insights(
    user: CurrentUser,
    analysis_id: str | None = Query(None, alias="analysisId"),
    category: str | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
) -> dict[str, Any]:
    """Latest insights for the caller, optionally narrowed to one analysis or category."""
    if category and category not in {c.value for c in InsightCategory}:
        raise InvalidRequest(f"Unknown insight category: {category}")
    result = list_insights(user["id"], analysis_id, category, limit)
    return {"success": True, **result}
