"""Monitoring of analyses that have not finished yet."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from sales_analyzer.api.dependencies import CurrentUser
from sales_analyzer.api.errors import ApiError
from sales_analyzer.services.analysis_monitor import monitoring_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/monitoring", tags=["monitoring"])


@router.get("/analysis")
def get_analysis_monitoring(user: CurrentUser) -> dict[str, Any]:
    try:
        stats = monitoring_stats(user["id"])
    except Exception as exc:
        logger.exception("Failed to collect monitoring stats for user %s", user["id"])
        raise ApiError("Failed to retrieve monitoring statistics") from exc
    logger.info(
        "Monitoring stats for user %s: %d in progress", user["id"], stats["totalInProgress"]
    )
    return {"success": True, "data": stats}
