"""Snapshot of analyses that are still being processed."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.orm import joinedload

from sales_analyzer.data.db import get_session
from sales_analyzer.data.models import Analysis
from sales_analyzer.models.enums import AnalysisStatus

logger = logging.getLogger(__name__)

IN_PROGRESS_STAGES = (
    AnalysisStatus.PENDING,
    AnalysisStatus.PROCESSING,
    AnalysisStatus.TRANSCRIBING,
    AnalysisStatus.ANALYZING,
)

# No status change for this long counts as stuck
STUCK_AFTER = timedelta(minutes=5)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _elapsed_ms(since: datetime, now: datetime) -> int:
    return max(0, int((now - _as_utc(since)).total_seconds() * 1000))


def monitoring_stats(user_id: str, now: datetime | None = None) -> dict[str, Any]:
    """Count the user's in-progress analyses per stage and find the oldest one.

    Args:
        user_id: Owner of the analyses.
        now: Reference time for elapsed times; defaults to the current time.
    """
    now = now or datetime.now(UTC)
    with get_session() as session:
        analyses = (
            session.query(Analysis)
            .options(joinedload(Analysis.upload))
            .filter(
                Analysis.user_id == user_id,
                Analysis.status.in_([stage.value for stage in IN_PROGRESS_STAGES]),
            )
            .order_by(Analysis.created_at)
            .all()
        )

        by_stage: dict[str, int] = {}
        for analysis in analyses:
            by_stage[analysis.status] = by_stage.get(analysis.status, 0) + 1
            idle = now - _as_utc(analysis.updated_at)
            if idle > STUCK_AFTER:
                logger.warning(
                    "Analysis %s may be stuck in %s (no update for %ds)",
                    analysis.id,
                    analysis.status,
                    idle.total_seconds(),
                )

        longest = None
        if analyses:
            oldest = analyses[0]
            longest = {
                "id": oldest.id,
                "filename": oldest.upload.filename if oldest.upload else "unknown",
                "elapsedTime": _elapsed_ms(oldest.created_at, now),
            }

    return {"totalInProgress": len(analyses), "byStage": by_stage, "longestRunning": longest}
