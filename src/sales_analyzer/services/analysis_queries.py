"""Read-side queries that fetch only the fields a caller asks for.

``Analysis.transcription`` and ``Analysis.analysis_result`` are deferred
columns, so the summary-style queries here never load them unless the
caller explicitly includes them.
"""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import joinedload, selectinload, undefer

from sales_analyzer.data.db import get_session
from sales_analyzer.data.models import Analysis, AnalysisInsight, Upload
from sales_analyzer.models.enums import AnalysisStatus, is_completed
from sales_analyzer.services.serialization import (
    analysis_summary_to_dict,
    analysis_to_dict,
    call_metrics_to_dict,
    insight_to_dict,
    iso,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 50
RECENT_WINDOW = timedelta(days=30)
RECENT_ACTIVITY_LIMIT = 5


class IncludeMode(StrEnum):
    SUMMARY = "summary"
    RESULT = "result"
    TRANSCRIPTION = "transcription"
    ALL = "all"


class AnalysisNotReady(Exception):
    """Raised when a result is requested before the analysis has completed."""


def _upload_summary(upload: Upload | None) -> dict[str, Any] | None:
    if upload is None:
        return None
    return {
        "id": upload.id,
        "filename": upload.filename,
        "originalName": upload.original_name,
        "fileSize": str(upload.file_size),
        "mimeType": upload.mime_type,
        "uploadedAt": iso(upload.uploaded_at),
    }


def get_analysis_view(
    user_id: str, analysis_id: str, include: IncludeMode
) -> dict[str, Any] | None:
    """Load one owned analysis projected for ``include``.

    Returns:
        The payload, or None if the analysis is missing or owned by someone else.

    Raises:
        AnalysisNotReady: ``include`` is RESULT and the analysis is not COMPLETED.
    """
    with get_session() as session:
        query = session.query(Analysis).filter(
            Analysis.id == analysis_id, Analysis.user_id == user_id
        )
        if include == IncludeMode.RESULT:
            query = query.options(undefer(Analysis.analysis_result))
        elif include == IncludeMode.TRANSCRIPTION:
            query = query.options(undefer(Analysis.transcription))
        elif include == IncludeMode.ALL:
            query = query.options(
                undefer(Analysis.analysis_result),
                undefer(Analysis.transcription),
                joinedload(Analysis.upload),
                joinedload(Analysis.call_metrics),
                selectinload(Analysis.insights),
            )
        else:
            query = query.options(joinedload(Analysis.upload), joinedload(Analysis.call_metrics))

        analysis = query.first()
        if analysis is None:
            return None

        if include == IncludeMode.RESULT:
            if not is_completed(analysis.status):
                raise AnalysisNotReady(analysis.status)
            return {
                "id": analysis.id,
                "status": analysis.status,
                "analysisResult": analysis.analysis_result,
            }
        if include == IncludeMode.TRANSCRIPTION:
            return {
                "id": analysis.id,
                "status": analysis.status,
                "transcription": analysis.transcription,
            }

        data = analysis_summary_to_dict(analysis)
        data["upload"] = _upload_summary(analysis.upload)
        data["callMetrics"] = call_metrics_to_dict(analysis.call_metrics)
        if include == IncludeMode.ALL:
            data["transcription"] = analysis.transcription
            data["analysisResult"] = analysis.analysis_result
            data["insights"] = [insight_to_dict(i) for i in analysis.insights]
        return data


def list_analyses(user_id: str, analysis_id: str | None = None) -> list[dict[str, Any]] | None:
    """Full analyses (with upload) for a user, or just one when ``analysis_id`` is set.

    Returns None if a specific analysis was requested and is not the user's.
    """
    with get_session() as session:
        query = (
            session.query(Analysis)
            .options(
                undefer(Analysis.analysis_result),
                undefer(Analysis.transcription),
                joinedload(Analysis.upload),
            )
            .filter(Analysis.user_id == user_id)
        )
        if analysis_id:
            analysis = query.filter(Analysis.id == analysis_id).first()
            return [analysis_to_dict(analysis, include_upload=True)] if analysis else None
        analyses = query.order_by(Analysis.created_at.desc()).all()
        return [analysis_to_dict(a, include_upload=True) for a in analyses]


def clamp_pagination(page: int | None, limit: int | None) -> tuple[int, int]:
    """Page is at least 1; limit is clamped to 1..50 and defaults to 20."""
    safe_page = max(1, page or 1)
    safe_limit = DEFAULT_PAGE_LIMIT if limit is None else min(MAX_PAGE_LIMIT, max(1, limit))
    return safe_page, safe_limit


def _latest_analysis(upload: Upload) -> dict[str, Any] | None:
    if not upload.analyses:
        return None
    latest = upload.analyses[0]
    return {
        "id": latest.id,
        "status": latest.status,
        "analysisType": latest.analysis_type,
        "createdAt": iso(latest.created_at),
        "errorMessage": latest.error_message,
    }


def _upload_list_item(upload: Upload) -> dict[str, Any]:
    data = _upload_summary(upload) or {}
    data["latestAnalysis"] = _latest_analysis(upload)
    return data


def list_uploads_page(
    user_id: str, page: int, limit: int, search: str | None = None
) -> dict[str, Any]:
    """Paginated upload listing with latest-analysis metadata only.

    With ``search`` the result is a single page of at most ``limit`` uploads
    whose original or stored name contains the term (case-insensitive).
    """
    with get_session() as session:
        base = session.query(Upload).filter(Upload.user_id == user_id)
        if search:
            pattern = f"%{search.lower()}%"
            uploads = (
                base.filter(
                    or_(
                        func.lower(Upload.original_name).like(pattern),
                        func.lower(Upload.filename).like(pattern),
                    )
                )
                .options(selectinload(Upload.analyses))
                .order_by(Upload.uploaded_at.desc())
                .limit(limit)
                .all()
            )
            return {
                "uploads": [_upload_list_item(u) for u in uploads],
                "pagination": {
                    "page": 1,
                    "limit": limit,
                    "totalCount": len(uploads),
                    "totalPages": 1,
                    "hasNext": False,
                    "hasPrev": False,
                },
            }

        total = base.count()
        uploads = (
            base.options(selectinload(Upload.analyses))
            .order_by(Upload.uploaded_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        total_pages = math.ceil(total / limit) if total else 0
        return {
            "uploads": [_upload_list_item(u) for u in uploads],
            "pagination": {
                "page": page,
                "limit": limit,
                "totalCount": total,
                "totalPages": total_pages,
                "hasNext": page < total_pages,
                "hasPrev": page > 1,
            },
        }


def get_user_analytics(user_id: str) -> dict[str, Any]:
    """Aggregate upload and analysis counts for the dashboard."""
    since = datetime.now(UTC) - RECENT_WINDOW
    with get_session() as session:
        total_uploads = session.query(Upload).filter(Upload.user_id == user_id).count()
        analyses = session.query(Analysis).filter(Analysis.user_id == user_id)
        total = analyses.count()
        completed = analyses.filter(Analysis.status == AnalysisStatus.COMPLETED.value).count()
        failed = analyses.filter(Analysis.status == AnalysisStatus.FAILED.value).count()
        recent = analyses.filter(Analysis.created_at >= since).count()
        avg_duration = (
            session.query(func.avg(Analysis.analysis_duration))
            .filter(
                Analysis.user_id == user_id,
                Analysis.status == AnalysisStatus.COMPLETED.value,
                Analysis.analysis_duration.is_not(None),
            )
            .scalar()
        )

    logger.info("Retrieved analytics for user %s", user_id)
    return {
        "totalUploads": total_uploads,
        "totalAnalyses": total,
        "completedAnalyses": completed,
        "failedAnalyses": failed,
        "pendingAnalyses": total - completed - failed,
        "successRate": round(completed / total * 100) if total else 0,
        "recentAnalysesCount": recent,
        "avgAnalysisDuration": float(avg_duration) if avg_duration is not None else 0,
    }


def get_recent_activity(user_id: str, limit: int = RECENT_ACTIVITY_LIMIT) -> list[dict[str, Any]]:
    with get_session() as session:
        analyses = (
            session.query(Analysis)
            .options(joinedload(Analysis.upload))
            .filter(Analysis.user_id == user_id)
            .order_by(Analysis.created_at.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": a.id,
                "status": a.status,
                "analysisType": a.analysis_type,
                "createdAt": iso(a.created_at),
                "analysisDuration": a.analysis_duration,
                "upload": {
                    "id": a.upload.id,
                    "originalName": a.upload.original_name,
                    "fileSize": str(a.upload.file_size),
                }
                if a.upload
                else None,
            }
            for a in analyses
        ]


def list_insights(
    user_id: str,
    analysis_id: str | None = None,
    category: str | None = None,
    limit: int = 10,
) -> dict[str, Any]:
    """Latest insights for a user plus per-category counts across all analyses."""
    with get_session() as session:
        query = (
            session.query(AnalysisInsight)
            .join(Analysis, AnalysisInsight.analysis_id == Analysis.id)
            .options(joinedload(AnalysisInsight.analysis).joinedload(Analysis.upload))
            .filter(Analysis.user_id == user_id)
        )
        if analysis_id:
            query = query.filter(AnalysisInsight.analysis_id == analysis_id)
        if category:
            query = query.filter(AnalysisInsight.category == category)
        insights = query.order_by(AnalysisInsight.created_at.desc()).limit(limit).all()

        items = []
        for insight in insights:
            data = insight_to_dict(insight)
            upload = insight.analysis.upload if insight.analysis else None
            data["upload"] = _upload_summary(upload)
            items.append(data)

        counts = (
            session.query(AnalysisInsight.category, func.count(AnalysisInsight.id))
            .join(Analysis, AnalysisInsight.analysis_id == Analysis.id)
            .filter(Analysis.user_id == user_id)
            .group_by(AnalysisInsight.category)
            .all()
        )

    return {
        "insights": items,
        "summary": [{"category": c, "count": n} for c, n in counts],
        "total": len(items),
    }


def completed_analyses_for_context(user_id: str) -> list[dict[str, Any]]:
    """Completed analyses with transcription, result and upload, newest first."""
    with get_session() as session:
        analyses = (
            session.query(Analysis)
            .options(
                undefer(Analysis.analysis_result),
                undefer(Analysis.transcription),
                joinedload(Analysis.upload),
            )
            .filter(
                Analysis.user_id == user_id,
                Analysis.status == AnalysisStatus.COMPLETED.value,
            )
            .order_by(Analysis.created_at.desc())
            .all()
        )
        return [analysis_to_dict(a, include_upload=True) for a in analyses]