"""Conversion of ORM rows into JSON-ready camelCase dictionaries.

All helpers must run while the row's session is still open when they touch
relationships or deferred columns (``Analysis.transcription`` and
``Analysis.analysis_result``).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sales_analyzer.data.models import (
    ActionItem,
    ActionItemType,
    Analysis,
    AnalysisInsight,
    CallMetrics,
    Upload,
    User,
)


def iso(value: datetime | None) -> str | None:
    """Format a timestamp as ISO-8601, treating naive values as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "isEmailVerified": user.is_email_verified,
        "createdAt": iso(user.created_at),
    }


def upload_to_dict(upload: Upload) -> dict[str, Any]:
    """Serialize an upload; ``fileSize`` is a string to survive 64-bit sizes in JSON."""
    return {
        "id": upload.id,
        "filename": upload.filename,
        "originalName": upload.original_name,
        "fileSize": str(upload.file_size),
        "mimeType": upload.mime_type,
        "fileUrl": upload.file_url,
        "uploadedAt": iso(upload.uploaded_at),
        "userId": upload.user_id,
    }


def analysis_summary_to_dict(analysis: Analysis) -> dict[str, Any]:
    """Serialize an analysis without its large fields."""
    return {
        "id": analysis.id,
        "status": analysis.status,
        "analysisType": analysis.analysis_type,
        "customPrompt": analysis.custom_prompt,
        "customParameters": analysis.custom_parameters,
        "errorMessage": analysis.error_message,
        "analysisDuration": analysis.analysis_duration,
        "createdAt": iso(analysis.created_at),
        "updatedAt": iso(analysis.updated_at),
        "userId": analysis.user_id,
        "uploadId": analysis.upload_id,
    }


def analysis_to_dict(analysis: Analysis, include_upload: bool = False) -> dict[str, Any]:
    """Serialize an analysis including transcription and result."""
    data = analysis_summary_to_dict(analysis)
    data["transcription"] = analysis.transcription
    data["analysisResult"] = analysis.analysis_result
    if include_upload and analysis.upload is not None:
        data["upload"] = upload_to_dict(analysis.upload)
    return data


def insight_to_dict(insight: AnalysisInsight) -> dict[str, Any]:
    return {
        "id": insight.id,
        "analysisId": insight.analysis_id,
        "category": insight.category,
        "key": insight.key,
        "value": insight.value,
        "confidence": insight.confidence,
        "createdAt": iso(insight.created_at),
    }


def call_metrics_to_dict(metrics: CallMetrics | None) -> dict[str, Any] | None:
    if metrics is None:
        return None
    return {
        "id": metrics.id,
        "analysisId": metrics.analysis_id,
        "duration": metrics.duration,
        "participantCount": metrics.participant_count,
        "wordCount": metrics.word_count,
        "sentimentScore": metrics.sentiment_score,
        "energyLevel": metrics.energy_level,
        "talkRatio": metrics.talk_ratio,
        "interruptionCount": metrics.interruption_count,
        "pauseCount": metrics.pause_count,
        "speakingPace": metrics.speaking_pace,
    }


def action_item_type_to_dict(item_type: ActionItemType) -> dict[str, Any]:
    return {
        "id": item_type.id,
        "userId": item_type.user_id,
        "name": item_type.name,
        "description": item_type.description,
        "prompt": item_type.prompt,
        "enabled": item_type.enabled,
        "color": item_type.color,
        "icon": item_type.icon,
        "createdAt": iso(item_type.created_at),
        "updatedAt": iso(item_type.updated_at),
    }


def action_item_to_dict(item: ActionItem, include_analysis: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": item.id,
        "analysisId": item.analysis_id,
        "title": item.title,
        "description": item.description,
        "status": item.status,
        "priority": item.priority,
        "deadline": iso(item.deadline),
        "comments": item.comments,
        "createdAt": iso(item.created_at),
        "updatedAt": iso(item.updated_at),
    }
    if include_analysis and item.analysis is not None:
        upload = item.analysis.upload
        data["analysis"] = {
            "id": item.analysis.id,
            "uploadId": item.analysis.upload_id,
            "upload": {"id": upload.id, "originalName": upload.original_name} if upload else None,
        }
    return data
