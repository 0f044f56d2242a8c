"""Question answering over a user's analyzed calls.

Context comes from one analysis, the latest completed analysis of one upload,
or every completed analysis the user owns, in that order of precedence.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import undefer

from sales_analyzer.data.db import get_session
from sales_analyzer.data.models import Analysis, Upload
from sales_analyzer.models.enums import AnalysisStatus
from sales_analyzer.services.analysis_queries import completed_analyses_for_context
from sales_analyzer.services.gemini_analysis import get_call_analysis_service

logger = logging.getLogger(__name__)

NO_COMPLETED_ANALYSES = (
    "No completed analyses found. Please upload and analyze call recordings first."
)

CHATBOT_INSTRUCTIONS = """1. Answer the user's question based on the available call recording data and analysis results
2. Be specific and reference actual content from the transcriptions and analysis when possible
3. If the question is about performance metrics, refer to the scores and detailed analysis provided
4. If asking about specific calls, mention the call recording name when relevant
5. Provide actionable insights and recommendations when appropriate
6. If the question cannot be answered with the available data, explain what information is missing
7. Keep your response conversational but professional
8. Use bullet points or numbered lists for clarity when listing multiple items
9. If referring to scores, always mention the scale (1-10) and provide context
10. **IMPORTANT: Keep responses SHORT and TO THE POINT. Provide concise answers that directly address the question without excessive detail or explanation.**"""


class ChatContextNotFound(LookupError):
    """No usable context exists for the requested scope."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class ChatContext:
    text: str
    source: str


def _date(value: datetime | None) -> str:
    return value.date().isoformat() if value else "Unknown"


def _result_json(result: Any) -> str:
    return json.dumps(result, indent=2, default=str)


def _context_for_analysis(user_id: str, analysis_id: str) -> ChatContext:
    with get_session() as session:
        analysis = (
            session.query(Analysis)
            .options(undefer(Analysis.transcription), undefer(Analysis.analysis_result))
            .filter(Analysis.id == analysis_id, Analysis.user_id == user_id)
            .first()
        )
        if analysis is None:
            raise ChatContextNotFound("Analysis not found or access denied")
        name = analysis.upload.original_name if analysis.upload else "Unknown"
        text = (
            f"**Call Recording: {name}**\n"
            f"**Analysis Type:** {analysis.analysis_type}\n"
            f"**Transcription:**\n{analysis.transcription or 'No transcription available'}\n\n"
            f"**Analysis Results:**\n{_result_json(analysis.analysis_result)}"
        )
        return ChatContext(text=text, source=f"Analysis: {analysis.id}")


def _context_for_upload(user_id: str, upload_id: str) -> ChatContext:
    with get_session() as session:
        upload = (
            session.query(Upload).filter(Upload.id == upload_id, Upload.user_id == user_id).first()
        )
        if upload is None:
            raise ChatContextNotFound("Upload not found or access denied")
        analysis = (
            session.query(Analysis)
            .options(undefer(Analysis.transcription), undefer(Analysis.analysis_result))
            .filter(
                Analysis.upload_id == upload_id,
                Analysis.user_id == user_id,
                Analysis.status == AnalysisStatus.COMPLETED.value,
            )
            .order_by(Analysis.created_at.desc())
            .first()
        )
        if analysis is None:
            raise ChatContextNotFound("No completed analysis found for this upload")
        text = (
            f"**Call Recording: {upload.original_name}**\n"
            f"**File Size:** {round(upload.file_size / 1024)} KB\n"
            f"**Upload Date:** {_date(upload.uploaded_at)}\n\n"
            f"**Transcription:**\n{analysis.transcription or 'No transcription available'}\n\n"
            f"**Analysis Results:**\n{_result_json(analysis.analysis_result)}"
        )
        return ChatContext(text=text, source=f"Upload: {upload.original_name}")


def _context_for_user(user_id: str) -> ChatContext:
    analyses = completed_analyses_for_context(user_id)
    if not analyses:
        raise ChatContextNotFound(NO_COMPLETED_ANALYSES)
    sections = []
    for index, analysis in enumerate(analyses, start=1):
        upload = analysis.get("upload") or {}
        sections.append(
            f"**Call Recording {index}: {upload.get('originalName', 'Unknown')}**\n"
            f"**Analysis Type:** {analysis['analysisType']}\n"
            f"**Upload Date:** {(upload.get('uploadedAt') or 'Unknown')[:10]}\n\n"
            f"**Transcription:**\n{analysis['transcription'] or 'No transcription available'}\n\n"
            f"**Analysis Results:**\n{_result_json(analysis['analysisResult'])}\n\n---"
        )
    return ChatContext(text="\n".join(sections), source=f"All analyses ({len(analyses)} calls)")


def build_context(
    user_id: str, analysis_id: str | None = None, upload_id: str | None = None
) -> ChatContext:
    """Resolve chat context for the requested scope.

    Raises:
        ChatContextNotFound: The scope is missing, foreign, or has no completed analysis.
    """
    if analysis_id:
        return _context_for_analysis(user_id, analysis_id)
    if upload_id:
        return _context_for_upload(user_id, upload_id)
    return _context_for_user(user_id)


CHATBOT_SYSTEM_INSTRUCTIONS = (
    "You are a helpful AI assistant specializing in call analysis. You have access to "
    "call recording transcriptions and detailed analysis results. Your role is to help "
    "users understand their call performance by answering questions about their call "
    "recordings and analysis results.\n\n"
    f"**Instructions:**\n{CHATBOT_INSTRUCTIONS}\n\n"
    "**Response Format:**\n"
    "Provide a brief, clear response that directly addresses the user's question. Be "
    "concise and focus on the most important information from the call transcriptions "
    "and analysis results."
)


def build_chat_content(context: str, question: str) -> str:
    return f"**Available Context:**\n{context}\n\n**User Question:** {question}"


def answer_question(
    user_id: str,
    question: str,
    analysis_id: str | None = None,
    upload_id: str | None = None,
) -> dict[str, Any]:
    """Answer ``question`` using the resolved context.

    Raises:
        ChatContextNotFound: See ``build_context``.
        LLMError: The AI service failed.
    """
    context = build_context(user_id, analysis_id, upload_id)
    logger.info("Answering chatbot question with context %s", context.source)
    answer = get_call_analysis_service().generate_chat_response(
        CHATBOT_SYSTEM_INSTRUCTIONS, build_chat_content(context.text, question)
    )
    return {
        "question": question,
        "answer": answer,
        "contextSource": context.source,
        "timestamp": datetime.now(UTC).isoformat(),
    }


def available_context(user_id: str) -> dict[str, Any]:
    """Completed analyses the chatbot can draw on."""
    analyses = completed_analyses_for_context(user_id)
    items = [
        {
            "analysisId": a["id"],
            "uploadId": a["uploadId"],
            "fileName": (a.get("upload") or {}).get("originalName", "Unknown"),
            "analysisType": a["analysisType"],
            "uploadDate": (a.get("upload") or {}).get("uploadedAt"),
            "overallScore": (a.get("analysisResult") or {}).get("overallScore", 0),
        }
        for a in analyses
    ]
    return {
        "availableContext": items,
        "totalAnalyses": len(items),
        "message": (
            "Ready to answer questions about your call recordings and analysis results."
            if items
            else NO_COMPLETED_ANALYSES
        ),
    }
