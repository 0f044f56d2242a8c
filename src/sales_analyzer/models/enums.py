"""Status and category enumerations shared by the ORM and the API."""

from __future__ import annotations

from enum import StrEnum


class AnalysisStatus(StrEnum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    TRANSCRIBING = "TRANSCRIBING"
    ANALYZING = "ANALYZING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class AnalysisType(StrEnum):
    DEFAULT = "default"
    CUSTOM = "custom"
    PARAMETERS = "parameters"

    @property
    def stored(self) -> str:
        """Upper-case form persisted on Analysis rows."""
        return self.value.upper()


class InsightCategory(StrEnum):
    SUMMARY = "summary"
    SENTIMENT = "sentiment"
    KEYWORDS = "keywords"
    ACTION_ITEMS = "action_items"
    PARTICIPANTS = "participants"
    EMOTIONS = "emotions"
    TOPICS = "topics"


class ActionItemStatus(StrEnum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ActionItemPriority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


_IN_PROGRESS = {
    AnalysisStatus.PENDING,
    AnalysisStatus.PROCESSING,
    AnalysisStatus.TRANSCRIBING,
    AnalysisStatus.ANALYZING,
}

_DISPLAY_NAMES = {
    AnalysisStatus.PENDING: "Pending",
    AnalysisStatus.PROCESSING: "Processing",
    AnalysisStatus.TRANSCRIBING: "Transcribing",
    AnalysisStatus.ANALYZING: "Analyzing",
    AnalysisStatus.COMPLETED: "Completed",
    AnalysisStatus.FAILED: "Failed",
}


def normalize_status(status: str | None) -> AnalysisStatus | None:
    """Map a status string of any case to ``AnalysisStatus`` (None if unknown)."""
    if not status:
        return None
    try:
        return AnalysisStatus(status.upper())
    except ValueError:
        return None


def is_completed(status: str | None) -> bool:
    return normalize_status(status) is AnalysisStatus.COMPLETED


def is_failed(status: str | None) -> bool:
    return normalize_status(status) is AnalysisStatus.FAILED


def is_in_progress(status: str | None) -> bool:
    return normalize_status(status) in _IN_PROGRESS


def is_finished(status: str | None) -> bool:
    return is_completed(status) or is_failed(status)


def status_display_name(status: str | None) -> str:
    normalized = normalize_status(status)
    if normalized is None:
        return "Unknown"
    return _DISPLAY_NAMES[normalized]
