"""Enumerations and type definitions"""

from sales_analyzer.models.enums import (
    ActionItemPriority,
    ActionItemStatus,
    AnalysisStatus,
    AnalysisType,
    InsightCategory,
)

__all__ = [
    "ActionItemPriority",
    "ActionItemStatus",
    "AnalysisStatus",
    "AnalysisType",
    "InsightCategory",
]
