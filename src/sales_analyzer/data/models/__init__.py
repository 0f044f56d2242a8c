"""ORM models package for database tables.

This package provides SQLAlchemy ORM models representing database tables:
- User: Accounts with verification and reset tokens
- Upload: Stored call recordings
- Analysis: AI evaluations of an upload
- AnalysisInsight: Categorized facts extracted from a result
- CallMetrics: Numeric metrics for an analysis
- ActionItemType / ActionItem: Follow-up categories and tasks

All models inherit from the shared Base declarative class defined in data.db.
"""

from sales_analyzer.data.db import Base
from sales_analyzer.data.models.action_item import ActionItem
from sales_analyzer.data.models.action_item_type import ActionItemType
from sales_analyzer.data.models.analysis import Analysis
from sales_analyzer.data.models.analysis_insight import AnalysisInsight
from sales_analyzer.data.models.call_metrics import CallMetrics
from sales_analyzer.data.models.upload import Upload
from sales_analyzer.data.models.user import User

__all__ = [
    "ActionItem",
    "ActionItemType",
    "Analysis",
    "AnalysisInsight",
    "Base",
    "CallMetrics",
    "Upload",
    "User",
]
