from __future__ import annotations

from sales_analyzer.constants.action_item_types import DEFAULT_ACTION_ITEM_TYPES
from sales_analyzer.constants.analysis_parameters import (
    DEFAULT_ANALYSIS_PARAMETERS,
    AnalysisParameter,
    default_parameter_list,
)

__all__ = [
    "AnalysisParameter",
    "DEFAULT_ACTION_ITEM_TYPES",
    "DEFAULT_ANALYSIS_PARAMETERS",
    "default_parameter_list",
]
