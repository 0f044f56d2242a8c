"""Services"""

from sales_analyzer.services.analysis_runner import create_analyses, run_analysis
from sales_analyzer.services.auth import authenticate_user, create_user
from sales_analyzer.services.gemini_analysis import (
    CallAnalysisService,
    get_call_analysis_service,
    set_call_analysis_service,
)
from sales_analyzer.services.object_storage import (
    ObjectStore,
    StorageError,
    get_object_store,
    set_object_store,
)
from sales_analyzer.services.uploads import delete_upload, store_upload

__all__ = [
    "CallAnalysisService",
    "ObjectStore",
    "StorageError",
    "authenticate_user",
    "create_analyses",
    "create_user",
    "delete_upload",
    "get_call_analysis_service",
    "get_object_store",
    "run_analysis",
    "set_call_analysis_service",
    "set_object_store",
    "store_upload",
]
