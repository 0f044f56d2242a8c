"""Python client for the Sales Analyzer API."""

from sales_analyzer.client.api_client import SalesAnalyzerAPIError, SalesAnalyzerClient
from sales_analyzer.client.polling import GlobalPollingManager, Poller, get_polling_manager

__all__ = [
    "GlobalPollingManager",
    "Poller",
    "SalesAnalyzerAPIError",
    "SalesAnalyzerClient",
    "get_polling_manager",
]
