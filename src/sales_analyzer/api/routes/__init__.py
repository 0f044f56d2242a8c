"""Route handlers for the API."""

from sales_analyzer.api.routes import (
    action_items,
    analyze,
    auth,
    chatbot,
    health,
    insights,
    monitoring,
    optimized,
    transcription_analysis,
    upload_large,
    uploads,
)

__all__ = [
    "action_items",
    "analyze",
    "auth",
    "chatbot",
    "health",
    "insights",
    "monitoring",
    "optimized",
    "transcription_analysis",
    "upload_large",
    "uploads",
]
