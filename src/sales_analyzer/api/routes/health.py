"""Health check routes."""

from __future__ import annotations

import logging
import platform
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from sales_analyzer.api.errors import ApiError
from sales_analyzer.config import get_settings
from sales_analyzer.services.db_monitor import get_database_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health_check() -> dict[str, Any]:
    """Return the current status of the API and its non-secret configuration."""
    settings = get_settings()
    return {
        "success": True,
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": {
            "name": settings.environment,
            "pythonVersion": platform.python_version(),
            "platform": platform.system(),
        },
        "configuration": {
            "logLevel": settings.log_level,
            "maxFileSize": settings.max_file_size,
            "autoDeleteFiles": settings.auto_delete_files,
            "requireEmailVerification": settings.require_email_verification,
            "objectStoreConfigured": bool(settings.r2_bucket_name),
            "emailConfigured": bool(settings.smtp_host),
        },
    }


@router.get("/database")
def database_health() -> dict[str, Any]:
    """Check connectivity, table sizes and a create/read/delete round trip."""
    logger.info("Checking database health")
    try:
        status = get_database_status()
    except SQLAlchemyError as exc:
        logger.exception("Database health check failed")
        raise ApiError("Health check failed") from exc
    return {"success": True, "timestamp": datetime.now(UTC).isoformat(), "status": status}
