"""Database health checks used by ``GET /api/health/database``."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sales_analyzer.data.db import get_engine, get_session
from sales_analyzer.data.models import (
    ActionItem,
    ActionItemType,
    Analysis,
    AnalysisInsight,
    CallMetrics,
    Upload,
    User,
)

logger = logging.getLogger(__name__)

_COUNTED_TABLES = {
    "users": User,
    "uploads": Upload,
    "analyses": Analysis,
    "analysisInsights": AnalysisInsight,
    "callMetrics": CallMetrics,
    "actionItemTypes": ActionItemType,
    "actionItems": ActionItem,
}


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def check_connection() -> dict[str, Any]:
    """Run ``SELECT 1`` and report latency.

    Raises:
        SQLAlchemyError: If the database cannot be reached.
    """
    started = time.monotonic()
    engine = get_engine()
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    latency = _elapsed_ms(started)
    logger.info("Database health check completed in %d ms", latency)
    return {
        "isHealthy": True,
        "latency": latency,
        "dialect": engine.dialect.name,
        "timestamp": datetime.now(UTC).isoformat(),
    }


def table_counts() -> dict[str, int]:
    with get_session() as session:
        return {name: session.query(model).count() for name, model in _COUNTED_TABLES.items()}


def _check_round_trip() -> None:
    scratch_email = f"health-check-{uuid.uuid4().hex}@health.invalid"
    with get_session() as session:
        scratch = User(email=scratch_email, password_hash="!", is_email_verified=False)
        session.add(scratch)
        session.flush()
        scratch_id = scratch.id
    with get_session() as session:
        if session.get(User, scratch_id) is None:
            raise LookupError("Scratch row was not readable after insert")
    with get_session() as session:
        session.query(User).filter(User.id == scratch_id).delete()


def _check_query() -> None:
    with get_session() as session:
        session.query(Analysis).filter(Analysis.user_id == "health-check").all()


def test_operations() -> dict[str, Any]:
    """Exercise a query and a create/read/delete round trip.

    Each operation is timed independently; one failing does not skip the rest.
    """
    checks: list[tuple[str, Callable[[], Any]]] = [
        ("Health Check", check_connection),
        ("Simple Query", _check_query),
        ("Create Read Delete", _check_round_trip),
    ]
    operations = []
    for name, check in checks:
        started = time.monotonic()
        try:
            check()
        except (SQLAlchemyError, LookupError) as exc:
            logger.error("Database operation test %r failed: %s", name, exc)
            operations.append(
                {"name": name, "success": False, "duration": _elapsed_ms(started), "error": str(exc)}
            )
            continue
        operations.append({"name": name, "success": True, "duration": _elapsed_ms(started)})
    return {"success": all(op["success"] for op in operations), "operations": operations}


def get_database_status() -> dict[str, Any]:
    """Connectivity, row counts and operation tests in one payload.

    Raises:
        SQLAlchemyError: If the initial connectivity check fails.
    """
    status = check_connection()
    status["tables"] = table_counts()
    status["tests"] = test_operations()
    return status
