"""FastAPI application entry point for the Sales Analyzer API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sales_analyzer.api.errors import register_exception_handlers
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
from sales_analyzer.config import get_settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize resources on startup and clean up on shutdown."""
    from sales_analyzer.data.db import dispose_engine, init_db
    from sales_analyzer.logging_config import configure_logging

    configure_logging()
    init_db()
    yield
    dispose_engine()


app = FastAPI(
    title="Sales Analyzer API",
    description="API for uploading sales call recordings and analyzing them with AI",
    version="0.1.0",
    lifespan=lifespan,
)

_origins = list(get_settings().cors_origins) or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials="*" not in _origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(uploads.router, prefix="/api")
app.include_router(upload_large.router, prefix="/api")
app.include_router(analyze.router, prefix="/api")
app.include_router(transcription_analysis.router, prefix="/api")
app.include_router(optimized.router, prefix="/api")
app.include_router(insights.router, prefix="/api")
app.include_router(chatbot.router, prefix="/api")
app.include_router(monitoring.router, prefix="/api")
app.include_router(action_items.types_router, prefix="/api")
app.include_router(action_items.items_router, prefix="/api")


def main() -> None:
    """Start the development server."""
    import uvicorn

    uvicorn.run(
        "sales_analyzer.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
