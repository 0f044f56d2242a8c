"""ORM model for one AI evaluation of an uploaded recording."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, deferred, mapped_column, relationship

from sales_analyzer.data.db import Base
from sales_analyzer.models.enums import AnalysisStatus

if TYPE_CHECKING:
    from sales_analyzer.data.models.action_item import ActionItem
    from sales_analyzer.data.models.analysis_insight import AnalysisInsight
    from sales_analyzer.data.models.call_metrics import CallMetrics
    from sales_analyzer.data.models.upload import Upload
    from sales_analyzer.data.models.user import User


class Analysis(Base):
    """Analysis of a single upload.

    ``transcription`` and ``analysis_result`` are deferred columns: they are
    only loaded when accessed or requested with ``undefer``.

    Attributes:
        status: One of ``AnalysisStatus`` values.
        analysis_type: DEFAULT, CUSTOM or PARAMETERS.
        analysis_duration: Wall-clock processing time in milliseconds.
    """

    __tablename__ = "analyses"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=AnalysisStatus.PENDING.value, index=True
    )
    analysis_type: Mapped[str] = mapped_column(String(32), nullable=False, default="DEFAULT")
    custom_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_parameters: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    transcription: Mapped[str | None] = deferred(mapped_column(Text, nullable=True))
    analysis_result: Mapped[dict[str, Any] | None] = deferred(mapped_column(JSON, nullable=True))
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    analysis_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    upload_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("uploads.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user: Mapped[User] = relationship("User", back_populates="analyses")
    upload: Mapped[Upload] = relationship("Upload", back_populates="analyses")
    insights: Mapped[list[AnalysisInsight]] = relationship(
        "AnalysisInsight",
        back_populates="analysis",
        cascade="all, delete-orphan",
        order_by="AnalysisInsight.created_at.desc()",
    )
    call_metrics: Mapped[CallMetrics | None] = relationship(
        "CallMetrics", back_populates="analysis", uselist=False, cascade="all, delete-orphan"
    )
    action_items: Mapped[list[ActionItem]] = relationship(
        "ActionItem", back_populates="analysis", cascade="all, delete-orphan"
    )
