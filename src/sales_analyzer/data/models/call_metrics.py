"""ORM model for numeric call metrics (one row per analysis)."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sales_analyzer.data.db import Base

if TYPE_CHECKING:
    from sales_analyzer.data.models.analysis import Analysis


class CallMetrics(Base):
    """Quantitative metrics reported by the AI for a call."""

    __tablename__ = "call_metrics"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    analysis_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("analyses.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    duration: Mapped[float | None] = mapped_column(Float, nullable=True)
    participant_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    word_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sentiment_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    energy_level: Mapped[float | None] = mapped_column(Float, nullable=True)
    talk_ratio: Mapped[float | None] = mapped_column(Float, nullable=True)
    interruption_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pause_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    speaking_pace: Mapped[float | None] = mapped_column(Float, nullable=True)

    analysis: Mapped[Analysis] = relationship("Analysis", back_populates="call_metrics")
