"""ORM model for follow-up actions attached to an analysis."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sales_analyzer.data.db import Base
from sales_analyzer.models.enums import ActionItemPriority, ActionItemStatus

if TYPE_CHECKING:
    from sales_analyzer.data.models.analysis import Analysis


class ActionItem(Base):
    """A follow-up task derived from (or added to) a call analysis."""

    __tablename__ = "action_items"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    analysis_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("analyses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ActionItemStatus.NOT_STARTED.value
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ActionItemPriority.MEDIUM.value
    )
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    analysis: Mapped[Analysis] = relationship("Analysis", back_populates="action_items")
