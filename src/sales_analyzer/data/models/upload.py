"""ORM model for uploaded call recordings.

The audio itself lives in the object store; ``file_url`` holds its key.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sales_analyzer.data.db import Base

if TYPE_CHECKING:
    from sales_analyzer.data.models.analysis import Analysis
    from sales_analyzer.data.models.user import User


class Upload(Base):
    """Persisted metadata for one stored recording.

    Attributes:
        id: UUID primary key.
        filename: Name of the stored object (may carry a ``.gz`` suffix).
        original_name: Name the user uploaded.
        file_size: Size in bytes.
        mime_type: Audio MIME type of the original file.
        file_url: Object store key.
        uploaded_at: UTC timestamp of the upload.
    """

    __tablename__ = "uploads"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    filename: Mapped[str] = mapped_column(String(512), nullable=False)
    original_name: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    file_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user: Mapped[User] = relationship("User", back_populates="uploads")
    analyses: Mapped[list[Analysis]] = relationship(
        "Analysis",
        back_populates="upload",
        cascade="all, delete-orphan",
        order_by="Analysis.created_at.desc()",
    )
