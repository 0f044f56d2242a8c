"""User account model for authentication.

Passwords are stored as salted PBKDF2 hashes, never in plaintext. Email
verification and password reset use single-use random tokens with expiry.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sales_analyzer.data.db import Base

if TYPE_CHECKING:
    from sales_analyzer.data.models.action_item_type import ActionItemType
    from sales_analyzer.data.models.analysis import Analysis
    from sales_analyzer.data.models.upload import Upload


class User(Base):
    """Application user account.

    Attributes:
        id: UUID primary key.
        email: Unique, lower-cased login address.
        password_hash: Salted hash of the user's password.
        is_email_verified: Whether the address has been confirmed.
        created_at: UTC timestamp when the account was created.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    is_email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_verification_token: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True
    )
    email_verification_expires: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    password_reset_token: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    password_reset_expires: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    uploads: Mapped[list[Upload]] = relationship(
        "Upload", back_populates="user", cascade="all, delete-orphan"
    )
    analyses: Mapped[list[Analysis]] = relationship(
        "Analysis", back_populates="user", cascade="all, delete-orphan"
    )
    action_item_types: Mapped[list[ActionItemType]] = relationship(
        "ActionItemType", back_populates="user", cascade="all, delete-orphan"
    )
