"""Pydantic schemas for authentication requests."""

from __future__ import annotations

from pydantic import Field

from sales_analyzer.api.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """Account registration payload."""

    email: str | None = Field(None, description="Account email address")
    password: str | None = Field(None, description="Plain-text password")
    first_name: str | None = Field(None, description="Given name")
    last_name: str | None = Field(None, description="Family name")


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class TokenRequest(CamelModel):
    token: str | None = None


class EmailRequest(CamelModel):
    email: str | None = None


class ResetPasswordRequest(CamelModel):
    token: str | None = None
    password: str | None = None
