"""Account registration, session and email verification routes."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Query, Response, status

from sales_analyzer.api.dependencies import AUTH_COOKIE_NAME, CurrentUser
from sales_analyzer.api.errors import (
    ApiError,
    AuthenticationRequired,
    Conflict,
    Forbidden,
    InvalidRequest,
)
from sales_analyzer.api.schemas.auth import (
    EmailRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenRequest,
)
from sales_analyzer.config import get_settings
from sales_analyzer.services import auth as auth_service
from sales_analyzer.services.email import send_password_reset_email, send_verification_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
RESET_REQUESTED_MESSAGE = "If an account with that email exists, we have sent a password reset link."


def _require_valid_email(email: str | None) -> str:
    if not email:
        raise InvalidRequest("Email is required")
    if not auth_service.is_valid_email(email):
        raise InvalidRequest(INVALID_EMAIL_MESSAGE)
    return email


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest) -> dict[str, Any]:
    """Create an account and mail a 24h verification link.

    Raises:
        InvalidRequest: Missing fields, bad email, or weak password (400).
        Conflict: The email is already registered (409).
    """
    if not payload.email or not payload.password:
        raise InvalidRequest("Email and password are required")
    if not auth_service.is_valid_email(payload.email):
        raise InvalidRequest(INVALID_EMAIL_MESSAGE)
    weakness = auth_service.validate_password(payload.password)
    if weakness:
        raise InvalidRequest(weakness)

    user, token, error = auth_service.create_user(
        payload.email, payload.password, payload.first_name, payload.last_name
    )
    if error or user is None or token is None:
        raise Conflict(error or "An account with this email already exists")

    if not send_verification_email(user["email"], token):
        logger.error("Failed to send verification email to %s", user["email"])

    return {
        "success": True,
        "message": "Account created successfully! Please check your email to verify your account.",
        "user": user,
    }


@router.post("/login")
def login(payload: LoginRequest, response: Response) -> dict[str, Any]:
    """Exchange credentials for a session token (also set as an HttpOnly cookie)."""
    if not payload.email or not payload.password:
        raise InvalidRequest("Email and password are required")
    if not auth_service.is_valid_email(payload.email):
        raise InvalidRequest(INVALID_EMAIL_MESSAGE)

    user = auth_service.authenticate_user(payload.email, payload.password)
    if user is None:
        raise AuthenticationRequired("Invalid email or password")

    settings = get_settings()
    if settings.require_email_verification and not user["isEmailVerified"]:
        raise Forbidden(
            "Please verify your email address before logging in. "
            "Check your inbox for a verification link."
        )

    token = auth_service.create_access_token(user["id"], user["email"])
    response.set_cookie(
        AUTH_COOKIE_NAME,
        token,
        max_age=settings.jwt_expires_days * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    logger.info("User %s logged in", user["id"])
    return {"success": True, "user": user, "token": token}


@router.post("/logout")
def logout(response: Response) -> dict[str, Any]:
    response.delete_cookie(AUTH_COOKIE_NAME, path="/")
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me")
def me(user: CurrentUser) -> dict[str, Any]:
    return {"success": True, "user": user}


def _verify(token: str | None) -> dict[str, Any]:
    if not token:
        raise InvalidRequest("Verification token is required")
    user = auth_service.verify_email_token(token)
    if user is None:
        raise InvalidRequest("Invalid or expired verification token")
    logger.info("Verified email for user %s", user["id"])
    return {
        "success": True,
        "message": "Email verified successfully. You can now log in.",
        "user": user,
    }


@router.get("/verify-email")
def verify_email_link(token: str | None = Query(None)) -> dict[str, Any]:
    """Target of the mailed verification link."""
    return _verify(token)


@router.post("/verify-email")
def verify_email(payload: TokenRequest) -> dict[str, Any]:
    return _verify(payload.token)


@router.post("/resend-verification")
def resend_verification(payload: EmailRequest) -> dict[str, Any]:
    """Issue a fresh verification link.

    Unknown emails get the same generic success response as known ones.
    """
    email = _require_valid_email(payload.email)
    user, token = auth_service.refresh_verification_token(email)
    if user is None:
        return {
            "success": True,
            "message": (
                "If an account with this email exists and is not verified, "
                "a verification email has been sent."
            ),
        }
    if token is None:
        return {"success": True, "message": "Your email is already verified. You can log in now."}

    if not send_verification_email(user["email"], token):
        raise ApiError("Failed to send verification email. Please try again later.")
    return {
        "success": True,
        "message": "Verification email sent! Please check your inbox and spam folder.",
    }


@router.post("/forgot-password")
def forgot_password(payload: EmailRequest) -> dict[str, Any]:
    email = _require_valid_email(payload.email)
    user, token = auth_service.create_password_reset_token(email)
    if user is not None and token is not None:
        if not send_password_reset_email(user["email"], token):
            logger.error("Failed to send password reset email to %s", user["email"])
    return {"success": True, "message": RESET_REQUESTED_MESSAGE}


@router.post("/reset-password")
def reset_password(payload: ResetPasswordRequest) -> dict[str, Any]:
    if not payload.token or not payload.password:
        raise InvalidRequest("Token and password are required")
    weakness = auth_service.validate_password(payload.password)
    if weakness:
        raise InvalidRequest(weakness)
    if not auth_service.reset_password(payload.token, payload.password):
        raise InvalidRequest("Invalid or expired reset token")
    return {
        "success": True,
        "message": "Password reset successful. You can now log in with your new password.",
    }
