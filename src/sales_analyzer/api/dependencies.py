"""Shared dependencies for API routes."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sales_analyzer.api.errors import AuthenticationRequired
from sales_analyzer.services.auth import get_user_for_token

AUTH_COOKIE_NAME = "auth-token"

bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(
    credentials: HTTPAuthorizationCredentials | None, cookie_token: str | None
) -> str | None:
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return cookie_token or None


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    auth_token: Annotated[str | None, Cookie(alias=AUTH_COOKIE_NAME)] = None,
) -> dict[str, Any] | None:
    """Return the authenticated user, or None for anonymous callers.

    The ``Authorization: Bearer`` header wins over the ``auth-token`` cookie.
    Invalid or expired tokens are treated as anonymous.
    """
    token = _extract_token(credentials, auth_token)
    if not token:
        return None
    return get_user_for_token(token)


def get_current_user(
    user: Annotated[dict[str, Any] | None, Depends(get_optional_user)],
) -> dict[str, Any]:
    """Require an authenticated user.

    Raises:
        AuthenticationRequired: No valid token was supplied (401).
    """
    if user is None:
        raise AuthenticationRequired()
    return user


CurrentUser = Annotated[dict[str, Any], Depends(get_current_user)]
