"""Account authentication, session tokens and credential validation.

Passwords are stored as salted PBKDF2 hashes. Sessions are HS256 JWTs
carrying ``userId`` and ``email`` claims. Email verification and password
reset use single-use random tokens stored on the user row with an expiry.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
import re
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from sales_analyzer.config import get_settings
from sales_analyzer.constants.action_item_types import DEFAULT_ACTION_ITEM_TYPES
from sales_analyzer.data.db import get_session
from sales_analyzer.data.models import ActionItemType, User
from sales_analyzer.services.serialization import user_to_dict

logger = logging.getLogger(__name__)

_PBKDF2_ITERATIONS = 100_000
_SALT_BYTES = 16
_JWT_ALGORITHM = "HS256"

EMAIL_VERIFICATION_TTL = timedelta(hours=24)
PASSWORD_RESET_TTL = timedelta(hours=1)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _hash_password(password: str) -> str:
    """Return a salted PBKDF2 hash for the given password.

    The result is stored as ``<salt_hex>:<hash_hex>``.
    """
    salt = os.urandom(_SALT_BYTES)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return f"{salt.hex()}:{derived.hex()}"


def _verify_password(password: str, stored_hash: str) -> bool:
    """Verify a password against a stored ``salt:hash`` string."""
    try:
        salt_hex, hash_hex = stored_hash.split(":", 1)
    except ValueError:
        return False

    try:
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False

    candidate = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        _PBKDF2_ITERATIONS,
    )
    return hmac.compare_digest(candidate, expected)


def generate_secure_token() -> str:
    """Random 64-character hex token for verification and reset links."""
    return secrets.token_hex(32)


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or ""))


def validate_password(password: str) -> str | None:
    """Check password strength.

    Returns:
        The first failed rule's message, or None if the password is acceptable.
    """
    if len(password) < 8:
        return "Password must be at least 8 characters long"
    if not re.search(r"[a-z]", password):
        return "Password must contain at least one lowercase letter"
    if not re.search(r"[A-Z]", password):
        return "Password must contain at least one uppercase letter"
    if not re.search(r"\d", password):
        return "Password must contain at least one number"
    return None


def create_access_token(user_id: str, email: str) -> str:
    settings = get_settings()
    expires = datetime.now(UTC) + timedelta(days=settings.jwt_expires_days)
    payload = {"userId": user_id, "email": email, "exp": expires}
    return jwt.encode(payload, settings.jwt_secret, algorithm=_JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Return the token claims, or None if the token is invalid or expired."""
    try:
        payload = jwt.decode(token, get_settings().jwt_secret, algorithms=[_JWT_ALGORITHM])
    except JWTError as exc:
        logger.debug("Rejected session token: %s", exc)
        return None
    if not payload.get("userId"):
        return None
    return payload


def get_user_for_token(token: str) -> dict[str, Any] | None:
    """Resolve a session token to the user it belongs to."""
    payload = decode_access_token(token)
    if payload is None:
        return None
    with get_session() as session:
        user = session.get(User, payload["userId"])
        return user_to_dict(user) if user is not None else None


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def seed_default_action_item_types(session: Session, user_id: str) -> int:
    """Create the built-in action item types for a user; returns the count added."""
    for template in DEFAULT_ACTION_ITEM_TYPES:
        session.add(ActionItemType(user_id=user_id, **template))
    return len(DEFAULT_ACTION_ITEM_TYPES)


def create_user(
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> tuple[dict[str, Any] | None, str | None, str | None]:
    """Create a new, unverified user account.

    The caller is expected to have validated the email format and password
    strength.

    Returns:
        Tuple of (user dict, verification token, error message). On success the
        error is None; on a duplicate email the user and token are None.
    """
    email_clean = _normalize_email(email)
    token = generate_secure_token()

    with get_session() as session:
        existing = session.query(User).filter(User.email == email_clean).first()
        if existing is not None:
            return None, None, "An account with this email already exists"

        user = User(
            email=email_clean,
            password_hash=_hash_password(password),
            first_name=(first_name or "").strip() or None,
            last_name=(last_name or "").strip() or None,
            email_verification_token=token,
            email_verification_expires=datetime.now(UTC) + EMAIL_VERIFICATION_TTL,
        )
        session.add(user)
        session.flush()
        seed_default_action_item_types(session, user.id)
        logger.info("Created user %s", user.id)
        return user_to_dict(user), token, None


def authenticate_user(email: str, password: str) -> dict[str, Any] | None:
    """Return the user dict when the credentials match, otherwise None."""
    with get_session() as session:
        user = session.query(User).filter(User.email == _normalize_email(email)).first()
        if user is None or not _verify_password(password, user.password_hash):
            return None
        return user_to_dict(user)


def verify_email_token(token: str) -> dict[str, Any] | None:
    """Mark the account owning an unexpired verification token as verified."""
    with get_session() as session:
        user = (
            session.query(User)
            .filter(
                User.email_verification_token == token,
                User.email_verification_expires > datetime.now(UTC),
            )
            .first()
        )
        if user is None:
            return None
        user.is_email_verified = True
        user.email_verification_token = None
        user.email_verification_expires = None
        return user_to_dict(user)


def refresh_verification_token(email: str) -> tuple[dict[str, Any] | None, str | None]:
    """Issue a new verification token for an unverified account.

    Returns:
        (user dict, token). The token is None if the account is already
        verified; both are None if no account exists.
    """
    with get_session() as session:
        user = session.query(User).filter(User.email == _normalize_email(email)).first()
        if user is None:
            return None, None
        if user.is_email_verified:
            return user_to_dict(user), None
        token = generate_secure_token()
        user.email_verification_token = token
        user.email_verification_expires = datetime.now(UTC) + EMAIL_VERIFICATION_TTL
        return user_to_dict(user), token


def create_password_reset_token(email: str) -> tuple[dict[str, Any] | None, str | None]:
    """Store a one-hour reset token for the account, if it exists."""
    with get_session() as session:
        user = session.query(User).filter(User.email == _normalize_email(email)).first()
        if user is None:
            return None, None
        token = generate_secure_token()
        user.password_reset_token = token
        user.password_reset_expires = datetime.now(UTC) + PASSWORD_RESET_TTL
        return user_to_dict(user), token


def reset_password(token: str, new_password: str) -> bool:
    """Replace the password of the account owning an unexpired reset token."""
    with get_session() as session:
        user = (
            session.query(User)
            .filter(
                User.password_reset_token == token,
                User.password_reset_expires > datetime.now(UTC),
            )
            .first()
        )
        if user is None:
            return False
        user.password_hash = _hash_password(new_password)
        user.password_reset_token = None
        user.password_reset_expires = None
        logger.info("Password reset for user %s", user.id)
        return True
