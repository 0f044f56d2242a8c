"""Tests for password hashing, session tokens and account tokens."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from sales_analyzer.data.db import get_session
from sales_analyzer.data.models import ActionItemType, User
from sales_analyzer.services import auth as auth_service

pytestmark = pytest.mark.usefixtures("api_db")

PASSWORD = "Password123"


class TestPasswordHashing:
    def test_hash_round_trip(self) -> None:
        stored = auth_service._hash_password(PASSWORD)

        assert auth_service._verify_password(PASSWORD, stored)
        assert not auth_service._verify_password("Password124", stored)

    def test_hashes_are_salted(self) -> None:
        assert auth_service._hash_password(PASSWORD) != auth_service._hash_password(PASSWORD)

    @pytest.mark.parametrize("stored", ["no-separator", "zz:zz", ""])
    def test_malformed_hash_never_verifies(self, stored: str) -> None:
        assert auth_service._verify_password(PASSWORD, stored) is False


class TestValidation:
    @pytest.mark.parametrize(
        ("password", "message"),
        [
            ("Pa1", "Password must be at least 8 characters long"),
            ("PASSWORD123", "Password must contain at least one lowercase letter"),
            ("password123", "Password must contain at least one uppercase letter"),
            ("Passwordabc", "Password must contain at least one number"),
            (PASSWORD, None),
        ],
    )
    def test_validate_password(self, password: str, message: str | None) -> None:
        assert auth_service.validate_password(password) == message

    @pytest.mark.parametrize(
        ("email", "valid"),
        [
            ("rep@example.com", True),
            ("first.last@sub.example.org", True),
            ("rep@example", False),
            ("rep example@example.com", False),
            ("", False),
        ],
    )
    def test_is_valid_email(self, email: str, valid: bool) -> None:
        assert auth_service.is_valid_email(email) is valid

    def test_secure_token_shape(self) -> None:
        token = auth_service.generate_secure_token()

        assert len(token) == 64
        int(token, 16)


class TestSessionTokens:
    def test_round_trip(self) -> None:
        token = auth_service.create_access_token("user-1", "rep@example.com")

        claims = auth_service.decode_access_token(token)

        assert claims is not None
        assert claims["userId"] == "user-1"
        assert claims["email"] == "rep@example.com"

    def test_expired_token_is_rejected(self) -> None:
        expired = jwt.encode(
            {"userId": "user-1", "exp": datetime.now(UTC) - timedelta(minutes=1)},
            "test-secret",
            algorithm="HS256",
        )

        assert auth_service.decode_access_token(expired) is None

    def test_token_signed_with_other_secret_is_rejected(self) -> None:
        forged = jwt.encode({"userId": "user-1"}, "other-secret", algorithm="HS256")

        assert auth_service.decode_access_token(forged) is None

    def test_token_without_user_id_is_rejected(self) -> None:
        token = jwt.encode({"email": "rep@example.com"}, "test-secret", algorithm="HS256")

        assert auth_service.decode_access_token(token) is None

    def test_token_for_deleted_user(self) -> None:
        token = auth_service.create_access_token("missing-user", "ghost@example.com")

        assert auth_service.get_user_for_token(token) is None


class TestAccounts:
    def test_create_user_normalizes_and_seeds_types(self) -> None:
        user, token, error = auth_service.create_user(" Rep@Example.COM ", PASSWORD, " Sam ", "")

        assert error is None
        assert token is not None
        assert user["email"] == "rep@example.com"
        assert user["firstName"] == "Sam"
        assert user["lastName"] is None
        assert user["isEmailVerified"] is False
        with get_session() as session:
            count = (
                session.query(ActionItemType).filter(ActionItemType.user_id == user["id"]).count()
            )
        assert count == 6

    def test_duplicate_email(self) -> None:
        auth_service.create_user("rep@example.com", PASSWORD)

        user, token, error = auth_service.create_user("REP@example.com", PASSWORD)

        assert user is None
        assert token is None
        assert error == "An account with this email already exists"

    def test_authenticate(self) -> None:
        auth_service.create_user("rep@example.com", PASSWORD)

        assert auth_service.authenticate_user("Rep@example.com", PASSWORD) is not None
        assert auth_service.authenticate_user("rep@example.com", "Wrong1234") is None
        assert auth_service.authenticate_user("nobody@example.com", PASSWORD) is None

    def test_expired_verification_token(self) -> None:
        user, token, _ = auth_service.create_user("rep@example.com", PASSWORD)
        with get_session() as session:
            session.get(User, user["id"]).email_verification_expires = datetime.now(
                UTC
            ) - timedelta(hours=1)

        assert auth_service.verify_email_token(token) is None

    def test_refresh_verification_token(self) -> None:
        _, original, _ = auth_service.create_user("rep@example.com", PASSWORD)

        user, fresh = auth_service.refresh_verification_token("rep@example.com")

        assert user is not None
        assert fresh is not None and fresh != original
        assert auth_service.verify_email_token(original) is None
        assert auth_service.verify_email_token(fresh)["isEmailVerified"] is True
        assert auth_service.refresh_verification_token("rep@example.com")[1] is None
        assert auth_service.refresh_verification_token("nobody@example.com") == (None, None)

    def test_password_reset_flow(self) -> None:
        auth_service.create_user("rep@example.com", PASSWORD)
        _, token = auth_service.create_password_reset_token("rep@example.com")

        assert auth_service.reset_password(token, "NewPassword1") is True
        assert auth_service.reset_password(token, "NewPassword2") is False
        assert auth_service.authenticate_user("rep@example.com", "NewPassword1") is not None
        assert auth_service.authenticate_user("rep@example.com", PASSWORD) is None

    def test_expired_reset_token(self) -> None:
        user, _, _ = auth_service.create_user("rep@example.com", PASSWORD)
        _, token = auth_service.create_password_reset_token("rep@example.com")
        with get_session() as session:
            session.get(User, user["id"]).password_reset_expires = datetime.now(UTC) - timedelta(
                minutes=1
            )

        assert auth_service.reset_password(token, "NewPassword1") is False

    def test_reset_token_for_unknown_email(self) -> None:
        assert auth_service.create_password_reset_token("nobody@example.com") == (None, None)
