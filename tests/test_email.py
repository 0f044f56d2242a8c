from __future__ import annotations

import smtplib

import pytest

from sales_analyzer.config import get_settings
from sales_analyzer.services import email as email_service


class FakeSMTP:
    instances: list[FakeSMTP] = []

    def __init__(self, host: str, port: int, timeout: float) -> None:
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in: tuple[str, str] | None = None
        self.sent: list = []
        FakeSMTP.instances.append(self)

    def __enter__(self) -> FakeSMTP:
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def starttls(self) -> None:
        self.started_tls = True

    def login(self, user: str, password: str) -> None:
        self.logged_in = (user, password)

    def send_message(self, message) -> None:
        self.sent.append(message)


@pytest.fixture
def smtp(monkeypatch: pytest.MonkeyPatch) -> type[FakeSMTP]:
    FakeSMTP.instances = []
    monkeypatch.setenv("SMTP_HOST", "smtp.test")
    monkeypatch.setenv("SMTP_PORT", "2525")
    monkeypatch.setenv("SMTP_USER", "mailer")
    monkeypatch.setenv("SMTP_PASSWORD", "hunter2")
    monkeypatch.setenv("APP_BASE_URL", "https://calls.example.com/")
    get_settings.cache_clear()
    monkeypatch.setattr(email_service.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_without_smtp_the_message_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("INFO", logger="sales_analyzer.services.email"):
        sent = email_service.send_verification_email("rep@example.com", "tok123")

    assert sent is True
    assert "/api/auth/verify-email?token=tok123" in caplog.text


def test_verification_email_over_smtp(smtp: type[FakeSMTP]) -> None:
    assert email_service.send_verification_email("rep@example.com", "tok123") is True

    connection = smtp.instances[0]
    assert (connection.host, connection.port) == ("smtp.test", 2525)
    assert connection.started_tls
    assert connection.logged_in == ("mailer", "hunter2")
    message = connection.sent[0]
    assert message["To"] == "rep@example.com"
    assert message["Subject"] == "Verify Your Email - Sales Analyzer"
    body = message.get_body(preferencelist=("plain",)).get_content()
    assert "https://calls.example.com/api/auth/verify-email?token=tok123" in body


def test_password_reset_link(smtp: type[FakeSMTP]) -> None:
    email_service.send_password_reset_email("rep@example.com", "reset-1")

    message = smtp.instances[0].sent[0]
    body = message.get_body(preferencelist=("plain",)).get_content()
    assert "https://calls.example.com/reset-password?token=reset-1" in body


def test_smtp_failure_returns_false(
    smtp: type[FakeSMTP], monkeypatch: pytest.MonkeyPatch
) -> None:
    def _refuse(self, message) -> None:
        raise smtplib.SMTPRecipientsRefused({"rep@example.com": (550, b"no such user")})

    monkeypatch.setattr(FakeSMTP, "send_message", _refuse)

    assert email_service.send_email("rep@example.com", "Hi", "Body") is False
