"""Transactional email for account verification and password reset.

Mail goes out over SMTP when ``SMTP_HOST`` is configured. Without it the
message is written to the log instead so local setups can still follow the
verification and reset links.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from sales_analyzer.config import get_settings

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, text: str, html: str | None = None) -> bool:
    """Send a single message.

    Returns:
        True if the message was handed to SMTP (or logged), False on SMTP failure.
    """
    settings = get_settings()
    if not settings.smtp_host:
        logger.info("SMTP not configured; email to %s (%s):\n%s", to, subject, text)
        return True

    message = EmailMessage()
    message["From"] = settings.email_from
    message["To"] = to
    message["Subject"] = subject
    message.set_content(text)
    if html:
        message.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as smtp:
            smtp.starttls()
            if settings.smtp_user:
                smtp.login(settings.smtp_user, settings.smtp_password or "")
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send email to %s", to)
        return False

    logger.info("Sent '%s' email to %s", subject, to)
    return True


def send_verification_email(email: str, token: str) -> bool:
    base_url = get_settings().app_base_url.rstrip("/")
    url = f"{base_url}/api/auth/verify-email?token={token}"
    text = (
        "Welcome to Sales Analyzer!\n\n"
        "Please verify your email address by opening the link below:\n"
        f"{url}\n\n"
        "This link expires in 24 hours. If you did not create an account, "
        "you can ignore this email."
    )
    html = (
        "<p>Welcome to Sales Analyzer!</p>"
        f'<p><a href="{url}">Verify Email Address</a></p>'
        "<p>This link expires in 24 hours.</p>"
    )
    return send_email(email, "Verify Your Email - Sales Analyzer", text, html)


def send_password_reset_email(email: str, token: str) -> bool:
    base_url = get_settings().app_base_url.rstrip("/")
    url = f"{base_url}/reset-password?token={token}"
    text = (
        "We received a request to reset your Sales Analyzer password.\n\n"
        f"Reset it here: {url}\n\n"
        "This link expires in 1 hour. If you did not request a reset, "
        "you can ignore this email."
    )
    html = (
        "<p>We received a request to reset your password.</p>"
        f'<p><a href="{url}">Reset Password</a></p>'
        "<p>This link expires in 1 hour.</p>"
    )
    return send_email(email, "Reset Your Password - Sales Analyzer", text, html)
