"""Runtime configuration read from environment variables.

Values are loaded from a ``.env`` file (if present) via python-dotenv and
read through ``os.environ``. ``get_settings()`` caches the parsed result;
tests that change the environment call ``get_settings.cache_clear()``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

_DEFAULT_JWT_SECRET = "dev-secret-key-change-in-production"
_MB = 1024 * 1024


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Application settings.

    Attributes:
        environment: Deployment environment name (development, production).
        log_level: Root log level name.
        jwt_secret: HMAC key used to sign session tokens.
        jwt_expires_days: Lifetime of session tokens and the auth cookie.
        require_email_verification: Reject logins from unverified accounts.
        max_file_size: Upload size cap in bytes.
        auto_delete_files: Remove stored audio once an analysis finishes.
        r2_account_id: Cloudflare account used to build the R2 endpoint.
        s3_endpoint_url: Explicit S3-compatible endpoint (overrides R2).
        r2_access_key_id: Object store access key.
        r2_secret_access_key: Object store secret key.
        r2_bucket_name: Bucket holding uploaded recordings.
        smtp_host: SMTP server for verification and reset mail (optional).
        smtp_port: SMTP port.
        smtp_user: SMTP login.
        smtp_password: SMTP password.
        email_from: Sender address.
        app_base_url: Public URL used in mailed links.
        cors_origins: Allowed CORS origins.
    """

    environment: str
    log_level: str
    jwt_secret: str
    jwt_expires_days: int
    require_email_verification: bool
    max_file_size: int
    auto_delete_files: bool
    r2_account_id: str | None
    s3_endpoint_url: str | None
    r2_access_key_id: str | None
    r2_secret_access_key: str | None
    r2_bucket_name: str | None
    smtp_host: str | None
    smtp_port: int
    smtp_user: str | None
    smtp_password: str | None
    email_from: str
    app_base_url: str
    cors_origins: tuple[str, ...]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def object_store_endpoint(self) -> str | None:
        """Return the S3 endpoint, deriving the R2 URL from the account ID."""
        if self.s3_endpoint_url:
            return self.s3_endpoint_url
        if self.r2_account_id:
            return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"
        return None


@lru_cache
def get_settings() -> Settings:
    """Build the settings object from the current environment."""
    origins = os.environ.get("CORS_ORIGINS", "*")
    return Settings(
        environment=os.environ.get("ENVIRONMENT", "development"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        jwt_secret=os.environ.get("JWT_SECRET", _DEFAULT_JWT_SECRET),
        jwt_expires_days=_env_int("JWT_EXPIRES_DAYS", 7),
        require_email_verification=_env_bool("REQUIRE_EMAIL_VERIFICATION", True),
        max_file_size=_env_int("MAX_FILE_SIZE", 200 * _MB),
        auto_delete_files=_env_bool("AUTO_DELETE_FILES", False),
        r2_account_id=os.environ.get("R2_ACCOUNT_ID") or os.environ.get("CLOUDFLARE_ACCOUNT_ID"),
        s3_endpoint_url=os.environ.get("S3_ENDPOINT_URL"),
        r2_access_key_id=os.environ.get("R2_ACCESS_KEY_ID"),
        r2_secret_access_key=os.environ.get("R2_SECRET_ACCESS_KEY"),
        r2_bucket_name=os.environ.get("R2_BUCKET_NAME"),
        smtp_host=os.environ.get("SMTP_HOST"),
        smtp_port=_env_int("SMTP_PORT", 587),
        smtp_user=os.environ.get("SMTP_USER"),
        smtp_password=os.environ.get("SMTP_PASSWORD"),
        email_from=os.environ.get("EMAIL_FROM", "no-reply@sales-analyzer.local"),
        app_base_url=os.environ.get("APP_BASE_URL", "http://localhost:8000").rstrip("/"),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )
