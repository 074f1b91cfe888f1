"""
Application settings.

All credentials and tunables are read from the environment (optionally from a
project-level .env file) into an immutable Settings object at process start.
The object is passed explicitly into store and mailer factories; nothing in
the repositories or services reads the environment on its own.

Environment variables:
- STORE_BACKEND: sheets | supabase | memory
- GOOGLE_SHEET_ID, GOOGLE_CREDENTIALS (JSON string) or GOOGLE_CREDENTIALS_FILE
- SUPABASE_URL, SUPABASE_KEY (use a server-side key only on the backend)
- EMAIL_USER, EMAIL_PASS, SMTP_HOST, SMTP_PORT, OWNER_EMAIL
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("sheets", "supabase", "memory")
FAIL_POLICIES = ("open", "closed")

_ENV_PATH = Path(__file__).parent.parent / ".env"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid float for {name}: {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Immutable process configuration."""

    # Storage
    store_backend: str = "sheets"
    google_sheet_id: Optional[str] = None
    google_credentials_json: Optional[str] = None
    google_credentials_file: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    leads_table: str = "Leads"
    bookings_table: str = "Bookings"
    booking_fail_policy: str = "open"
    store_timeout_seconds: float = 10.0

    # Email
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    email_user: Optional[str] = None
    email_password: Optional[str] = None
    owner_email: Optional[str] = None
    email_timeout_seconds: float = 10.0

    # Copy used in outgoing emails
    business_name: str = "Legacy Financial"
    advisor_name: str = "Your advisor"
    booking_page_url: Optional[str] = None

    # HTTP
    cors_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @property
    def email_enabled(self) -> bool:
        return bool(self.email_user and self.email_password)

    @property
    def notification_recipient(self) -> Optional[str]:
        return self.owner_email or self.email_user

    @property
    def fail_open(self) -> bool:
        return self.booking_fail_policy == "open"


def settings_from_env() -> Settings:
    """Read Settings from the process environment without validating them."""

    origins = _env("CORS_ORIGINS", "*") or "*"
    return Settings(
        store_backend=(_env("STORE_BACKEND", "sheets") or "sheets").lower(),
        google_sheet_id=_env("GOOGLE_SHEET_ID"),
        google_credentials_json=_env("GOOGLE_CREDENTIALS"),
        google_credentials_file=_env("GOOGLE_CREDENTIALS_FILE"),
        supabase_url=_env("SUPABASE_URL"),
        supabase_key=_env("SUPABASE_KEY"),
        leads_table=_env("LEADS_TABLE", "Leads") or "Leads",
        bookings_table=_env("BOOKINGS_TABLE", "Bookings") or "Bookings",
        booking_fail_policy=(_env("BOOKING_FAIL_POLICY", "open") or "open").lower(),
        store_timeout_seconds=_env_float("STORE_TIMEOUT_SECONDS", 10.0),
        smtp_host=_env("SMTP_HOST", "smtp.gmail.com") or "smtp.gmail.com",
        smtp_port=_env_int("SMTP_PORT", 465),
        email_user=_env("EMAIL_USER"),
        email_password=_env("EMAIL_PASS"),
        owner_email=_env("OWNER_EMAIL"),
        email_timeout_seconds=_env_float("EMAIL_TIMEOUT_SECONDS", 10.0),
        business_name=_env("BUSINESS_NAME", "Legacy Financial") or "Legacy Financial",
        advisor_name=_env("ADVISOR_NAME", "Your advisor") or "Your advisor",
        booking_page_url=_env("BOOKING_PAGE_URL"),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def validate_settings(settings: Settings) -> None:
    """
    Validate ranges and backend requirements.

    Raises:
        ValueError: for out-of-range or unknown values.
        RuntimeError: when the selected backend is missing credentials.
    """

    if settings.store_backend not in STORE_BACKENDS:
        raise ValueError(
            f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got {settings.store_backend!r}"
        )
    if settings.booking_fail_policy not in FAIL_POLICIES:
        raise ValueError(
            f"BOOKING_FAIL_POLICY must be 'open' or 'closed', got {settings.booking_fail_policy!r}"
        )
    if settings.store_timeout_seconds <= 0:
        raise ValueError(
            f"STORE_TIMEOUT_SECONDS must be > 0, got {settings.store_timeout_seconds}"
        )
    if settings.email_timeout_seconds <= 0:
        raise ValueError(
            f"EMAIL_TIMEOUT_SECONDS must be > 0, got {settings.email_timeout_seconds}"
        )
    if not 0 < settings.smtp_port < 65536:
        raise ValueError(f"SMTP_PORT must be a valid port, got {settings.smtp_port}")
    if settings.leads_table == settings.bookings_table:
        raise ValueError("LEADS_TABLE and BOOKINGS_TABLE must name different tables")

    if settings.store_backend == "sheets":
        if not settings.google_sheet_id:
            raise RuntimeError(
                "Missing environment variable: GOOGLE_SHEET_ID. "
                "Set GOOGLE_SHEET_ID to the id of the target spreadsheet."
            )
        if not (settings.google_credentials_json or settings.google_credentials_file):
            raise RuntimeError(
                "Missing Google credentials. Set GOOGLE_CREDENTIALS to the service "
                "account JSON or GOOGLE_CREDENTIALS_FILE to its key file path."
            )
    elif settings.store_backend == "supabase":
        if not settings.supabase_url:
            raise RuntimeError(
                "Missing environment variable: SUPABASE_URL. "
                "Set SUPABASE_URL to your Supabase project URL."
            )
        if not settings.supabase_key:
            raise RuntimeError(
                "Missing environment variable: SUPABASE_KEY. "
                "Set SUPABASE_KEY to your Supabase API key."
            )


def load_settings(env_path: Optional[Path] = None) -> Settings:
    """Load .env, read and validate Settings."""

    load_dotenv(dotenv_path=env_path or _ENV_PATH)
    settings = settings_from_env()
    validate_settings(settings)
    if not settings.email_enabled:
        logger.warning("EMAIL_USER/EMAIL_PASS not set; outgoing email will only be logged")
    logger.info(
        "Settings loaded",
        extra={
            "store_backend": settings.store_backend,
            "booking_fail_policy": settings.booking_fail_policy,
        },
    )
    return settings


__all__ = [
    "Settings",
    "load_settings",
    "settings_from_env",
    "validate_settings",
]
