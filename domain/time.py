"""
Domain time utilities (pure).

Centralized timestamp validation helpers.

Booking slots are keyed by the exact ISO-8601 string supplied by the caller.
These helpers only *check* that a value parses; they never rewrite it, so the
stored key is byte-for-byte what the caller sent.
"""

from __future__ import annotations

from datetime import datetime, timezone


def parse_iso_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp, accepting a trailing 'Z' for UTC.

    Raises:
        ValueError: if the string is not a valid ISO-8601 timestamp.
    """

    # Python's fromisoformat doesn't consistently accept 'Z' across versions.
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def require_iso_timestamp(name: str, value: str) -> None:
    """
    Enforces that a slot key is a non-empty ISO-8601 timestamp string.

    Invariants:
    - The value is a string with no surrounding whitespace.
    - The value parses as ISO-8601 (the original string is kept as-is).
    """

    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty ISO-8601 string")
    if value != value.strip():
        raise ValueError(f"{name} must not contain surrounding whitespace")
    try:
        parse_iso_timestamp(value)
    except ValueError:
        raise ValueError(f"{name} is not a valid ISO-8601 timestamp: {value!r}") from None


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string (used for row timestamps)."""

    return datetime.now(timezone.utc).isoformat()
