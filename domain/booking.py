"""
Domain: Booking slots.

Contract excerpts implemented here:
- A BookingSlot is keyed by requested_time, an ISO-8601 string that must match
  exactly. No tolerance window and no time-zone normalization are applied.
- display_time is the human-formatted string shown to the lead (already in the
  lead's own time zone), e.g. "Thu, Dec 26 at 4:00 PM".
- Once persisted a slot is immutable; there is no update or cancellation path.

This module contains only pure domain entities: no I/O, no frameworks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .time import require_iso_timestamp

DATE_PLACEHOLDER = "Date TBD"
TIME_PLACEHOLDER = "Time TBD"
_DISPLAY_SEPARATOR = " at "


@dataclass(frozen=True, slots=True)
class BookingSlot:
    """
    Immutable reservation request for a single call slot.

    metadata holds the subset of lead fields carried with the booking
    (name, contact details, session type); it is never used for the
    collision check. It is copied into a read-only mapping on construction.
    """

    requested_time: str
    display_time: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        require_iso_timestamp("requested_time", self.requested_time)
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def display_date(self) -> str:
        """Date part of display_time ("Thu, Dec 26"), or a placeholder."""

        date_part = self.display_time.split(_DISPLAY_SEPARATOR)[0].strip()
        return date_part or DATE_PLACEHOLDER

    @property
    def display_clock(self) -> str:
        """Time-of-day part of display_time ("4:00 PM"), or a placeholder."""

        parts = self.display_time.split(_DISPLAY_SEPARATOR)
        if len(parts) < 2 or not parts[1].strip():
            return TIME_PLACEHOLDER
        return parts[1].strip()

    def meta(self, key: str) -> str:
        """Return a metadata value as text ("" when absent)."""

        value = self.metadata.get(key)
        return "" if value is None else str(value)
