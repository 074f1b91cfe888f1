"""
Booking service: double-booking guard and ledger recorder.

Enforces at-most-one booking per exact requested_time and records accepted
bookings in the append-only ledger table.

Process:
1. Ask the store to insert the ledger row only if no row already holds the
   same requested_time (exact string match, no normalization).
2. Key taken -> CONFLICT (TIME_SLOT_TAKEN), nothing written.
3. Row inserted -> BOOKED.

Failure policy for the availability check (fail_open):
- True: a failed read is logged and the row is appended without the check.
  Rare double-bookings are accepted over blocking the lead.
  That append also runs outside the Sheets backend's per-key lock.
- False: a failed read returns STORE_ERROR and nothing is written.

A failed append always raises StoreUnavailableError: the booking was never
recorded and the caller must not confirm it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from domain.booking import BookingSlot
from domain.tables import BOOKING_KEY_COLUMN, TableSchema
from domain.time import utc_now_iso
from repositories.errors import StoreUnavailableError
from repositories.tabular_store import TabularStore

logger = logging.getLogger(__name__)

TIME_SLOT_TAKEN = "TIME_SLOT_TAKEN"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class BookingStatus(str, Enum):
    BOOKED = "booked"
    CONFLICT = "conflict"
    STORE_ERROR = "store_error"


@dataclass(frozen=True, slots=True)
class BookingResult:
    """
    Outcome of a booking attempt.

    status: BOOKED, CONFLICT or STORE_ERROR
    slot: the slot that was requested
    error_code: TIME_SLOT_TAKEN for conflicts, STORE_UNAVAILABLE for store errors
    availability_checked: False when the row was written without the
        collision check (fail-open after a read failure)
    """

    status: BookingStatus
    slot: BookingSlot
    error_code: Optional[str] = None
    message: Optional[str] = None
    availability_checked: bool = True

    @property
    def booked(self) -> bool:
        return self.status is BookingStatus.BOOKED


def build_ledger_row(table: TableSchema, slot: BookingSlot) -> list[str]:
    """Build the ledger row for a slot; requested_time is stored unchanged."""

    values = {
        "requested_time": slot.requested_time,
        "display_time": slot.display_time,
        "lead_first_name": slot.meta("lead_first_name"),
        "lead_last_name": slot.meta("lead_last_name"),
        "lead_email": slot.meta("lead_email"),
        "lead_phone": slot.meta("lead_phone"),
        "session_type": slot.meta("session_type"),
        "recorded_at": utc_now_iso(),
    }
    return table.row_from(values)


class BookingGuard:
    """Checks the ledger for a conflicting slot and records new bookings."""

    def __init__(self, store: TabularStore, ledger: TableSchema, *, fail_open: bool = True) -> None:
        ledger.index_of(BOOKING_KEY_COLUMN)
        self._store = store
        self._ledger = ledger
        self._fail_open = fail_open

    @property
    def fail_open(self) -> bool:
        return self._fail_open

    def book(self, slot: BookingSlot) -> BookingResult:
        """
        Reserve slot.requested_time if it is free.

        Returns:
            BookingResult (BOOKED, CONFLICT, or STORE_ERROR under fail-closed)

        Raises:
            StoreUnavailableError: the ledger append failed.
        """

        row = build_ledger_row(self._ledger, slot)

        try:
            inserted = self._store.insert_if_absent(self._ledger, row, BOOKING_KEY_COLUMN)
        except StoreUnavailableError as e:
            if not e.is_read:
                raise
            return self._on_read_failure(slot, row, e)

        if not inserted:
            logger.info(
                "Time slot already booked",
                extra={"requested_time": slot.requested_time, "display_time": slot.display_time},
            )
            return BookingResult(
                status=BookingStatus.CONFLICT,
                slot=slot,
                error_code=TIME_SLOT_TAKEN,
                message="Sorry, this time slot was just booked by someone else. Please select a different time.",
            )

        logger.info(
            "Time slot reserved",
            extra={"requested_time": slot.requested_time, "display_time": slot.display_time},
        )
        return BookingResult(status=BookingStatus.BOOKED, slot=slot)

    def _on_read_failure(
        self, slot: BookingSlot, row: list[str], error: StoreUnavailableError
    ) -> BookingResult:
        if not self._fail_open:
            logger.error(
                "Availability check failed; booking rejected",
                extra={"requested_time": slot.requested_time, "error": str(error)},
            )
            return BookingResult(
                status=BookingStatus.STORE_ERROR,
                slot=slot,
                error_code=STORE_UNAVAILABLE,
                message="We couldn't confirm this time right now. Please try again shortly.",
            )

        logger.warning(
            "Availability check failed; recording booking without it",
            extra={"requested_time": slot.requested_time, "error": str(error)},
        )
        self._store.append_row(self._ledger, row)
        return BookingResult(status=BookingStatus.BOOKED, slot=slot, availability_checked=False)


__all__ = [
    "BookingGuard",
    "BookingResult",
    "BookingStatus",
    "STORE_UNAVAILABLE",
    "TIME_SLOT_TAKEN",
    "build_ledger_row",
]
