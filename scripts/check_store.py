#!/usr/bin/env python3
"""
Check the configured store.

Checks:
- Store credentials and connectivity (reads both tables)
- Lead and booking row counts
- Duplicate requested_time keys in the bookings ledger

The Google Sheets backend only serializes bookings inside one process, so a
deployment running several workers can still double-book; this script is how
an operator finds those slots.

Exit code is 1 when the store is unreachable or duplicates are found.
"""

from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.logging_config import configure_logging
from config.settings import load_settings
from domain.tables import BOOKING_KEY_COLUMN, bookings_table, leads_table
from repositories.client import create_store
from repositories.errors import StoreUnavailableError
from repositories.tabular_store import cell


def find_duplicate_slots(rows, key_index: int = 0) -> dict[str, int]:
    """Return requested_time -> count for keys booked more than once."""

    counts = Counter(row[key_index] for row in rows if len(row) > key_index and row[key_index])
    return {key: count for key, count in counts.items() if count > 1}


def check_store() -> int:
    """Read both tables and report counts and double-bookings."""

    settings = load_settings()
    configure_logging(settings.log_level)
    store = create_store(settings)
    ledger = bookings_table(settings.bookings_table)
    leads = leads_table(settings.leads_table)

    print("=" * 60)
    print(f"STORE CHECK ({settings.store_backend})")
    print("=" * 60)
    print()

    try:
        lead_rows = store.read_rows(leads)
        booking_rows = store.read_rows(ledger)
    except StoreUnavailableError as e:
        print(f"   Store unreachable: {e}")
        return 1

    print(f"1. Leads ({leads.name}): {len(lead_rows)} rows")
    status_index = leads.index_of("booking_status")
    booked = sum(1 for row in lead_rows if cell(row, status_index).startswith("BOOKED"))
    print(f"   Marked BOOKED: {booked}")
    print()

    print(f"2. Bookings ({ledger.name}): {len(booking_rows)} rows")
    duplicates = find_duplicate_slots(booking_rows, ledger.index_of(BOOKING_KEY_COLUMN))
    if duplicates:
        print(f"   DOUBLE-BOOKED SLOTS: {len(duplicates)}")
        for key, count in sorted(duplicates.items()):
            print(f"   - {key}: {count} bookings")
        return 1

    print("   No double-booked slots")
    return 0


if __name__ == "__main__":
    sys.exit(check_store())
