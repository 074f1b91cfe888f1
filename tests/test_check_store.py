"""
Tests for `scripts/check_store.py`.

Covers contract rules:
- Double-booked slots in the ledger are reported with their counts.
"""

from __future__ import annotations

from scripts.check_store import find_duplicate_slots


def test_find_duplicate_slots_reports_repeated_keys() -> None:
    """Verify only keys present more than once are reported."""

    rows = [
        ["2025-12-26T21:00:00Z", "a"],
        ["2025-12-26T22:00:00Z", "b"],
        ["2025-12-26T21:00:00Z", "c"],
        [],
        [""],
    ]

    assert find_duplicate_slots(rows) == {"2025-12-26T21:00:00Z": 2}


def test_find_duplicate_slots_is_exact_match() -> None:
    """Verify equal instants in different strings are not duplicates."""

    rows = [["2025-12-26T21:00:00Z"], ["2025-12-26T21:00:00.000Z"]]

    assert find_duplicate_slots(rows) == {}
