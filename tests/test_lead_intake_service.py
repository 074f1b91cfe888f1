"""
Tests for `services/lead_intake_service.py`.

Covers contract rules:
- Lead rows follow the leads table column order.
- A submitted lead_score is kept; otherwise the lead is scored.
- Booked leads carry "BOOKED: <display time>"; referrals carry
  decision_role "Referral" and the owner's contact in notes.
- Cells starting with formula characters are neutralized; international
  phone numbers keep their "+".
- Store failures propagate.
"""

from __future__ import annotations

import logging

import pytest

from api.models import LeadPayload
from domain.booking import BookingSlot
from repositories.errors import StoreUnavailableError
from services.lead_intake_service import LeadIntakeService, escape_phone_cell, sanitize_cell
from services.lead_scoring_service import TERM_LIFE


def _only_row(store, leads) -> dict:
    rows = store.read_rows(leads)
    assert len(rows) == 1
    return dict(zip(leads.columns, rows[0]))


@pytest.mark.parametrize(
    "value, expected",
    [
        ("=HYPERLINK(\"x\")", "HYPERLINK(\"x\")"),
        ("+1 555 0100", "1 555 0100"),
        ("-5", "5"),
        ("@SUM(A1)", "SUM(A1)"),
        ("==+cmd", "cmd"),
        ("Jane", "Jane"),
        ("  Jane  ", "Jane"),
        (None, ""),
        (42, "42"),
    ],
)
def test_sanitize_cell(value, expected: str) -> None:
    """Verify leading formula characters are stripped and plain text is kept."""

    assert sanitize_cell(value, "notes") == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("+15551234567", "'+15551234567"),
        ("+1 (555) 123-4567", "'+1 (555) 123-4567"),
        ("555-0100", "555-0100"),
        ("+SUM(A1)", "SUM(A1)"),
        ("=1+1", "1+1"),
        (None, ""),
    ],
)
def test_escape_phone_cell(value, expected: str) -> None:
    """Verify international numbers keep their "+" as text and formulas are still stripped."""

    assert escape_phone_cell(value) == expected


def test_sanitize_cell_logs_stripped_characters(caplog) -> None:
    """Verify stripping is logged with the field name."""

    with caplog.at_level(logging.WARNING, logger="services.lead_intake_service"):
        sanitize_cell("=1+1", "notes")

    assert any(getattr(r, "field_name", None) == "notes" for r in caplog.records)


def test_submit_lead_scores_when_no_score_given(store, leads) -> None:
    """Verify the scorer fills lead_score and the row keeps column order."""

    service = LeadIntakeService(store, leads)

    result = service.submit_lead({
        "lead_first_name": "Jane",
        "lead_email": "jane@example.com",
        "lead_age": "32",
        "home_status": "Own my home",
        "nicotine_use": "No",
        "lead_tier": "B",
    })

    row = _only_row(store, leads)
    assert result.scored is True
    assert result.lead_score == "35"
    assert result.lead_tier == "B"
    assert row["lead_score"] == "35"
    assert row["lead_first_name"] == "Jane"
    assert row["lead_tier"] == "B"
    assert row["timestamp"]
    assert row["booking_status"] == ""


def test_submit_lead_scores_intake_form_example(store, leads) -> None:
    """Verify the documented form payload is scored on its income, family and kids answers."""

    payload = {**LeadPayload.model_config["json_schema_extra"]["example"], "has_kids": "Yes"}

    result = LeadIntakeService(store, leads).submit_lead(payload)

    assert result.scored is True
    assert dict(result.score_result.breakdown) == {
        "age": 20,
        "monthly_income": 25,
        "employment_type": 20,
        "relationship_status": 15,
        "number_of_kids": 5,
        "housing_status": 10,
        "tobacco_use": 5,
    }
    assert result.lead_score == "100"
    assert result.score_result.recommendations == (TERM_LIFE,)
    row = _only_row(store, leads)
    assert row["lead_score"] == "100"
    assert row["income_range"] == "$8,000+"


def test_submit_lead_keeps_submitted_score(store, leads) -> None:
    """Verify a caller-computed lead_score is written unchanged."""

    result = LeadIntakeService(store, leads).submit_lead({"lead_score": 85, "lead_age": "32"})

    assert result.scored is False
    assert result.lead_score == "85"
    assert result.score_result.score == 20
    assert _only_row(store, leads)["lead_score"] == "85"


def test_submit_lead_ignores_unknown_fields(store, leads) -> None:
    """Verify payload keys outside the layout do not change the row width."""

    LeadIntakeService(store, leads).submit_lead({"lead_first_name": "Jane", "favorite_color": "blue"})

    assert len(store.read_rows(leads)[0]) == leads.width


def test_submit_lead_neutralizes_formulas(store, leads) -> None:
    """Verify free-text cells cannot inject spreadsheet formulas."""

    LeadIntakeService(store, leads).submit_lead({"notes": "=IMPORTXML(\"http://x\")", "lead_phone": "+15550100"})

    row = _only_row(store, leads)
    assert row["notes"] == "IMPORTXML(\"http://x\")"
    assert row["lead_phone"] == "'+15550100"


def test_record_booked_lead_marks_booking(store, leads) -> None:
    """Verify booked leads carry the BOOKED marker and the session type."""

    slot = BookingSlot(requested_time="2025-12-26T21:00:00Z", display_time="Fri, Dec 26 at 4:00 PM")

    LeadIntakeService(store, leads).record_booked_lead(
        {"lead_first_name": "Jane", "session_type": "Discovery Call"}, slot
    )

    row = _only_row(store, leads)
    assert row["booking_status"] == "BOOKED: Fri, Dec 26 at 4:00 PM"
    assert row["booking_type"] == "Discovery Call"


def test_submit_referral_records_owner_contact(store, leads) -> None:
    """Verify referral rows keep only referral fields and put owner contact in notes."""

    LeadIntakeService(store, leads).submit_referral({
        "lead_first_name": "Sam",
        "lead_state": "LA",
        "owner_email": "owner@example.com",
        "owner_phone": "555-0199",
        "lead_score": "99",
    })

    row = _only_row(store, leads)
    assert row["decision_role"] == "Referral"
    assert row["notes"] == "Owner contact: owner@example.com 555-0199"
    assert row["lead_first_name"] == "Sam"
    assert row["lead_score"] == ""


def test_store_failure_propagates(leads) -> None:
    """Verify a failed append is raised to the caller."""

    class DownStore:
        def append_row(self, table, row):
            raise StoreUnavailableError("down", operation="write", table=table.name)

    with pytest.raises(StoreUnavailableError):
        LeadIntakeService(DownStore(), leads).submit_lead({"lead_first_name": "Jane"})
