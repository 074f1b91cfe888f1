"""
Lead intake service.

Appends lead rows (plain submissions, booked leads and owner referrals) to the
leads table, scoring the lead when the submission carries no score.

Security:
- Formula injection prevention: leads are written with USER_ENTERED input, so
  free-text cells are stripped of leading characters that a spreadsheet would
  evaluate as a formula.
- Phone cells keep a leading "+" country code: an international number is
  escaped with a leading apostrophe, which Sheets stores as text, instead of
  being stripped.
- Security logging: every stripped cell is logged with its field name.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from domain.booking import BookingSlot
from domain.lead_profile import LeadProfile, ScoreResult, as_text
from domain.tables import TableSchema
from domain.time import utc_now_iso
from repositories.tabular_store import TabularStore
from services.lead_scoring_service import score_lead

logger = logging.getLogger(__name__)

DANGEROUS_LEADING_CHARS = frozenset({"=", "+", "-", "@", "\t", "\r"})

# Written by the service with a fixed literal prefix; never sanitized.
_TRUSTED_COLUMNS = frozenset({"booking_status"})

_PHONE_COLUMNS = frozenset({"lead_phone"})
_INTERNATIONAL_PHONE = re.compile(r"^\+[\d\s().-]+$")

_REFERRAL_FIELDS: Tuple[str, ...] = (
    "lead_first_name",
    "lead_last_name",
    "lead_state",
    "lead_state_other",
    "primary_focus",
    "utm_source",
    "utm_medium",
    "utm_campaign",
)


def sanitize_cell(value: Any, field_name: str = "unknown") -> str:
    """
    Sanitize a cell value to prevent spreadsheet formula injection.

    Strips leading characters that trigger formula evaluation in Sheets/Excel:
    =, +, -, @, tab, carriage return. A warning is logged whenever something is
    stripped so both accidental issues and injection attempts are visible.

    Example:
        sanitize_cell("=HYPERLINK(\"x\")", "notes")
        # Returns 'HYPERLINK("x")' and logs the stripped "=" character

        sanitize_cell("Jane", "lead_first_name")
        # Returns "Jane" (unchanged, no logging)
    """
    text = as_text(value).strip()
    if not text:
        return ""

    original_text = text
    stripped_chars = []
    while text and text[0] in DANGEROUS_LEADING_CHARS:
        stripped_chars.append(text[0])
        text = text[1:]

    if stripped_chars:
        logger.warning(
            f"Formula character(s) stripped from field '{field_name}'",
            extra={
                "field_name": field_name,
                "stripped_characters": "".join(stripped_chars),
                "original_value": original_text[:100],
                "sanitized_value": text[:100],
                "modification_type": "formula_injection_prevention",
            },
        )

    return text


def escape_phone_cell(value: Any, field_name: str = "lead_phone") -> str:
    """
    Keep an international phone number such as "+1 555 0100" as text.

    The value is prefixed with an apostrophe so a spreadsheet neither evaluates
    it nor drops the "+". Anything else is handled by sanitize_cell.
    """
    text = as_text(value).strip()
    if _INTERNATIONAL_PHONE.match(text):
        return "'" + text
    return sanitize_cell(text, field_name)


@dataclass(frozen=True, slots=True)
class LeadSubmissionResult:
    """
    Result of recording a lead row.

    lead_score: the score written to the row (submitted or computed)
    lead_tier: the tier supplied by the caller, if any
    scored: True when the score was computed here
    """

    lead_score: str
    lead_tier: Optional[str]
    scored: bool
    score_result: ScoreResult


class LeadIntakeService:
    """Builds lead rows in the leads table layout and appends them."""

    def __init__(self, store: TabularStore, leads: TableSchema) -> None:
        self._store = store
        self._leads = leads

    def _row(self, values: Mapping[str, Any]) -> list[str]:
        cleaned: dict[str, str] = {}
        for column in self._leads.columns:
            value = values.get(column)
            if column in _TRUSTED_COLUMNS:
                cleaned[column] = as_text(value)
            elif column in _PHONE_COLUMNS:
                cleaned[column] = escape_phone_cell(value, column)
            else:
                cleaned[column] = sanitize_cell(value, column)
        return self._leads.row_from(cleaned)

    def _with_score(self, payload: Mapping[str, Any]) -> tuple[dict[str, Any], LeadSubmissionResult]:
        values = dict(payload)
        result = score_lead(LeadProfile.from_mapping(payload))

        submitted = as_text(payload.get("lead_score")).strip()
        scored = submitted == ""
        values["lead_score"] = str(result.score) if scored else submitted
        values["timestamp"] = as_text(payload.get("timestamp")).strip() or utc_now_iso()

        tier = as_text(payload.get("lead_tier")).strip() or None
        return values, LeadSubmissionResult(
            lead_score=values["lead_score"],
            lead_tier=tier,
            scored=scored,
            score_result=result,
        )

    def submit_lead(self, payload: Mapping[str, Any]) -> LeadSubmissionResult:
        """
        Record a lead submission.

        Raises:
            StoreUnavailableError: the row could not be appended.
        """

        values, result = self._with_score(payload)
        self._store.append_row(self._leads, self._row(values))
        logger.info(
            "Lead added",
            extra={
                "lead_tier": result.lead_tier,
                "lead_score": result.lead_score,
                "utm_source": as_text(payload.get("utm_source")) or "direct",
            },
        )
        return result

    def record_booked_lead(self, payload: Mapping[str, Any], slot: BookingSlot) -> LeadSubmissionResult:
        """
        Record the lead behind a confirmed booking, marked "BOOKED: <display time>".

        Raises:
            StoreUnavailableError: the row could not be appended.
        """

        values, result = self._with_score(payload)
        values["booking_type"] = as_text(payload.get("booking_type")) or as_text(payload.get("session_type"))
        values["booking_status"] = f"BOOKED: {slot.display_time}"
        self._store.append_row(self._leads, self._row(values))
        logger.info("Booked lead added", extra={"requested_time": slot.requested_time})
        return result

    def submit_referral(self, payload: Mapping[str, Any]) -> None:
        """
        Record an owner referral sent by someone who is not the decision maker.

        Only the referrer's name, location, focus and campaign fields are kept;
        the owner's contact details go into notes.

        Raises:
            StoreUnavailableError: the row could not be appended.
        """

        values: dict[str, Any] = {name: payload.get(name) for name in _REFERRAL_FIELDS}
        values["timestamp"] = utc_now_iso()
        values["decision_role"] = "Referral"
        owner_contact = " ".join(
            part for part in (as_text(payload.get("owner_email")), as_text(payload.get("owner_phone"))) if part
        )
        values["notes"] = f"Owner contact: {owner_contact}"
        self._store.append_row(self._leads, self._row(values))
        logger.info("Owner referral added", extra={"utm_source": as_text(payload.get("utm_source")) or "direct"})


__all__ = [
    "LeadIntakeService",
    "LeadSubmissionResult",
    "escape_phone_cell",
    "sanitize_cell",
]
