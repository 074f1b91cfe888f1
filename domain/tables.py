"""
Domain: Tabular layouts.

The tabular store enforces no schema beyond column order, so every table the
platform writes is described here once. Callers build rows through
TableSchema.row_from() to keep row shape aligned with the target table.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence, Tuple


class ValueInput(str, Enum):
    """How the store should interpret written cell values."""

    RAW = "RAW"  # stored exactly as sent
    USER_ENTERED = "USER_ENTERED"  # parsed as if typed (numbers, dates)


@dataclass(frozen=True, slots=True)
class TableSchema:
    """Name and ordered column layout of a table in the tabular store."""

    name: str
    columns: Tuple[str, ...]
    value_input: ValueInput = ValueInput.USER_ENTERED

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("table name must be non-empty")
        if not self.columns:
            raise ValueError("table must declare at least one column")
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"duplicate column names in table {self.name!r}")

    @property
    def width(self) -> int:
        return len(self.columns)

    def index_of(self, column: str) -> int:
        try:
            return self.columns.index(column)
        except ValueError:
            raise KeyError(f"table {self.name!r} has no column {column!r}") from None

    def require_row_shape(self, row: Sequence[Any]) -> None:
        if len(row) != self.width:
            raise ValueError(
                f"row for table {self.name!r} has {len(row)} values, expected {self.width}"
            )

    def row_from(self, values: Mapping[str, Any]) -> list[str]:
        """Build a row in column order; missing or None values become ""."""

        row: list[str] = []
        for column in self.columns:
            value = values.get(column)
            row.append("" if value is None else str(value))
        return row


# Lead intake layout shared by lead, booking and referral rows.
LEAD_COLUMNS: Tuple[str, ...] = (
    "timestamp",
    # Contact
    "lead_first_name",
    "lead_last_name",
    "lead_email",
    "lead_phone",
    "lead_state",
    "lead_state_other",
    "lead_age",
    "primary_focus",
    # Work/Income
    "employment_type",
    "occupation",
    "income_range",
    "income_stability",
    # Family
    "has_partner",
    "partner_works",
    "partner_income_sufficiency",
    "has_kids",
    "kids_ages",
    "kids_expenses",
    "other_dependents",
    # Finances
    "home_status",
    "mortgage_balance",
    "monthly_expenses",
    "debt_types",
    "emergency_fund",
    # Risk/Priority
    "biggest_risk",
    "protection_priority",
    # Current coverage
    "has_life_insurance",
    "why_no_insurance",
    "current_coverage_amount",
    "current_policy_types",
    "coverage_confidence",
    # Preferences
    "preference_style",
    "goal_type",
    "time_horizon",
    "funding_commitment",
    "monthly_budget",
    # Health
    "nicotine_use",
    "health_status",
    "health_conditions",
    "health_other",
    # Intent
    "timeline",
    "trigger_reason",
    "sms_consent",
    "decision_role",
    # Business
    "trade_type",
    "business_name",
    "years_in_business",
    "team_size",
    "annual_revenue_range",
    "tax_pain_level",
    # Calculated
    "lead_score",
    "lead_tier",
    "booking_type",
    "chat_completion_type",
    "notes",
    # Tracking
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "landing_page",
    "referrer",
    "session_duration",
    "booking_status",
)

# requested_time must stay the first column: it is the ledger key.
BOOKING_COLUMNS: Tuple[str, ...] = (
    "requested_time",
    "display_time",
    "lead_first_name",
    "lead_last_name",
    "lead_email",
    "lead_phone",
    "session_type",
    "recorded_at",
)

BOOKING_KEY_COLUMN = "requested_time"


def leads_table(name: str) -> TableSchema:
    return TableSchema(name=name, columns=LEAD_COLUMNS, value_input=ValueInput.USER_ENTERED)


def bookings_table(name: str) -> TableSchema:
    # RAW keeps requested_time byte-for-byte; USER_ENTERED would turn it into a date.
    return TableSchema(name=name, columns=BOOKING_COLUMNS, value_input=ValueInput.RAW)
