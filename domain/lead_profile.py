"""
Domain: Lead profile and score result.

Contract excerpts implemented here:
- A LeadProfile is a flat set of named attributes (demographic, financial,
  behavioral). No field is required; every attribute defaults to empty.
- A LeadProfile is immutable once received; scoring only reads it.
- Missing numeric values parse as 0 and missing strings as "". Parsing never
  raises.
- A ScoreResult is derived entirely from a LeadProfile and has no persisted
  identity.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple, Union

ProfileValue = Union[str, int, float, None]

_LEADING_INT = re.compile(r"^\s*(\d+)")
_NON_DIGITS = re.compile(r"\D")
# "$5,000-$8,000" or "5000 to 8000": the lower bound counts.
_AMOUNT_RANGE = re.compile(r"^\D*?(\d[\d,]*)\s*(?:-|to)\s*\D*\d", re.IGNORECASE)
_AFFIRMATIVE = frozenset({"yes", "y", "true"})

# Attribute name -> accepted payload keys, in lookup order.
# camelCase keys come from the chatbot widget; the lead_* / *_use / *_status
# keys and income_range / has_partner / has_kids are the intake form's names
# for the same answers.
PROFILE_FIELD_KEYS: Mapping[str, Tuple[str, ...]] = {
    "age": ("age", "lead_age"),
    "monthly_income": ("monthly_income", "monthlyIncome", "income_range"),
    "employment_type": ("employment_type", "employmentType"),
    "relationship_status": ("relationship_status", "relationshipStatus", "has_partner"),
    "number_of_kids": ("number_of_kids", "numberOfKids", "has_kids"),
    "housing_status": ("housing_status", "housingStatus", "home_status"),
    "financial_discipline": ("financial_discipline", "financialDiscipline"),
    "living_benefits_awareness": ("living_benefits_awareness", "livingBenefitsAwareness"),
    "health_status": ("health_status", "healthStatus"),
    "tobacco_use": ("tobacco_use", "tobaccoUse", "nicotine_use"),
    "risk_tolerance": ("risk_tolerance", "riskTolerance"),
    "financial_goals": ("financial_goals", "financialGoals"),
    "dependents": ("dependents",),
}


def as_text(value: ProfileValue) -> str:
    """Render a profile value as text; None becomes ""."""

    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_amount(value: ProfileValue) -> int:
    """
    Parse a currency or free-text amount by keeping only its digits.

    A range such as "$5,000-$8,000" parses as its lower bound.

    Examples:
        >>> parse_amount("$8,500")
        8500
        >>> parse_amount("$5,000-$8,000")
        5000
        >>> parse_amount("")
        0
        >>> parse_amount(None)
        0
    """

    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    text = as_text(value)
    bounded = _AMOUNT_RANGE.match(text)
    if bounded:
        text = bounded.group(1)
    digits = _NON_DIGITS.sub("", text)
    return int(digits) if digits else 0


def parse_count(value: ProfileValue) -> int:
    """
    Parse an integer rating, age or count from its leading digits.

    Examples:
        >>> parse_count("7.5")
        7
        >>> parse_count("32 years")
        32
        >>> parse_count("n/a")
        0
    """

    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    match = _LEADING_INT.match(as_text(value))
    return int(match.group(1)) if match else 0


@dataclass(frozen=True, slots=True)
class LeadProfile:
    """
    Pure domain value for a submitted lead profile.

    Values are kept exactly as received; typed accessors below do the parsing
    so the raw answers remain available for persistence.
    """

    age: ProfileValue = None
    monthly_income: ProfileValue = None
    employment_type: ProfileValue = None
    relationship_status: ProfileValue = None
    number_of_kids: ProfileValue = None
    housing_status: ProfileValue = None
    financial_discipline: ProfileValue = None
    living_benefits_awareness: ProfileValue = None
    health_status: ProfileValue = None
    tobacco_use: ProfileValue = None
    risk_tolerance: ProfileValue = None
    financial_goals: ProfileValue = None
    dependents: ProfileValue = None

    @staticmethod
    def from_mapping(payload: Mapping[str, Any]) -> "LeadProfile":
        """
        Build a LeadProfile from an arbitrary payload mapping.

        Unknown keys are ignored. For each attribute the first accepted key
        holding a non-empty value wins.
        """

        values: dict[str, ProfileValue] = {}
        for attribute, keys in PROFILE_FIELD_KEYS.items():
            for key in keys:
                value = payload.get(key)
                if value is not None and as_text(value).strip() != "":
                    values[attribute] = value
                    break
        return LeadProfile(**values)

    @property
    def age_years(self) -> int:
        return parse_count(self.age)

    @property
    def income(self) -> int:
        return parse_amount(self.monthly_income)

    @property
    def kids(self) -> int:
        """Number of kids; a yes/no answer counts "Yes" as one."""

        count = parse_count(self.number_of_kids)
        if count == 0 and self.text("number_of_kids").strip().lower() in _AFFIRMATIVE:
            return 1
        return count

    @property
    def discipline(self) -> int:
        return parse_count(self.financial_discipline)

    def text(self, attribute: str) -> str:
        """Return an attribute as text ("" when absent)."""

        return as_text(getattr(self, attribute))


@dataclass(frozen=True, slots=True)
class ScoreResult:
    """
    Result of scoring a LeadProfile.

    recommendations preserve rule evaluation order. breakdown maps each rule
    that awarded points to the points it awarded.
    """

    score: int
    recommendations: Tuple[str, ...] = ()
    breakdown: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.score < 0:
            raise ValueError("score must be >= 0")
