"""
Tests for `services/lead_scoring_service.py`.

Covers contract rules:
- An empty profile scores 0 with no recommendations.
- Scoring is deterministic and never raises on missing or malformed data.
- Raising a qualifying signal never lowers the score.
- Point rules are independent and summed; recommendations follow rule order.
"""

from __future__ import annotations

import pytest

from domain.lead_profile import LeadProfile
from services.lead_scoring_service import (
    ANNUITIES,
    IUL,
    TERM_LIFE,
    WHOLE_LIFE,
    score_lead,
)


def _scenario_profile(**overrides) -> LeadProfile:
    payload = {
        "age": 32,
        "monthlyIncome": "$8,500",
        "employmentType": "Self-employed",
        "relationshipStatus": "Married",
        "housingStatus": "Own my home",
        "financialDiscipline": 8,
        "tobaccoUse": "No",
        "healthStatus": "Excellent",
    }
    payload.update(overrides)
    return LeadProfile.from_mapping(payload)


def test_empty_profile_scores_zero() -> None:
    """Verify a profile with no fields set scores 0 and recommends nothing."""

    result = score_lead(LeadProfile())

    assert result.score == 0
    assert result.recommendations == ()
    assert dict(result.breakdown) == {}


def test_reference_scenario_scores_110_with_term_life() -> None:
    """Verify the self-employed married homeowner scenario: 110 points, Term Life only."""

    result = score_lead(_scenario_profile())

    assert result.score == 110
    assert result.recommendations == (TERM_LIFE,)
    assert dict(result.breakdown) == {
        "age": 20,
        "monthly_income": 25,
        "employment_type": 20,
        "relationship_status": 15,
        "housing_status": 10,
        "financial_discipline": 10,
        "health_status": 5,
        "tobacco_use": 5,
    }


def test_iul_requires_a_trigger_field() -> None:
    """Verify IUL is added only when awareness or risk tolerance also qualifies."""

    with_awareness = score_lead(_scenario_profile(livingBenefitsAwareness="Yes, that's why I'm here"))
    with_growth = score_lead(_scenario_profile(riskTolerance="I want growth"))

    assert with_awareness.recommendations == (TERM_LIFE, IUL)
    assert with_awareness.score == 120
    assert with_growth.recommendations == (TERM_LIFE, IUL)


def test_iul_not_recommended_over_age_50_or_low_income() -> None:
    """Verify the IUL age and income gates."""

    older = score_lead(_scenario_profile(age=51, riskTolerance="growth"))
    lower_income = score_lead(_scenario_profile(monthlyIncome="4999", riskTolerance="growth"))

    assert IUL not in older.recommendations
    assert IUL not in lower_income.recommendations


def test_typographic_apostrophe_counts_for_awareness() -> None:
    """Verify the awareness phrase matches with a curly apostrophe."""

    result = score_lead(LeadProfile(living_benefits_awareness="No, that’s why I’m here"))

    assert result.score == 10


@pytest.mark.parametrize(
    "risk_tolerance, expected",
    [
        ("I prefer stable returns", True),
        ("Mix of both", True),
        ("growth", False),
        ("", False),
    ],
)
def test_whole_life_follows_risk_tolerance(risk_tolerance: str, expected: bool) -> None:
    """Verify Whole Life is recommended for stable or mixed risk tolerance."""

    result = score_lead(LeadProfile(risk_tolerance=risk_tolerance))

    assert (WHOLE_LIFE in result.recommendations) is expected


@pytest.mark.parametrize(
    "age, discipline, goals, expected",
    [
        (45, None, "Retirement income", True),
        (30, 7, "plan for RETIREMENT", True),
        (44, 6, "retirement", False),
        (60, None, "college savings", False),
    ],
)
def test_annuities_require_age_or_discipline_and_retirement_goal(
    age: int, discipline: int | None, goals: str, expected: bool
) -> None:
    """Verify the Annuities gate: (age >= 45 or discipline >= 7) and a retirement goal."""

    profile = LeadProfile(age=age, financial_discipline=discipline, financial_goals=goals)

    assert (ANNUITIES in score_lead(profile).recommendations) is expected


def test_recommendations_keep_rule_order() -> None:
    """Verify all four products come back in rule order."""

    profile = LeadProfile(
        age=46,
        monthly_income="6000",
        relationship_status="Single parent",
        risk_tolerance="Mix of growth and stable",
        financial_goals="retirement",
    )

    assert score_lead(profile).recommendations == (TERM_LIFE, IUL, WHOLE_LIFE, ANNUITIES)


def test_dependents_alone_trigger_term_life() -> None:
    """Verify a non-blank dependents value recommends Term Life without points."""

    result = score_lead(LeadProfile(dependents="Aging parents"))

    assert result.recommendations == (TERM_LIFE,)
    assert result.score == 0


@pytest.mark.parametrize(
    "age, expected",
    [(24, 0), (25, 20), (40, 20), (41, 10), (50, 10), (51, 0)],
)
def test_age_points_boundaries(age: int, expected: int) -> None:
    """Verify age bands 25-40 and 41-50."""

    assert score_lead(LeadProfile(age=age)).score == expected


@pytest.mark.parametrize(
    "income, expected",
    [("2999", 0), ("3000", 5), ("4999", 5), ("5000", 15), ("7999", 15), ("8000", 25), ("$12,000/mo", 25)],
)
def test_income_points_boundaries(income: str, expected: int) -> None:
    """Verify income bands after reducing the value to its digits."""

    assert score_lead(LeadProfile(monthly_income=income)).score == expected


def test_income_monotonicity() -> None:
    """Verify raising income from 4000 to 8000 never decreases the score."""

    incomes = ["0", "2999", "3000", "4000", "5000", "6500", "8000", "20000"]
    scores = [score_lead(_scenario_profile(monthlyIncome=i)).score for i in incomes]

    assert scores == sorted(scores)
    assert score_lead(_scenario_profile(monthlyIncome="8000")).score >= score_lead(
        _scenario_profile(monthlyIncome="4000")
    ).score


def test_scoring_is_deterministic() -> None:
    """Verify repeated calls on the same profile return equal results."""

    profile = _scenario_profile(riskTolerance="growth", financialGoals="retirement")
    first = score_lead(profile)

    for _ in range(5):
        again = score_lead(profile)
        assert again.score == first.score
        assert again.recommendations == first.recommendations
        assert dict(again.breakdown) == dict(first.breakdown)


def test_malformed_values_never_raise() -> None:
    """Verify unparsable values score as zero rather than raising."""

    profile = LeadProfile(
        age="unknown",
        monthly_income="n/a",
        number_of_kids="some",
        financial_discipline="high",
    )

    assert score_lead(profile).score == 0


def test_discipline_and_kids_parse_leading_integer() -> None:
    """Verify "7.5" parses as 7 and "2 kids" as 2."""

    result = score_lead(LeadProfile(financial_discipline="7.5", number_of_kids="2 kids"))

    assert dict(result.breakdown) == {"financial_discipline": 10, "number_of_kids": 5}
