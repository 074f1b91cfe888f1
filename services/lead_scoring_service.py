"""
Lead scoring service.

Maps a LeadProfile to a numeric score and an ordered list of product
recommendations. Pure and deterministic: no I/O, no shared state, safe to
call repeatedly and concurrently. Missing data contributes zero points and no
recommendation; scoring never raises.

Point rules are independent and summed. Recommendation rules run in a fixed
order and each appends its own product at most once.

Tiering (A/B/C/D) from the score is done by callers, not here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from domain.lead_profile import LeadProfile, ScoreResult

TERM_LIFE = "Term Life"
IUL = "Indexed Universal Life (IUL)"
WHOLE_LIFE = "Whole Life"
ANNUITIES = "Annuities"

SELF_EMPLOYED_MARKERS = ("Contractor", "Business Owner", "Self-employed")
FAMILY_MARKERS = ("Married", "parent")
AWARENESS_PHRASE = "that's why I'm here"


@dataclass(frozen=True, slots=True)
class PointRule:
    """A named rule that awards points (0 when it does not apply)."""

    name: str
    points: Callable[[LeadProfile], int]


@dataclass(frozen=True, slots=True)
class RecommendationRule:
    """A product recommended when its predicate holds."""

    product: str
    applies: Callable[[LeadProfile], bool]


def _contains_any(text: str, markers: Tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def _awareness(profile: LeadProfile) -> str:
    # Chat widgets send typographic apostrophes.
    return profile.text("living_benefits_awareness").replace("’", "'")


def _has_family(profile: LeadProfile) -> bool:
    return _contains_any(profile.text("relationship_status"), FAMILY_MARKERS)


def _age_points(profile: LeadProfile) -> int:
    age = profile.age_years
    if 25 <= age <= 40:
        return 20
    if 41 <= age <= 50:
        return 10
    return 0


def _income_points(profile: LeadProfile) -> int:
    income = profile.income
    if income >= 8000:
        return 25
    if income >= 5000:
        return 15
    if income >= 3000:
        return 5
    return 0


def _discipline_points(profile: LeadProfile) -> int:
    discipline = profile.discipline
    if discipline >= 7:
        return 10
    if discipline >= 5:
        return 5
    return 0


def _flat(points: int, predicate: Callable[[LeadProfile], bool]) -> Callable[[LeadProfile], int]:
    return lambda profile: points if predicate(profile) else 0


POINT_RULES: Tuple[PointRule, ...] = (
    PointRule("age", _age_points),
    PointRule("monthly_income", _income_points),
    PointRule(
        "employment_type",
        _flat(20, lambda p: _contains_any(p.text("employment_type"), SELF_EMPLOYED_MARKERS)),
    ),
    PointRule("relationship_status", _flat(15, _has_family)),
    PointRule("number_of_kids", _flat(5, lambda p: p.kids > 0)),
    PointRule("housing_status", _flat(10, lambda p: p.text("housing_status") == "Own my home")),
    PointRule("financial_discipline", _discipline_points),
    PointRule("living_benefits_awareness", _flat(10, lambda p: AWARENESS_PHRASE in _awareness(p))),
    PointRule("health_status", _flat(5, lambda p: p.text("health_status") == "Excellent")),
    PointRule("tobacco_use", _flat(5, lambda p: p.text("tobacco_use") == "No")),
)


def _wants_term_life(profile: LeadProfile) -> bool:
    return _has_family(profile) or profile.text("dependents").strip() != ""


def _wants_iul(profile: LeadProfile) -> bool:
    trigger = "here" in _awareness(profile) or "growth" in profile.text("risk_tolerance")
    return profile.income >= 5000 and profile.age_years <= 50 and trigger


def _wants_whole_life(profile: LeadProfile) -> bool:
    return _contains_any(profile.text("risk_tolerance"), ("stable", "Mix"))


def _wants_annuities(profile: LeadProfile) -> bool:
    eligible = profile.age_years >= 45 or profile.discipline >= 7
    return eligible and "retirement" in profile.text("financial_goals").lower()


RECOMMENDATION_RULES: Tuple[RecommendationRule, ...] = (
    RecommendationRule(TERM_LIFE, _wants_term_life),
    RecommendationRule(IUL, _wants_iul),
    RecommendationRule(WHOLE_LIFE, _wants_whole_life),
    RecommendationRule(ANNUITIES, _wants_annuities),
)


def score_lead(profile: LeadProfile) -> ScoreResult:
    """
    Score a lead profile and recommend products.

    Args:
        profile: LeadProfile (any field may be empty)

    Returns:
        ScoreResult with the summed score, recommendations in rule order and
        a breakdown of the rules that awarded points.

    Example:
        profile = LeadProfile(age=32, monthly_income="$8,500", tobacco_use="No")
        result = score_lead(profile)
        # result.score == 50, result.recommendations == ()
    """

    breakdown: Dict[str, int] = {}
    for rule in POINT_RULES:
        points = rule.points(profile)
        if points:
            breakdown[rule.name] = points

    recommendations: List[str] = []
    for rec in RECOMMENDATION_RULES:
        if rec.applies(profile) and rec.product not in recommendations:
            recommendations.append(rec.product)

    return ScoreResult(
        score=sum(breakdown.values()),
        recommendations=tuple(recommendations),
        breakdown=breakdown,
    )


__all__ = [
    "ANNUITIES",
    "IUL",
    "POINT_RULES",
    "RECOMMENDATION_RULES",
    "TERM_LIFE",
    "WHOLE_LIFE",
    "score_lead",
]
