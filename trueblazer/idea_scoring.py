"""Fit scoring between a business idea and a founder profile.

Two independent formula families live here:

- ``score_idea_for_founder`` scores legacy (v5) ideas through attribute overlap
  between what the idea needs and what the founder brings.
- ``score_v6_idea_for_founder`` scores flattened v6 ideas whose metrics are
  already on a 0-100 scale.

The families never share intermediate values. Every helper is a pure function
and substitutes a named neutral default for absent or malformed data.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, Optional

from .schemas import BusinessIdea, BusinessIdeaV6, Difficulty, FounderProfile, IdeaScoreBreakdown, RiskTolerance
from .scoring import WeightedScoreInput, clamp_score, to_score, weighted_average

# Neutral fallbacks used when a signal is missing.
DEFAULT_NO_DATA_SCORE = 50
DEFAULT_FOUNDER_HOURS = 10
DEFAULT_RISK_LEVEL = 2
DEFAULT_URGENCY = 3
DEFAULT_TIME_TO_REVENUE_MONTHS = 3
DEFAULT_DIFFICULTY_SCORE = 70
NO_MARKETS_MARKET_FLOOR = 50
NO_MARKETS_NETWORK_FLOOR = NO_MARKETS_MARKET_FLOOR / 2

RISK_LEVELS = {RiskTolerance.LOW.value: 1, RiskTolerance.MEDIUM.value: 2, RiskTolerance.HIGH.value: 3}
DIFFICULTY_SCORES = {Difficulty.EASY.value: 100, Difficulty.MEDIUM.value: 70, Difficulty.HARD.value: 40}

SALES_GAP_PENALTY = 20
HOURS_SHORTFALL_PENALTY = 10
RISK_STEP_PENALTY = 25
SLOW_REVENUE_PENALTY = 15
URGENT_FOUNDER_THRESHOLD = 4
URGENT_REVENUE_GRACE_MONTHS = 3

RECURRING_REVENUE_PATTERN = re.compile(r"subscription|recurring|saas|membership|monthly|annual", re.IGNORECASE)
RECURRING_REVENUE_SCORE = 100
ONE_OFF_REVENUE_SCORE = 50
NO_PUBLIC_BRAND_BONUS = 10

V6_AUTOMATION_PERSONALITIES = ("automation", "faceless")
V6_AUTOMATION_BONUS = 10
V6_SOLO_BONUS = 20
V6_CONSTRAINT_NORMALIZATION = 10
V6_PLATFORM_MATCH_BONUS = 30

OVERALL_WEIGHTS = {
    "founder_fit": 0.4,
    "constraints_fit": 0.25,
    "market_fit": 0.2,
    "economics": 0.15,
}
V6_OVERALL_WEIGHTS = {
    "founder_fit": 0.3,
    "constraints_fit": 0.2,
    "market_fit": 0.25,
    "economics": 0.25,
}


def _present(value: Optional[float], default: float) -> float:
    """Return *value* unless it is absent, zero or NaN."""

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, float) and math.isnan(value):
        return default
    return value or default


def _normalized_set(items: Optional[Iterable[str]]) -> set[str]:
    return {item.strip().lower() for item in items or [] if isinstance(item, str)}


def overlap_score(idea_side: Optional[Iterable[str]], founder_side: Optional[Iterable[str]]) -> float:
    """Share of the idea-side items that the founder side covers, as 0-100.

    Matching is case-insensitive and ignores surrounding whitespace.
    """

    needed = _normalized_set(idea_side)
    available = _normalized_set(founder_side)
    if not needed or not available:
        return 0.0
    matches = len(needed & available)
    return (matches / len(needed)) * 100


def _weighted(*pairs: tuple[float, float]) -> float:
    return weighted_average(WeightedScoreInput(value=value, weight=weight) for value, weight in pairs)


def _overall(breakdown: dict[str, float], weights: dict[str, float]) -> float:
    return clamp_score(sum(breakdown[key] * weight for key, weight in weights.items()))


# ---------------------------------------------------------------------------
# Legacy (v5) sub-scores
# ---------------------------------------------------------------------------


def score_founder_fit(idea: BusinessIdea, founder: FounderProfile) -> float:
    """Passion, skill, archetype and sales alignment."""

    passion_overlap = overlap_score(idea.primary_passion_domains, founder.passion_domains)
    skill_overlap = overlap_score(idea.primary_skill_needs, founder.skill_tags)

    archetype = (idea.business_archetype or "").strip().lower()
    archetype_match = (
        100
        if archetype and any(a.strip().lower() == archetype for a in founder.business_archetypes)
        else 0
    )

    sales_spike = founder.skill_spikes.sales_persuasion if founder.skill_spikes else None
    if sales_spike and idea.sales_intensity is not None and not math.isnan(idea.sales_intensity):
        sales_fit = max(0.0, 100 - abs(idea.sales_intensity - sales_spike) * SALES_GAP_PENALTY)
    else:
        sales_fit = DEFAULT_NO_DATA_SCORE

    return _weighted(
        (passion_overlap, 0.35),
        (skill_overlap, 0.35),
        (archetype_match, 0.15),
        (sales_fit, 0.15),
    )


def time_fit(founder_hours: float, min_hours: float) -> float:
    """100 when the founder meets the idea's minimum weekly hours, else a linear penalty."""

    if founder_hours < min_hours:
        return max(0.0, 100 - (min_hours - founder_hours) * HOURS_SHORTFALL_PENALTY)
    return 100.0


def capital_fit(available: float, required: float) -> float:
    if required <= available:
        return 100.0
    gap = (required - available) / max(required, 1)
    return max(0.0, 100 - gap * 100)


def risk_fit(founder_risk: Optional[str], idea_risk: Optional[str]) -> float:
    founder_level = RISK_LEVELS.get(_lookup_key(founder_risk), DEFAULT_RISK_LEVEL)
    idea_level = RISK_LEVELS.get(_lookup_key(idea_risk), DEFAULT_RISK_LEVEL)
    return max(0.0, 100 - abs(founder_level - idea_level) * RISK_STEP_PENALTY)


def _lookup_key(value: object) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def runway_fit(urgency: float, months_to_revenue: float) -> float:
    if urgency >= URGENT_FOUNDER_THRESHOLD and months_to_revenue > URGENT_REVENUE_GRACE_MONTHS:
        return max(0.0, 100 - (months_to_revenue - URGENT_REVENUE_GRACE_MONTHS) * SLOW_REVENUE_PENALTY)
    return 100.0


def score_constraints_fit(idea: BusinessIdea, founder: FounderProfile) -> float:
    """Time, capital, risk and runway alignment."""

    founder_hours = _present(founder.hours_per_week, DEFAULT_FOUNDER_HOURS)
    min_hours = _present(idea.hours_per_week_min, 0)

    return _weighted(
        (time_fit(founder_hours, min_hours), 0.30),
        (capital_fit(_present(founder.available_capital, 0), _present(idea.capital_required, 0)), 0.30),
        (risk_fit(founder.risk_tolerance, idea.risk_level), 0.25),
        (
            runway_fit(
                _present(founder.urgency_vs_upside, DEFAULT_URGENCY),
                _present(idea.time_to_first_revenue_months, DEFAULT_TIME_TO_REVENUE_MONTHS),
            ),
            0.15,
        ),
    )


def score_market_fit(idea: BusinessIdea, founder: FounderProfile) -> float:
    """Market understanding and network reach for the idea's markets.

    An idea that names no markets makes no claim, so it gets a floor instead
    of a zero.
    """

    market_overlap = overlap_score(idea.markets, founder.market_segments_understood)
    network_relevance = overlap_score(idea.markets, founder.existing_network_channels)

    if not idea.markets:
        market_overlap = max(market_overlap, NO_MARKETS_MARKET_FLOOR)
        network_relevance = max(network_relevance, NO_MARKETS_NETWORK_FLOOR)

    return _weighted((market_overlap, 0.6), (network_relevance, 0.4))


def capital_efficiency(capital_required: float) -> float:
    if capital_required > 20000:
        return 40.0
    if capital_required > 10000:
        return 60.0
    if capital_required > 5000:
        return 75.0
    if capital_required > 1000:
        return 90.0
    return 100.0


def revenue_speed(months_to_revenue: float) -> float:
    if months_to_revenue > 6:
        return 40.0
    if months_to_revenue > 4:
        return 60.0
    if months_to_revenue > 2:
        return 80.0
    return 100.0


def score_economics(idea: BusinessIdea) -> float:
    """Idea-only economic attractiveness; the founder plays no part."""

    has_recurring = bool(RECURRING_REVENUE_PATTERN.search(idea.revenue_model or ""))
    brand_term = DEFAULT_NO_DATA_SCORE + (0 if idea.requires_public_personal_brand else NO_PUBLIC_BRAND_BONUS)

    return _weighted(
        (capital_efficiency(_present(idea.capital_required, 0)), 0.30),
        (revenue_speed(_present(idea.time_to_first_revenue_months, DEFAULT_TIME_TO_REVENUE_MONTHS)), 0.30),
        (RECURRING_REVENUE_SCORE if has_recurring else ONE_OFF_REVENUE_SCORE, 0.25),
        (brand_term, 0.15),
    )


def score_idea_for_founder(idea: BusinessIdea, founder: FounderProfile) -> IdeaScoreBreakdown:
    """Compute the full fit breakdown of a legacy idea for a founder."""

    parts = {
        "founder_fit": clamp_score(score_founder_fit(idea, founder)),
        "constraints_fit": clamp_score(score_constraints_fit(idea, founder)),
        "market_fit": clamp_score(score_market_fit(idea, founder)),
        "economics": clamp_score(score_economics(idea)),
    }
    return IdeaScoreBreakdown(**parts, overall=_overall(parts, OVERALL_WEIGHTS))


# ---------------------------------------------------------------------------
# v6 scoring
# ---------------------------------------------------------------------------


def _metric(value: Optional[float]) -> float:
    return to_score(value, DEFAULT_NO_DATA_SCORE)


def score_v6_idea_for_founder(idea: BusinessIdeaV6, founder: FounderProfile) -> IdeaScoreBreakdown:
    """Score a v6 idea from its built-in metrics plus light founder adjustments."""

    leverage = _metric(idea.leverage_score)
    autonomy = _metric(idea.autonomy_level)

    personalities = {p.strip().lower() for p in founder.work_personality}
    automation_bonus = V6_AUTOMATION_BONUS if personalities.intersection(V6_AUTOMATION_PERSONALITIES) else 0
    founder_fit = clamp_score((leverage + autonomy) / 2 + automation_bonus)

    difficulty = DIFFICULTY_SCORES.get(_lookup_key(idea.difficulty), DEFAULT_DIFFICULTY_SCORE)
    solo_bonus = V6_SOLO_BONUS if idea.solo_fit else 0
    constraints_fit = clamp_score(difficulty + solo_bonus - V6_CONSTRAINT_NORMALIZATION)

    platforms = {p.strip().lower() for p in founder.creator_platforms}
    platform = (idea.platform or "").strip().lower()
    platform_match = V6_PLATFORM_MATCH_BONUS if platform and platform in platforms else 0
    market_fit = clamp_score((_metric(idea.culture_tailwind) + platform_match + _metric(idea.virality_potential)) / 2)

    economics = clamp_score((_metric(idea.automation_density) + autonomy + leverage) / 3)

    parts = {
        "founder_fit": founder_fit,
        "constraints_fit": constraints_fit,
        "market_fit": market_fit,
        "economics": economics,
    }
    return IdeaScoreBreakdown(**parts, overall=_overall(parts, V6_OVERALL_WEIGHTS))
