"""Idea engine utilities: quick fit heuristic, ranking, filtering and validation.

``compute_fit_score`` is a keyword-substring heuristic meant for fast ranking
of lightweight idea projections. It is deliberately separate from the
set-overlap breakdown in :mod:`trueblazer.idea_scoring`.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional, Sequence

from .schemas import FounderProfileLite, IdeaDraft, IdeaFilters, IdeaLite, SortBy, ValidationResult
from .scoring import WeightedScoreInput, to_score, weighted_average

PASSION_MATCH_SCORE = 80
SKILL_MATCH_SCORE = 70
TEXT_WITHOUT_MATCH_SCORE = 60
NO_TEXT_SCORE = 50

BASE_CONSTRAINT_SCORE = 70
CONSTRAINT_FALLBACK = 50
BASE_RISK_SCORE = 70
RISK_FALLBACK = 60
RISK_STAGE_ADJUSTMENT = 10

MAX_TITLE_LENGTH = 200
MAX_SUMMARY_LENGTH = 5000

_TOKEN_SEPARATORS = re.compile(r"[,;\n]")


def includes_any(haystack: str, needle_list: str) -> bool:
    """True when any comma, semicolon or newline separated token of *needle_list* occurs in *haystack*."""

    tokens = [token.strip() for token in _TOKEN_SEPARATORS.split(needle_list or "")]
    tokens = [token for token in tokens if token]
    if not tokens:
        return False
    lowered = (haystack or "").lower()
    return any(token.lower() in lowered for token in tokens)


def compute_fit_score(idea: IdeaLite, founder: FounderProfileLite) -> float:
    """Rough, explainable founder-idea fit on 0-100."""

    title = (idea.title or "").lower()
    summary = (idea.summary or "").lower()
    passions = (founder.passions_text or "").lower()
    skills = (founder.skills_text or "").lower()

    passion_match = 0
    if passions and (includes_any(title, passions) or includes_any(summary, passions)):
        passion_match = PASSION_MATCH_SCORE

    skill_match = 0
    if skills and (includes_any(title, skills) or includes_any(summary, skills)):
        skill_match = SKILL_MATCH_SCORE

    time = founder.time_per_week or 0
    capital = founder.capital_available or 0

    constraint_score = BASE_CONSTRAINT_SCORE
    if time < 3:
        constraint_score -= 20
    if time < 1:
        constraint_score -= 20
    if capital < 500:
        constraint_score -= 10
    constraint_score = to_score(constraint_score, CONSTRAINT_FALLBACK)

    risk = (founder.risk_tolerance or "medium").lower()
    stage = (idea.stage or "idea").lower()

    risk_score = BASE_RISK_SCORE
    if risk == "low" and stage == "idea":
        risk_score -= RISK_STAGE_ADJUSTMENT
    if risk == "low" and stage == "revenue":
        risk_score += RISK_STAGE_ADJUSTMENT
    if risk == "high" and stage == "idea":
        risk_score += RISK_STAGE_ADJUSTMENT
    risk_score = to_score(risk_score, RISK_FALLBACK)

    passion_score = passion_match or (TEXT_WITHOUT_MATCH_SCORE if passions else NO_TEXT_SCORE)
    skill_score = skill_match or (TEXT_WITHOUT_MATCH_SCORE if skills else NO_TEXT_SCORE)

    return weighted_average(
        [
            WeightedScoreInput(value=passion_score, weight=0.35),
            WeightedScoreInput(value=skill_score, weight=0.30),
            WeightedScoreInput(value=constraint_score, weight=0.20),
            WeightedScoreInput(value=risk_score, weight=0.15),
        ]
    )


def _created_at_millis(value: Optional[str]) -> float:
    if not value:
        return 0
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp() * 1000
    except ValueError:
        return 0


def rank_ideas(
    ideas: Sequence[IdeaLite],
    sort_by: SortBy | str = SortBy.OPPORTUNITY,
    founder_profile: Optional[FounderProfileLite] = None,
) -> List[IdeaLite]:
    """Return a new, descending-ordered list of ideas.

    A missing ``founder_fit_score`` is filled in from *founder_profile* when one
    is given. Input ideas are copied, never mutated.
    """

    try:
        sort_key = SortBy(sort_by)
    except ValueError:
        sort_key = SortBy.OPPORTUNITY

    with_fit = []
    for idea in ideas:
        fit = idea.founder_fit_score
        if fit is None and founder_profile is not None:
            fit = compute_fit_score(idea, founder_profile)
        with_fit.append(idea.model_copy(update={"founder_fit_score": fit}))

    if sort_key is SortBy.RECENT:
        return sorted(with_fit, key=lambda idea: _created_at_millis(idea.created_at), reverse=True)
    if sort_key is SortBy.FIT:
        return sorted(with_fit, key=lambda idea: to_score(idea.founder_fit_score), reverse=True)
    return sorted(with_fit, key=lambda idea: to_score(idea.opportunity_score), reverse=True)


def filter_ideas(ideas: Sequence[IdeaLite], filters: Optional[IdeaFilters] = None) -> List[IdeaLite]:
    """Keep the ideas that satisfy every supplied criterion.

    A non-empty ``stage`` or ``tags`` filter is strict: ideas with no stage, or
    no tags, are dropped rather than let through. Earlier TrueBlazer clients
    kept such ideas.
    """

    if filters is None:
        return list(ideas)

    wanted_tags = {tag.lower() for tag in filters.tags or []}

    kept = []
    for idea in ideas:
        if filters.stage and idea.stage not in filters.stage:
            continue
        if to_score(idea.opportunity_score) < filters.min_opportunity_score:
            continue
        if to_score(idea.founder_fit_score) < filters.min_fit_score:
            continue
        if wanted_tags and not wanted_tags.intersection(tag.lower() for tag in idea.tags or []):
            continue
        kept.append(idea)
    return kept


def validate_idea(idea: IdeaDraft) -> ValidationResult:
    """Structural checks run before an idea is saved; callers decide whether to block."""

    errors: List[str] = []

    if not idea.title or not idea.title.strip():
        errors.append("Title is required.")
    if idea.title and len(idea.title) > MAX_TITLE_LENGTH:
        errors.append(f"Title is too long (max {MAX_TITLE_LENGTH} characters).")
    if idea.summary and len(idea.summary) > MAX_SUMMARY_LENGTH:
        errors.append(f"Summary is too long (max {MAX_SUMMARY_LENGTH} characters).")

    return ValidationResult(valid=not errors, errors=errors)
