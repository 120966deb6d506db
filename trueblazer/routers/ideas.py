"""Idea scoring, ranking, filtering and validation endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from ..idea_engine import filter_ideas, rank_ideas, validate_idea
from ..idea_scoring import score_idea_for_founder, score_v6_idea_for_founder
from ..schemas import (
    FilterIdeasRequest,
    IdeaDraft,
    IdeaLite,
    IdeaScoreBreakdown,
    RankIdeasRequest,
    ScoreBands,
    ScoreIdeaRequest,
    ScoreIdeaResponse,
    ScoreIdeaV6Request,
    ValidationResult,
)
from ..scoring import categorize_score


router = APIRouter(prefix="/ideas", tags=["ideas"])


def _with_bands(breakdown: IdeaScoreBreakdown) -> ScoreIdeaResponse:
    bands = ScoreBands(**{field: categorize_score(value) for field, value in breakdown.model_dump().items()})
    return ScoreIdeaResponse(breakdown=breakdown, bands=bands)


@router.post("/score", response_model=ScoreIdeaResponse)
async def score_idea(payload: ScoreIdeaRequest) -> ScoreIdeaResponse:
    """Score a legacy idea against a founder profile."""

    return _with_bands(score_idea_for_founder(payload.idea, payload.founder))


@router.post("/score-v6", response_model=ScoreIdeaResponse)
async def score_idea_v6(payload: ScoreIdeaV6Request) -> ScoreIdeaResponse:
    """Score a v6 idea against a founder profile."""

    return _with_bands(score_v6_idea_for_founder(payload.idea, payload.founder))


@router.post("/rank", response_model=list[IdeaLite])
async def rank(payload: RankIdeasRequest) -> list[IdeaLite]:
    return rank_ideas(payload.ideas, sort_by=payload.sort_by, founder_profile=payload.founder_profile)


@router.post("/filter", response_model=list[IdeaLite])
async def filter_(payload: FilterIdeasRequest) -> list[IdeaLite]:
    return filter_ideas(payload.ideas, payload.filters)


@router.post("/validate", response_model=ValidationResult)
async def validate(payload: IdeaDraft) -> ValidationResult:
    """Advisory structural checks; a failing result is still a 200."""

    return validate_idea(payload)
