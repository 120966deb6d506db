"""Prompt compilation endpoints; they return prompts and never call an LLM."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter

from ..prompts import (
    PromptPair,
    build_blueprint_generation_prompt,
    build_idea_generation_prompt,
    build_idea_vetting_prompt,
    build_opportunity_score_prompt,
)
from ..schemas import (
    BlueprintPromptRequest,
    IdeaGenerationPromptRequest,
    IdeaVettingPromptRequest,
    OpportunityScorePromptRequest,
    PromptPairResponse,
)


router = APIRouter(prefix="/prompts", tags=["prompts"])


def _response(pair: PromptPair) -> PromptPairResponse:
    return PromptPairResponse(**asdict(pair))


@router.post("/idea-generation", response_model=PromptPairResponse)
async def idea_generation(payload: IdeaGenerationPromptRequest) -> PromptPairResponse:
    return _response(build_idea_generation_prompt(payload.founder_profile, payload.max_ideas))


@router.post("/idea-vetting", response_model=PromptPairResponse)
async def idea_vetting(payload: IdeaVettingPromptRequest) -> PromptPairResponse:
    return _response(build_idea_vetting_prompt(payload.founder_profile, payload.idea))


@router.post("/opportunity-score", response_model=PromptPairResponse)
async def opportunity_score(payload: OpportunityScorePromptRequest) -> PromptPairResponse:
    return _response(build_opportunity_score_prompt(payload.idea, payload.founder_profile, payload.market_notes))


@router.post("/blueprint", response_model=PromptPairResponse)
async def blueprint(payload: BlueprintPromptRequest) -> PromptPairResponse:
    return _response(
        build_blueprint_generation_prompt(payload.founder_profile, payload.chosen_idea, payload.idea_analysis)
    )
