"""Prompt builders for the TrueBlazer LLM calls.

Each builder returns a :class:`PromptPair` ready to hand to the gateway. The
builders only truncate and serialize; none of them talks to an LLM.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from textwrap import dedent
from typing import Any, Dict, List, Optional, Tuple

from .schemas import FounderProfileLite, IdeaAnalysisPayload, IdeaFitScores, IdeaLite

ELLIPSIS = "..."

TITLE_BUDGET = 200
SUMMARY_BUDGET = 2000
MARKET_NOTES_BUDGET = 1000
ANALYSIS_TEXT_BUDGET = 1500


@dataclass(frozen=True)
class PromptPair:
    """System and user messages for a single LLM call."""

    system: str
    user: str


def sanitize_text(text: Optional[str], max_length: int) -> str:
    """Truncate *text* to at most *max_length* characters, marking the cut with ``...``."""

    if not text:
        return ""
    if len(text) <= max_length:
        return text
    if max_length <= len(ELLIPSIS):
        return ELLIPSIS[: max(max_length, 0)]
    return text[: max_length - len(ELLIPSIS)] + ELLIPSIS


def _to_json(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _bounded(value: Any, max_length: int) -> Any:
    """Keep structured values whose JSON fits *max_length*; otherwise truncate their text form."""

    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return sanitize_text(value, max_length)
    serialized = json.dumps(value, ensure_ascii=False, default=str)
    return value if len(serialized) <= max_length else sanitize_text(serialized, max_length)


def _founder_payload(profile: FounderProfileLite, *, text_budget: int, vision_budget: int) -> Dict[str, Any]:
    return {
        "passions_text": sanitize_text(profile.passions_text, text_budget),
        "skills_text": sanitize_text(profile.skills_text, text_budget),
        "time_per_week": profile.time_per_week,
        "capital_available": profile.capital_available,
        "risk_tolerance": profile.risk_tolerance,
        "lifestyle_goals": sanitize_text(profile.lifestyle_goals, vision_budget),
        "success_vision": sanitize_text(profile.success_vision, vision_budget),
    }


def build_idea_generation_prompt(founder_profile: FounderProfileLite, max_ideas: int = 10) -> PromptPair:
    system = dedent(
        f"""
        You are TrueBlazer's Idea Engine.

        Your job:
        Generate {max_ideas} aligned business ideas for a founder based on their passions, skills,
        constraints, and lifestyle vision. You prioritize founder-idea fit and realistic execution,
        not generic "billion dollar" fantasies.

        Return ideas that are:
        - Specific
        - Aligned with the founder's life and resources
        - Monetizable within 6-24 months
        """
    ).strip()

    user = _to_json(
        {
            "passions": sanitize_text(founder_profile.passions_text, 800),
            "skills": sanitize_text(founder_profile.skills_text, 800),
            "time_per_week": founder_profile.time_per_week,
            "capital_available": founder_profile.capital_available,
            "risk_tolerance": founder_profile.risk_tolerance,
            "lifestyle_goals": sanitize_text(founder_profile.lifestyle_goals, 400),
            "success_vision": sanitize_text(founder_profile.success_vision, 400),
            "max_ideas": max_ideas,
        }
    )
    return PromptPair(system=system, user=user)


def build_idea_vetting_prompt(founder_profile: FounderProfileLite, idea: IdeaLite) -> PromptPair:
    system = dedent(
        """
        You are TrueBlazer's Idea Vetting Engine.

        Your job:
        Analyze a single business idea for a specific founder. You assess founder-idea fit,
        market potential, monetization options, risks, and next steps. You are honest but constructive.
        """
    ).strip()

    user = _to_json(
        {
            "founder_profile": _founder_payload(founder_profile, text_budget=1000, vision_budget=600),
            "idea": {
                "id": idea.id,
                "title": sanitize_text(idea.title, TITLE_BUDGET),
                "summary": sanitize_text(idea.summary, SUMMARY_BUDGET),
                "tags": idea.tags or [],
            },
        }
    )
    return PromptPair(system=system, user=user)


def build_opportunity_score_prompt(
    idea: IdeaLite,
    founder_profile: FounderProfileLite,
    market_notes: Optional[str] = None,
) -> PromptPair:
    system = dedent(
        """
        You are TrueBlazer's Opportunity Scoring Engine.

        Your job:
        Score a single business idea from 0-100 and provide sub-scores for:
        - founder_fit
        - market_size
        - pain_intensity
        - competition
        - difficulty
        - tailwinds

        You return STRICT JSON with:
        {
          "total_score": number,
          "sub_scores": {
            "founder_fit": number,
            "market_size": number,
            "pain_intensity": number,
            "competition": number,
            "difficulty": number,
            "tailwinds": number
          },
          "reasoning": string
        }
        """
    ).strip()

    user = _to_json(
        {
            "idea": {
                "id": idea.id,
                "title": sanitize_text(idea.title, TITLE_BUDGET),
                "summary": sanitize_text(idea.summary, SUMMARY_BUDGET),
                "tags": idea.tags or [],
                "stage": idea.stage,
            },
            "founder_profile": _founder_payload(founder_profile, text_budget=800, vision_budget=600),
            "market_notes": sanitize_text(market_notes, MARKET_NOTES_BUDGET),
        }
    )
    return PromptPair(system=system, user=user)


def build_blueprint_generation_prompt(
    founder_profile: Optional[FounderProfileLite] = None,
    chosen_idea: Optional[IdeaLite] = None,
    idea_analysis: Optional[IdeaAnalysisPayload] = None,
) -> PromptPair:
    system = dedent(
        """
        You are TrueBlazer's Blueprint Generator.

        Your job:
        Create a complete Founder Blueprint object that captures both the founder's life context
        and their current North Star idea, including target audience, problem, promise, offer model,
        monetization strategy, distribution channels, traction definition, and quarterly focus.

        You MUST return strict JSON matching the FounderBlueprint structure (minus ids and timestamps).
        """
    ).strip()

    chosen = None
    if chosen_idea is not None:
        chosen = {
            "id": chosen_idea.id,
            "title": sanitize_text(chosen_idea.title, TITLE_BUDGET),
            "summary": sanitize_text(chosen_idea.summary, SUMMARY_BUDGET),
        }

    profile = None
    if founder_profile is not None:
        profile = _founder_payload(founder_profile, text_budget=1000, vision_budget=800)

    analysis = None
    if idea_analysis is not None:
        analysis = {
            field: sanitize_text(value, ANALYSIS_TEXT_BUDGET) if value is not None else None
            for field, value in idea_analysis.model_dump().items()
        }

    user = _to_json({"founder_profile": profile, "chosen_idea": chosen, "idea_analysis": analysis})
    return PromptPair(system=system, user=user)


# ---------------------------------------------------------------------------
# Context-assembly prompts
# ---------------------------------------------------------------------------

PROFILE_TEXT_BUDGET = 1000
VISION_BUDGET = 600
EVIDENCE_NOTES_BUDGET = 300

MASTER_PROMPT_SYSTEM = dedent(
    """
    You are TrueBlazer's Master Prompt architect.

    Using the founder profile, their chosen idea and its analysis, write one reusable
    master prompt the founder can paste into any AI assistant to get strategy help that
    already knows who they are, what they are building, and what constraints they face.

    Return STRICT JSON:
    {
      "master_prompt": string
    }
    """
).strip()

VALIDATION_ANALYSIS_SYSTEM = dedent(
    """
    You are Mavrik, a warm but financially grounded startup advisor. You analyze validation
    evidence and provide actionable synthesis.

    The 6 FVS dimensions (exact keys) are:
    - marketSize
    - unitEconomics
    - timeToRevenue
    - competitiveDensity
    - capitalRequirements
    - founderMarketFit

    Return ONLY valid JSON with this structure:
    {
      "pattern_summary": string,
      "advisor_note": string,
      "recommendation": "persist" | "pivot" | "double_down" | "pause",
      "recommendation_rationale": string,
      "fvs_delta": { "<dimension_key>": integer between -20 and +20 },
      "confidence_shift": "assumption_based" | "early_signal" | "partially_validated" | "evidence_backed"
    }

    Only include fvs_delta keys for dimensions with direct evidence. Positive deltas
    strengthen a dimension, negative deltas weaken it; magnitude reflects signal strength.
    """
).strip()


def build_master_prompt_context(
    profile: Dict[str, Any],
    idea: Dict[str, Any],
    analysis: Dict[str, Any],
) -> Dict[str, Any]:
    """Bounded slice of the stored rows that feeds the master prompt."""

    fit_scores = idea.get("fit_scores") or {
        key: idea[key] for key in IdeaFitScores.model_fields if idea.get(key) is not None
    }
    return {
        "profile": {
            "passions_text": sanitize_text(profile.get("passions_text"), PROFILE_TEXT_BUDGET),
            "passions_tags": profile.get("passions_tags") or [],
            "skills_text": sanitize_text(profile.get("skills_text"), PROFILE_TEXT_BUDGET),
            "skills_tags": profile.get("skills_tags") or [],
            "tech_level": profile.get("tech_level"),
            "time_per_week": profile.get("time_per_week"),
            "capital_available": profile.get("capital_available"),
            "risk_tolerance": profile.get("risk_tolerance"),
            "lifestyle_goals": sanitize_text(profile.get("lifestyle_goals"), VISION_BUDGET),
            "success_vision": sanitize_text(profile.get("success_vision"), VISION_BUDGET),
        },
        "chosen_idea": {
            "title": sanitize_text(idea.get("title"), TITLE_BUDGET),
            "description": sanitize_text(idea.get("description") or idea.get("summary"), SUMMARY_BUDGET),
            "business_model_type": idea.get("business_model_type"),
            "target_customer": sanitize_text(idea.get("target_customer"), VISION_BUDGET),
            "time_to_first_dollar": idea.get("time_to_first_dollar"),
            "complexity": idea.get("complexity"),
            "fit_scores": fit_scores,
        },
        "analysis": {
            "niche_score": analysis.get("niche_score"),
            "market_overview": sanitize_text(analysis.get("market_overview"), ANALYSIS_TEXT_BUDGET),
            "problem_intensity": _bounded(analysis.get("problem_intensity"), ANALYSIS_TEXT_BUDGET),
            "competition_snapshot": sanitize_text(analysis.get("competition_snapshot"), ANALYSIS_TEXT_BUDGET),
            "pricing_range": _bounded(analysis.get("pricing_range"), ANALYSIS_TEXT_BUDGET),
            "main_risks": _bounded(analysis.get("main_risks"), ANALYSIS_TEXT_BUDGET),
            "brutal_take": sanitize_text(analysis.get("brutal_take"), ANALYSIS_TEXT_BUDGET),
            "suggested_modifications": _bounded(analysis.get("suggested_modifications"), ANALYSIS_TEXT_BUDGET),
        },
    }


def build_master_prompt(context: Dict[str, Any]) -> PromptPair:
    user = "Generate a comprehensive Master Prompt based on the following data:\n\n" + json.dumps(
        context, indent=2, ensure_ascii=False, default=str
    )
    return PromptPair(system=MASTER_PROMPT_SYSTEM, user=user)


def _evidence_block(index: int, row: Dict[str, Any]) -> str:
    contradicts = row.get("contradicts_assumption")
    contradiction = f"YES - {row.get('assumption_reference') or ''}".strip() if contradicts else "No"
    return "\n".join(
        [
            f"Evidence {index}:",
            f"  Type: {row.get('evidence_type')}",
            f"  Dimension: {row.get('fvs_dimension')}",
            f"  Insight: {row.get('key_insight')}",
            f"  Sentiment: {row.get('sentiment')}",
            f"  Signal Strength: {row.get('signal_strength')}/5",
            f"  Contradicts Assumption: {contradiction}",
            f"  Raw Notes: {(row.get('raw_notes') or '')[:EVIDENCE_NOTES_BUDGET]}",
        ]
    )


def build_validation_analysis_prompt(
    venture: Dict[str, Any],
    session: Dict[str, Any],
    evidence_rows: List[Dict[str, Any]],
    dimensions: Optional[Dict[str, Any]],
    composite_score: Optional[float],
    tally: Tuple[int, int, int],
) -> PromptPair:
    """Summarize a validation session's evidence for the advisor analysis."""

    positive, negative, neutral = tally
    current = json.dumps(dimensions, indent=2, default=str) if dimensions else "No current FVS dimensions available"
    evidence = "\n\n".join(_evidence_block(index, row) for index, row in enumerate(evidence_rows, start=1))
    user = "\n".join(
        [
            f"VENTURE: {venture.get('name')}",
            f"HYPOTHESIS: {sanitize_text(session.get('hypothesis'), PROFILE_TEXT_BUDGET)}",
            "",
            "CURRENT FVS DIMENSIONS:",
            current,
            f"COMPOSITE SCORE: {composite_score if composite_score is not None else 'N/A'}",
            "",
            f"EVIDENCE SUMMARY ({len(evidence_rows)} entries):",
            f"Positive: {positive} | Negative: {negative} | Neutral/Mixed: {neutral}",
            "",
            evidence,
            "",
            "Analyze all evidence and generate the validation summary.",
        ]
    )
    return PromptPair(system=VALIDATION_ANALYSIS_SYSTEM, user=user)
