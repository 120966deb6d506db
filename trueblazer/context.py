"""Context-assembly handlers: fetch rows, compile a prompt, call the gateway, persist.

Every handler follows the same order. Independent rows are fetched
concurrently, compilation starts only after every fetch has returned, the
single gateway call follows compilation, and persistence comes last.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import ContextNotFoundError, GatewayNotConfiguredError, GatewayResponseError, StoreError
from .idea_engine import rank_ideas
from .llm import CompletionOptions, GatewayClient, parse_structured_response
from .prompts import (
    PromptPair,
    build_blueprint_generation_prompt,
    build_master_prompt,
    build_master_prompt_context,
    build_validation_analysis_prompt,
)
from .schemas import (
    FounderProfileLite,
    IdeaAnalysisPayload,
    IdeaLite,
    IdeaRecord,
    IdeaStatus,
    SortBy,
)
from .store import Row, RowStore
from .viability import apply_fvs_delta, normalize_analysis, tally_sentiments

logger = logging.getLogger(__name__)

MASTER_PROMPT_PLATFORM = "general_strategy"

MASTER_PROMPT_OPTIONS = CompletionOptions(temperature=0.7, max_tokens=3000)
BLUEPRINT_OPTIONS = CompletionOptions(temperature=0.6, max_tokens=2500)
VALIDATION_OPTIONS = CompletionOptions(temperature=0.3, max_tokens=1500)


def _log(step: str, **details: Any) -> None:
    logger.info(step, extra={"extra_data": details})


def compute_source_hash(payload: Any) -> str:
    """Stable sha256 of the compiled context, used to detect stale outputs."""

    canonical = json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _require_gateway(gateway: Optional[GatewayClient]) -> GatewayClient:
    if gateway is None:
        logger.error("AI gateway not configured")
        raise GatewayNotConfiguredError()
    return gateway


async def _call_gateway(gateway: GatewayClient, prompt: PromptPair, options: CompletionOptions) -> Dict[str, Any]:
    raw = await asyncio.to_thread(gateway.complete, prompt, options)
    _log("Gateway response received", content_length=len(raw))
    parsed = parse_structured_response(raw)
    if parsed is None:
        logger.error("Failed to parse gateway response as JSON")
        raise GatewayResponseError("Failed to parse AI response")
    return parsed


# ---------------------------------------------------------------------------
# Row fetching
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChosenIdeaContext:
    """Rows describing the founder and the idea they are pursuing."""

    profile: Row
    idea: Row
    analysis: Optional[Row]


def _profile_filters(user_id: str) -> Dict[str, Any]:
    return {"user_id": user_id}


def _chosen_idea_filters(user_id: str) -> Dict[str, Any]:
    return {"user_id": user_id, "status": IdeaStatus.CHOSEN.value}


async def load_chosen_idea_context(store: RowStore, user_id: str, *, require_analysis: bool) -> ChosenIdeaContext:
    """Fetch the founder profile, chosen idea and its analysis for *user_id*."""

    idea, profile = await asyncio.gather(
        asyncio.to_thread(store.select_one, "ideas", _chosen_idea_filters(user_id)),
        asyncio.to_thread(store.select_one, "founder_profiles", _profile_filters(user_id)),
    )
    if not idea:
        raise ContextNotFoundError("No chosen idea found. Please select an idea first.")
    if not profile:
        raise ContextNotFoundError("No founder profile found")

    analysis = await asyncio.to_thread(
        store.select_one, "idea_analysis", {"idea_id": idea["id"], "user_id": user_id}
    )
    if not analysis and require_analysis:
        raise ContextNotFoundError("No analysis found for this idea. Please analyze the idea first.")

    _log("Context fetched", user_id=user_id, idea_id=idea["id"], has_analysis=bool(analysis))
    return ChosenIdeaContext(profile=profile, idea=idea, analysis=analysis)


async def load_ranked_ideas(store: RowStore, user_id: str, sort_by: SortBy = SortBy.OPPORTUNITY) -> List[IdeaLite]:
    """Rank the caller's non-archived ideas, filling in fit scores from their profile."""

    idea_rows, profile_row = await asyncio.gather(
        asyncio.to_thread(store.select, "ideas", {"user_id": user_id}, order_by="created_at", descending=True),
        asyncio.to_thread(store.select_one, "founder_profiles", _profile_filters(user_id)),
    )
    records = [IdeaRecord.model_validate(row) for row in idea_rows]
    ideas = [record.to_lite() for record in records if record.status is not IdeaStatus.ARCHIVED]
    profile = FounderProfileLite.model_validate(profile_row) if profile_row else None
    _log("Ideas fetched", user_id=user_id, count=len(ideas), has_profile=profile is not None)
    return rank_ideas(ideas, sort_by=sort_by, founder_profile=profile)


# ---------------------------------------------------------------------------
# Master prompt
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MasterPromptResult:
    idea_id: str
    platform_target: str
    prompt_body: str
    source_hash: str
    cached: bool = False
    stale: bool = False


def _latest_row(store: RowStore, table: str, idea_id: str, user_id: str) -> Optional[Row]:
    return store.select_one(
        table, {"idea_id": idea_id, "user_id": user_id}, order_by="created_at", descending=True
    )


async def get_master_prompt_status(store: RowStore, user_id: str) -> MasterPromptResult:
    """Return the stored master prompt and whether the current context has drifted from it."""

    context = await load_chosen_idea_context(store, user_id, require_analysis=True)
    source_hash = compute_source_hash(build_master_prompt_context(context.profile, context.idea, context.analysis))
    stored = await asyncio.to_thread(_latest_row, store, "master_prompts", context.idea["id"], user_id)
    if not stored:
        raise ContextNotFoundError("No master prompt generated yet")
    return MasterPromptResult(
        idea_id=context.idea["id"],
        platform_target=stored.get("platform_target") or MASTER_PROMPT_PLATFORM,
        prompt_body=stored.get("prompt_body") or "",
        source_hash=stored.get("source_hash") or "",
        cached=True,
        stale=stored.get("source_hash") != source_hash,
    )


async def generate_master_prompt(
    store: RowStore,
    gateway: Optional[GatewayClient],
    user_id: str,
    *,
    force: bool = False,
) -> MasterPromptResult:
    """Compile the founder's context into a reusable master prompt."""

    _log("Generating master prompt", user_id=user_id, force=force)
    context = await load_chosen_idea_context(store, user_id, require_analysis=True)
    idea_id = context.idea["id"]

    compiled = build_master_prompt_context(context.profile, context.idea, context.analysis)
    source_hash = compute_source_hash(compiled)

    if not force:
        stored = await asyncio.to_thread(_latest_row, store, "master_prompts", idea_id, user_id)
        if stored and stored.get("source_hash") == source_hash:
            _log("Master prompt up to date", idea_id=idea_id)
            return MasterPromptResult(
                idea_id=idea_id,
                platform_target=stored.get("platform_target") or MASTER_PROMPT_PLATFORM,
                prompt_body=stored.get("prompt_body") or "",
                source_hash=source_hash,
                cached=True,
            )

    parsed = await _call_gateway(_require_gateway(gateway), build_master_prompt(compiled), MASTER_PROMPT_OPTIONS)
    prompt_body = parsed.get("master_prompt")
    if not isinstance(prompt_body, str) or not prompt_body.strip():
        logger.error("No master_prompt field in gateway response")
        raise GatewayResponseError("Invalid AI response format")

    await asyncio.to_thread(
        store.insert,
        "master_prompts",
        {
            "user_id": user_id,
            "idea_id": idea_id,
            "platform_target": MASTER_PROMPT_PLATFORM,
            "prompt_body": prompt_body,
            "source_hash": source_hash,
        },
    )
    _log("Master prompt generated", idea_id=idea_id)
    return MasterPromptResult(
        idea_id=idea_id,
        platform_target=MASTER_PROMPT_PLATFORM,
        prompt_body=prompt_body,
        source_hash=source_hash,
    )


# ---------------------------------------------------------------------------
# Blueprint
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BlueprintResult:
    idea_id: Optional[str]
    blueprint: Dict[str, Any]
    source_hash: str
    cached: bool = False


async def _load_blueprint_inputs(store: RowStore, user_id: str) -> Tuple[Optional[Row], Optional[Row], Optional[Row]]:
    """Profile, chosen idea and analysis rows; any of them may be missing."""

    idea, profile = await asyncio.gather(
        asyncio.to_thread(store.select_one, "ideas", _chosen_idea_filters(user_id)),
        asyncio.to_thread(store.select_one, "founder_profiles", _profile_filters(user_id)),
    )
    analysis = None
    if idea:
        analysis = await asyncio.to_thread(
            store.select_one, "idea_analysis", {"idea_id": idea["id"], "user_id": user_id}
        )
    _log(
        "Context fetched",
        user_id=user_id,
        has_profile=bool(profile),
        has_idea=bool(idea),
        has_analysis=bool(analysis),
    )
    return profile, idea, analysis


async def generate_blueprint(
    store: RowStore,
    gateway: Optional[GatewayClient],
    user_id: str,
    *,
    force: bool = False,
) -> BlueprintResult:
    """Draft a founder blueprint from whatever profile, chosen idea and analysis exist."""

    _log("Generating blueprint", user_id=user_id, force=force)
    profile, idea, analysis = await _load_blueprint_inputs(store, user_id)
    idea_id = idea["id"] if idea else None

    prompt = build_blueprint_generation_prompt(
        FounderProfileLite.model_validate(profile) if profile else None,
        IdeaRecord.model_validate(idea).to_lite() if idea else None,
        IdeaAnalysisPayload.from_analysis_row(analysis) if analysis else None,
    )
    source_hash = compute_source_hash({"system": prompt.system, "user": prompt.user})

    if not force:
        stored = await asyncio.to_thread(
            store.select_one,
            "founder_blueprints",
            {"user_id": user_id},
            order_by="created_at",
            descending=True,
        )
        if stored and stored.get("source_hash") == source_hash:
            _log("Blueprint up to date", idea_id=idea_id)
            return BlueprintResult(
                idea_id=idea_id, blueprint=stored.get("blueprint") or {}, source_hash=source_hash, cached=True
            )

    blueprint = await _call_gateway(_require_gateway(gateway), prompt, BLUEPRINT_OPTIONS)
    await asyncio.to_thread(
        store.insert,
        "founder_blueprints",
        {"user_id": user_id, "idea_id": idea_id, "blueprint": blueprint, "source_hash": source_hash},
    )
    _log("Blueprint generated", idea_id=idea_id, sections=len(blueprint))
    return BlueprintResult(idea_id=idea_id, blueprint=blueprint, source_hash=source_hash)


# ---------------------------------------------------------------------------
# Validation session analysis
# ---------------------------------------------------------------------------


async def analyze_validation_session(
    store: RowStore,
    gateway: Optional[GatewayClient],
    user_id: str,
    session_id: str,
    venture_id: str,
) -> Row:
    """Synthesize a validation session's evidence and nudge the venture's FVS."""

    evidence_rows, session, fvs, venture = await asyncio.gather(
        asyncio.to_thread(
            store.select,
            "validation_evidence",
            {"session_id": session_id, "user_id": user_id},
            order_by="created_at",
        ),
        asyncio.to_thread(store.select_one, "validation_sessions", {"id": session_id, "user_id": user_id}),
        asyncio.to_thread(
            store.select_one,
            "financial_viability_scores",
            {"user_id": user_id},
            order_by="created_at",
            descending=True,
        ),
        asyncio.to_thread(store.select_one, "ventures", {"id": venture_id, "user_id": user_id}),
    )
    if not session:
        raise ContextNotFoundError("Validation session not found")
    if not venture:
        raise ContextNotFoundError("Venture not found")

    tally = tally_sentiments(evidence_rows)
    _log("Context fetched", evidence_count=len(evidence_rows), has_fvs=bool(fvs))

    prompt = build_validation_analysis_prompt(
        venture,
        session,
        evidence_rows,
        (fvs or {}).get("dimensions"),
        (fvs or {}).get("composite_score"),
        (tally.positive, tally.negative, tally.neutral),
    )
    parsed = await _call_gateway(_require_gateway(gateway), prompt, VALIDATION_OPTIONS)
    analysis = normalize_analysis(parsed)
    _log(
        "AI parsed",
        recommendation=analysis.recommendation,
        confidence=analysis.confidence_shift,
        delta_keys=list(analysis.fvs_delta),
    )

    summary = await asyncio.to_thread(
        store.insert,
        "validation_summaries",
        {
            "session_id": session_id,
            "venture_id": venture_id,
            "user_id": user_id,
            "total_evidence_count": len(evidence_rows),
            "positive_count": tally.positive,
            "negative_count": tally.negative,
            "neutral_count": tally.neutral,
            "pattern_summary": analysis.pattern_summary,
            "advisor_note": analysis.advisor_note,
            "recommendation": analysis.recommendation_text,
            "fvs_delta": analysis.fvs_delta,
            "confidence_shift": analysis.confidence_shift,
        },
    )
    _log("Summary inserted", summary_id=summary.get("id"))

    if fvs and analysis.fvs_delta:
        dimensions, composite = apply_fvs_delta(
            fvs.get("dimensions") or {},
            fvs.get("composite_score"),
            analysis.fvs_delta,
            len(evidence_rows),
        )
        try:
            await asyncio.to_thread(
                store.update,
                "financial_viability_scores",
                {"id": fvs["id"]},
                {"dimensions": dimensions, "composite_score": composite},
            )
        except StoreError:
            logger.warning("FVS update failed (non-fatal)", exc_info=True)
        else:
            _log("FVS updated", composite_score=composite, delta=analysis.fvs_delta)

    return summary
