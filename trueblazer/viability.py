"""Validation evidence tallies and financial viability score (FVS) adjustments.

These helpers turn a validation-session analysis returned by the LLM into
bounded, well-formed values before anything is persisted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Tuple

FVS_WEIGHTS: Dict[str, float] = {
    "marketSize": 0.20,
    "unitEconomics": 0.25,
    "timeToRevenue": 0.15,
    "competitiveDensity": 0.15,
    "capitalRequirements": 0.15,
    "founderMarketFit": 0.10,
}
DEFAULT_FVS_WEIGHT = 0.15
DEFAULT_DIMENSION_SCORE = 50
MAX_FVS_DELTA = 20

VALID_RECOMMENDATIONS = ("persist", "pivot", "double_down", "pause")
DEFAULT_RECOMMENDATION = "persist"
VALID_CONFIDENCE_SHIFTS = ("assumption_based", "early_signal", "partially_validated", "evidence_backed")
DEFAULT_CONFIDENCE_SHIFT = "early_signal"


@dataclass(frozen=True)
class SentimentTally:
    positive: int = 0
    negative: int = 0
    neutral: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.negative + self.neutral


@dataclass(frozen=True)
class ValidationAnalysis:
    """LLM analysis of a validation session after cleaning."""

    pattern_summary: str
    advisor_note: str
    recommendation: str
    recommendation_rationale: str
    fvs_delta: Dict[str, int]
    confidence_shift: str

    @property
    def recommendation_text(self) -> str:
        return f"{self.recommendation}: {self.recommendation_rationale}".strip()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def tally_sentiments(evidence_rows: Iterable[Mapping[str, Any]]) -> SentimentTally:
    """Count evidence by sentiment; anything not positive or negative is neutral."""

    positive = negative = neutral = 0
    for row in evidence_rows:
        sentiment = row.get("sentiment")
        if sentiment == "positive":
            positive += 1
        elif sentiment == "negative":
            negative += 1
        else:
            neutral += 1
    return SentimentTally(positive=positive, negative=negative, neutral=neutral)


def clean_fvs_delta(raw_delta: Any) -> Dict[str, int]:
    """Keep known dimensions with finite numeric deltas, rounded and clamped to +/-20."""

    if not isinstance(raw_delta, Mapping):
        return {}
    cleaned: Dict[str, int] = {}
    for key, value in raw_delta.items():
        if key not in FVS_WEIGHTS:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            continue
        cleaned[key] = int(_clamp(round_half_up(value), -MAX_FVS_DELTA, MAX_FVS_DELTA))
    return cleaned


def normalize_analysis(parsed: Mapping[str, Any]) -> ValidationAnalysis:
    recommendation = parsed.get("recommendation")
    if recommendation not in VALID_RECOMMENDATIONS:
        recommendation = DEFAULT_RECOMMENDATION
    confidence_shift = parsed.get("confidence_shift")
    if confidence_shift not in VALID_CONFIDENCE_SHIFTS:
        confidence_shift = DEFAULT_CONFIDENCE_SHIFT

    return ValidationAnalysis(
        pattern_summary=str(parsed.get("pattern_summary") or ""),
        advisor_note=str(parsed.get("advisor_note") or ""),
        recommendation=recommendation,
        recommendation_rationale=str(parsed.get("recommendation_rationale") or ""),
        fvs_delta=clean_fvs_delta(parsed.get("fvs_delta")),
        confidence_shift=confidence_shift,
    )


def apply_fvs_delta(
    dimensions: Mapping[str, Any],
    composite_score: float | None,
    delta: Mapping[str, int],
    evidence_count: int,
) -> Tuple[Dict[str, Any], int]:
    """Return updated dimensions and composite score after applying *delta*.

    Only dimensions already present on the score are touched. The composite
    shifts by each applied delta times its dimension weight.
    """

    updated = {key: dict(value) if isinstance(value, Mapping) else value for key, value in dimensions.items()}
    composite_shift = 0.0

    for dimension, change in delta.items():
        current = updated.get(dimension)
        if not current or not isinstance(current, dict):
            continue
        old_score = current.get("score") or DEFAULT_DIMENSION_SCORE
        sign = "+" if change > 0 else ""
        current["score"] = _clamp(old_score + change, 0, 100)
        current["rationale"] = (
            f"{current.get('rationale') or ''}"
            f" [Validation update: {sign}{change} based on {evidence_count} evidence entries]"
        )
        composite_shift += change * FVS_WEIGHTS.get(dimension, DEFAULT_FVS_WEIGHT)

    new_composite = int(_clamp(round_half_up((composite_score or 0) + composite_shift), 0, 100))
    return updated, new_composite
