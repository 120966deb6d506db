"""Generic scoring utilities shared by every TrueBlazer scorer.

All scoring math lives here so weights and thresholds behave the same across
the idea engine, the fit breakdown and the HTTP surface. Every helper is total:
malformed numbers degrade to a bounded value instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Literal

MIN_SCORE = 0.0
MAX_SCORE = 100.0

LOW_BAND_CEILING = 40
MEDIUM_BAND_CEILING = 70

ScoreBand = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class WeightedScoreInput:
    """A single 0-100 value paired with its relative weight."""

    value: float
    weight: float


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def clamp_score(score: float) -> float:
    """Clamp a score to the 0-100 range, mapping NaN to 0."""

    if not _is_number(score) or math.isnan(score):
        return MIN_SCORE
    if score < MIN_SCORE:
        return MIN_SCORE
    if score > MAX_SCORE:
        return MAX_SCORE
    return score


def normalize_score(raw: float, min_value: float, max_value: float) -> float:
    """Rescale *raw* from ``[min_value, max_value]`` onto 0-100.

    Returns 0 when the range is empty or inverted, or when any input is NaN.
    """

    if any(not _is_number(v) or math.isnan(v) for v in (raw, min_value, max_value)):
        return MIN_SCORE
    if max_value <= min_value:
        return MIN_SCORE
    normalized = ((raw - min_value) / (max_value - min_value)) * 100
    return clamp_score(normalized)


def weighted_average(inputs: Iterable[WeightedScoreInput]) -> float:
    """Return the renormalized weighted mean of 0-100 values.

    Entries with a non-finite value or a non-positive weight are ignored.
    Weights are relative and need not sum to 1.
    """

    valid = [
        item
        for item in inputs
        if _is_number(item.value)
        and _is_number(item.weight)
        and math.isfinite(item.value)
        and math.isfinite(item.weight)
        and item.weight > 0
    ]
    if not valid:
        return MIN_SCORE

    total_weight = sum(item.weight for item in valid)
    if total_weight == 0:
        return MIN_SCORE

    weighted_sum = sum(item.value * (item.weight / total_weight) for item in valid)
    return clamp_score(weighted_sum)


def categorize_score(score: float) -> ScoreBand:
    """Band a score into low / medium / high."""

    clamped = clamp_score(score)
    if clamped < LOW_BAND_CEILING:
        return "low"
    if clamped < MEDIUM_BAND_CEILING:
        return "medium"
    return "high"


def to_score(value: float | None, fallback: float = 0) -> float:
    """Convert an optional numeric into 0-100, substituting *fallback* when absent."""

    if value is None or not _is_number(value) or math.isnan(value):
        return clamp_score(fallback)
    return clamp_score(value)
