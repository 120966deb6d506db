import math

import pytest

from trueblazer.scoring import (
    WeightedScoreInput,
    categorize_score,
    clamp_score,
    normalize_score,
    to_score,
    weighted_average,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(-5, 0), (0, 0), (42.5, 42.5), (100, 100), (150, 100), (math.nan, 0)],
)
def test_clamp_score(raw: float, expected: float) -> None:
    assert clamp_score(raw) == expected


@pytest.mark.parametrize("raw", [-1e9, -0.1, 33.3, 99.99, 1e9, math.nan])
def test_clamp_score_is_idempotent(raw: float) -> None:
    once = clamp_score(raw)
    assert clamp_score(once) == once
    assert 0 <= once <= 100


def test_normalize_score() -> None:
    assert normalize_score(5, 0, 10) == 50
    assert normalize_score(20, 0, 10) == 100
    assert normalize_score(-3, 0, 10) == 0
    assert normalize_score(5, 5, 5) == 0
    assert normalize_score(5, 10, 0) == 0
    assert normalize_score(math.nan, 0, 10) == 0


def test_weighted_average_blends_sub_scores() -> None:
    inputs = [
        WeightedScoreInput(value=80, weight=0.35),
        WeightedScoreInput(value=70, weight=0.35),
        WeightedScoreInput(value=100, weight=0.15),
        WeightedScoreInput(value=50, weight=0.15),
    ]

    assert weighted_average(inputs) == pytest.approx(75)


def test_weighted_average_renormalizes_weights() -> None:
    inputs = [WeightedScoreInput(value=100, weight=2), WeightedScoreInput(value=50, weight=2)]

    assert weighted_average(inputs) == pytest.approx(75)


def test_weighted_average_ignores_invalid_entries() -> None:
    inputs = [
        WeightedScoreInput(value=math.nan, weight=1),
        WeightedScoreInput(value=10, weight=0),
        WeightedScoreInput(value=10, weight=-1),
        WeightedScoreInput(value=80, weight=1),
    ]

    assert weighted_average(inputs) == pytest.approx(80)


def test_weighted_average_without_usable_inputs_is_zero() -> None:
    assert weighted_average([]) == 0
    assert weighted_average([WeightedScoreInput(value=90, weight=0)]) == 0


@pytest.mark.parametrize(
    ("score", "band"),
    [(0, "low"), (39.9, "low"), (40, "medium"), (69.9, "medium"), (70, "high"), (150, "high"), (math.nan, "low")],
)
def test_categorize_score(score: float, band: str) -> None:
    assert categorize_score(score) == band


def test_to_score() -> None:
    assert to_score(None) == 0
    assert to_score(None, 50) == 50
    assert to_score(math.nan, 40) == 40
    assert to_score(120) == 100
    assert to_score(None, 150) == 100
    assert to_score(64.5) == 64.5
