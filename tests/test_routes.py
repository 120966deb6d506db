from __future__ import annotations

import json

from fastapi.testclient import TestClient
import pytest


def _founder_lite() -> dict[str, object]:
    return {
        "passions_text": "fitness, cooking",
        "skills_text": "marketing",
        "time_per_week": 10,
        "capital_available": 1000,
        "risk_tolerance": "medium",
    }


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_score_idea_returns_breakdown_and_bands(client: TestClient) -> None:
    payload = {
        "idea": {
            "capital_required": 15000,
            "time_to_first_revenue_months": 5,
            "revenue_model": "monthly subscription",
        },
        "founder": {},
    }

    response = client.post("/ideas/score", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["breakdown"]["economics"] == pytest.approx(70)
    assert data["bands"]["economics"] == "high"
    assert set(data["breakdown"]) == {"founder_fit", "constraints_fit", "market_fit", "economics", "overall"}


def test_score_idea_degrades_on_unrecognized_founder_values(client: TestClient) -> None:
    payload = {
        "idea": {"time_to_first_revenue_months": 5, "risk_level": "HIGH"},
        "founder": {"urgency_vs_upside": 9, "risk_tolerance": "Aggressive", "skill_spikes": {"sales_persuasion": 7}},
    }

    response = client.post("/ideas/score", json=payload)

    assert response.status_code == 200
    # time 100, capital 100, risk 75 (unknown founder risk is medium), runway 70
    assert response.json()["breakdown"]["constraints_fit"] == pytest.approx(89.25)


@pytest.mark.parametrize(("difficulty", "expected"), [("Easy", 90), (" HARD ", 30), ("extreme", 60)])
def test_score_v6_idea_normalizes_difficulty(client: TestClient, difficulty: str, expected: float) -> None:
    response = client.post("/ideas/score-v6", json={"idea": {"difficulty": difficulty}, "founder": {}})

    assert response.status_code == 200
    assert response.json()["breakdown"]["constraints_fit"] == pytest.approx(expected)


def test_score_v6_idea(client: TestClient) -> None:
    payload = {"idea": {"difficulty": "hard"}, "founder": {}}

    response = client.post("/ideas/score-v6", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["breakdown"]["constraints_fit"] == pytest.approx(30)
    assert data["bands"]["constraints_fit"] == "low"


def test_rank_endpoint_fills_fit_scores(client: TestClient) -> None:
    payload = {
        "ideas": [
            {"id": "1", "title": "Cooking classes online", "opportunity_score": 50},
            {"id": "2", "title": "Tax filing bot", "opportunity_score": 60},
        ],
        "sort_by": "fit",
        "founder_profile": _founder_lite(),
    }

    response = client.post("/ideas/rank", json=payload)

    assert response.status_code == 200
    ranked = response.json()
    assert [idea["id"] for idea in ranked] == ["1", "2"]
    assert all(idea["founder_fit_score"] is not None for idea in ranked)


def test_filter_endpoint(client: TestClient) -> None:
    payload = {
        "ideas": [
            {"id": "1", "title": "x", "opportunity_score": 65},
            {"id": "2", "title": "y", "opportunity_score": 80},
        ],
        "filters": {"min_opportunity_score": 70},
    }

    response = client.post("/ideas/filter", json=payload)

    assert response.status_code == 200
    assert [idea["id"] for idea in response.json()] == ["2"]


def test_validate_endpoint_reports_errors_with_200(client: TestClient) -> None:
    response = client.post("/ideas/validate", json={"title": "", "summary": "x" * 6000})

    assert response.status_code == 200
    assert response.json() == {
        "valid": False,
        "errors": ["Title is required.", "Summary is too long (max 5000 characters)."],
    }


def test_idea_generation_prompt_endpoint(client: TestClient) -> None:
    response = client.post("/prompts/idea-generation", json={"founder_profile": _founder_lite(), "max_ideas": 3})

    assert response.status_code == 200
    data = response.json()
    assert "Generate 3 aligned business ideas" in data["system"]
    assert json.loads(data["user"])["max_ideas"] == 3


def test_idea_vetting_prompt_endpoint(client: TestClient) -> None:
    payload = {"founder_profile": _founder_lite(), "idea": {"id": "1", "title": "Cooking classes"}}

    response = client.post("/prompts/idea-vetting", json=payload)

    assert response.status_code == 200
    assert json.loads(response.json()["user"])["idea"]["title"] == "Cooking classes"


def test_opportunity_score_prompt_endpoint(client: TestClient) -> None:
    payload = {
        "founder_profile": _founder_lite(),
        "idea": {"id": "1", "title": "Cooking classes", "stage": "idea"},
        "market_notes": "Growing niche",
    }

    response = client.post("/prompts/opportunity-score", json=payload)

    assert response.status_code == 200
    assert json.loads(response.json()["user"])["market_notes"] == "Growing niche"


def test_blueprint_prompt_endpoint_without_idea(client: TestClient) -> None:
    response = client.post("/prompts/blueprint", json={"founder_profile": _founder_lite()})

    assert response.status_code == 200
    assert json.loads(response.json()["user"])["chosen_idea"] is None
