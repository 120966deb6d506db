"""Shared fixtures: a seeded in-memory store and a scripted gateway."""

from __future__ import annotations

import json
from typing import Any, Callable, List

import pytest
from fastapi.testclient import TestClient

from trueblazer.app import create_app
from trueblazer.llm import CompletionOptions
from trueblazer.prompts import PromptPair
from trueblazer.store import InMemoryRowStore

USER_ID = "user-1"
TOKEN = "token-1"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


class FakeGateway:
    """Stands in for ``GatewayClient``; replies with whatever the test scripts."""

    model = "fake-model"

    def __init__(self) -> None:
        self.calls: List[PromptPair] = []
        self.reply: Callable[[PromptPair], str] = lambda prompt: json.dumps({"master_prompt": "Act as my cofounder."})

    def respond_with(self, payload: Any) -> None:
        text = payload if isinstance(payload, str) else json.dumps(payload)
        self.reply = lambda prompt: text

    def fail_with(self, exc: Exception) -> None:
        def _raise(prompt: PromptPair) -> str:
            raise exc

        self.reply = _raise

    def complete(self, prompt: PromptPair, options: CompletionOptions | None = None) -> str:
        self.calls.append(prompt)
        return self.reply(prompt)


@pytest.fixture
def store() -> InMemoryRowStore:
    store = InMemoryRowStore()
    store.register_session(TOKEN, USER_ID)
    store.insert(
        "founder_profiles",
        {
            "user_id": USER_ID,
            "passions_text": "fitness, cooking",
            "skills_text": "marketing; video editing",
            "time_per_week": 15,
            "capital_available": 2000,
            "risk_tolerance": "medium",
            "lifestyle_goals": "Work from anywhere",
            "success_vision": "Ten thousand a month in profit",
        },
    )
    store.insert(
        "ideas",
        {
            "id": "idea-chosen",
            "user_id": USER_ID,
            "title": "Meal prep coaching for new parents",
            "description": "Weekly cooking plans with video walkthroughs.",
            "status": "chosen",
            "opportunity_score": 72,
            "created_at": "2025-03-01T10:00:00+00:00",
        },
    )
    store.insert(
        "ideas",
        {
            "id": "idea-candidate",
            "user_id": USER_ID,
            "title": "Bookkeeping templates",
            "summary": "Spreadsheet templates for freelancers.",
            "status": "candidate",
            "opportunity_score": 85,
            "created_at": "2025-04-01T10:00:00+00:00",
        },
    )
    store.insert(
        "ideas",
        {
            "id": "idea-archived",
            "user_id": USER_ID,
            "title": "Crypto newsletter",
            "status": "archived",
            "opportunity_score": 99,
        },
    )
    store.insert(
        "idea_analysis",
        {
            "idea_id": "idea-chosen",
            "user_id": USER_ID,
            "niche_score": 7,
            "market_overview": "Busy parents spend heavily on convenience.",
            "ideal_customer_profile": "New parents",
            "problem_intensity": "High: no time to plan meals",
            "elevator_pitch": "Weekly meal plans with shopping lists.",
            "pricing_power": "Subscription at 29 a month",
            "market_insight": "Parent Facebook groups",
            "main_risks": ["Churn after the first month"],
        },
    )
    return store


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(store: InMemoryRowStore, gateway: FakeGateway) -> TestClient:
    return TestClient(create_app(store=store, gateway=gateway))
