from __future__ import annotations

import json
from typing import Iterable, List

import pytest
from fastapi.testclient import TestClient

from vibe_check.app import create_app
from vibe_check.config import ExtractionPolicy, Settings
from vibe_check.store import InMemoryResultStore


MARKET_REPLY = json.dumps(
    {
        "exists": "mostly_exists",
        "saturation_score": 7,
        "competitors": [
            {"name": "Planta", "url": "https://getplanta.com", "strengths": ["reminders"], "weaknesses": ["paywall"]},
            {"name": "Greg", "url": "https://greg.app", "strengths": ["community"], "weaknesses": ["accuracy"]},
            {"name": "Vera", "url": "https://vera.app"},
            {"name": "Blossom", "url": "https://blossomplant.com"},
        ],
        "market_summary": "Crowded consumer niche.",
        "key_differentiators_needed": ["sensor integration"],
    }
)
TECHNICAL_REPLY = "```json\n" + json.dumps({"difficulty": "beginner", "difficulty_score": 3}) + "\n```"
OPPORTUNITY_REPLY = "Here you go: " + json.dumps({"opportunity_score": 5, "opportunity_grade": "B-"}) + " Hope it helps."
DEPLOYMENT_REPLY = json.dumps({"primary_recommendation": "mobile_cross_platform", "confidence_score": 8})
SENTIMENT_REPLY = json.dumps(
    {
        "overall_sentiment": "mixed",
        "insights": [{"type": "pain_point", "theme": "Subscriptions", "competitor": "Planta"}],
        "summary": "Users like reminders but dislike paywalls.",
    }
)

HAPPY_REPLIES = [MARKET_REPLY, TECHNICAL_REPLY, OPPORTUNITY_REPLY, DEPLOYMENT_REPLY, SENTIMENT_REPLY]


class ScriptedCompleter:
    """Completion client double that replays canned replies or raises errors."""

    def __init__(self, replies: Iterable[object]) -> None:
        self._replies = list(replies)
        self.instructions: List[str] = []

    def complete(self, instruction: str) -> str:
        self.instructions.append(instruction)
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def parse_sse(body: str) -> list[tuple[str, dict]]:
    """Split a ``text/event-stream`` body into ``(event, data)`` pairs."""

    events = []
    for frame in body.split("\n\n"):
        if not frame.strip():
            continue
        event = None
        data = None
        for line in frame.splitlines():
            if line.startswith("event: "):
                event = line[len("event: ") :]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: ") :])
        events.append((event, data))
    return events


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        perplexity_api_key="test-key",
        static_dir=str(tmp_path / "missing-public"),
        extraction_policy=ExtractionPolicy.SOFT,
    )


@pytest.fixture
def store() -> InMemoryResultStore:
    return InMemoryResultStore()


@pytest.fixture
def completer() -> ScriptedCompleter:
    return ScriptedCompleter(HAPPY_REPLIES)


@pytest.fixture
def client(settings: Settings, store: InMemoryResultStore, completer: ScriptedCompleter) -> TestClient:
    return TestClient(create_app(settings, store=store, client=completer))
