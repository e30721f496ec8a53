from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.routes import get_invoker
from app.llm.router import ModelInvoker
from app.main import app


def make_step(n: int, **overrides: Any) -> dict:
    step = {
        "stepNumber": n,
        "title": f"Step {n}",
        "parentDo": f"Do thing {n}",
        "parentSay": f"Say thing {n}",
        "successCheck": f"Check {n}",
        "ifNotWorking": f"Fallback {n}",
        "timeBox": "2 minutes",
    }
    step.update(overrides)
    return step


def make_plan(**overrides: Any) -> dict:
    plan = {
        "planTitle": "Calm lunch reset",
        "likelyState": "Activated",
        "oneLineSummary": "Lower the stakes, offer two choices, hold the limit.",
        "safetyNote": "No immediate danger indicated.",
        "steps": [make_step(i) for i in range(1, 7)],
        "optionalAddOns": ["Visual timer", "Lunch picture menu"],
    }
    plan.update(overrides)
    return plan


def output_text_envelope(payload: Any) -> dict:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"id": "resp_1", "object": "response", "output_text": text}


def output_items_envelope(payload: Any) -> dict:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {
        "id": "resp_2",
        "object": "response",
        "output": [
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": text}],
            }
        ],
    }


class FakeUpstream:
    """Stands in for the OpenAI Responses API and records every request."""

    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        self.body = body if body is not None else output_text_envelope(make_plan())
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=self.body)

    def invoker(self, key: str = "sk-test") -> ModelInvoker:
        return ModelInvoker(key_reader=lambda: key, transport=httpx.MockTransport(self.handler))

    @property
    def sent(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def client_for() -> Callable[..., TestClient]:
    def _make(upstream: FakeUpstream, key: str = "sk-test") -> TestClient:
        app.dependency_overrides[get_invoker] = lambda: upstream.invoker(key)
        return TestClient(app, raise_server_exceptions=False)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def scenario_body() -> dict:
    return {
        "trigger": "They refused to eat lunch unless given candy",
        "goal": "Calm lunch transition",
        "intensity": 5,
        "childAge": 7,
    }
