# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides settings without .env, sample analyses, a fixed clock and mock
LLM clients. No external dependencies — all model I/O is mocked.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from narragraph.config.settings import Settings
from narragraph.core.models import DiagramAnalysis, DiagramEdge, DiagramNode
from narragraph.llm.base_client import BaseLLMClient
from narragraph.llm.models import LLMResponse

SEQUENTIAL_TEXT = "First, collect user input. Then, validate it. Finally, store the result."


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# === FIXTURES: Settings ===


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# === FIXTURES: Sample data ===


@pytest.fixture
def flow_analysis() -> DiagramAnalysis:
    """Three-step flow with a chain of edges."""
    return DiagramAnalysis(
        type="flow",
        confidence=0.9,
        nodes=[
            DiagramNode(id="a", label="Collect user input"),
            DiagramNode(id="b", label="Validate it"),
            DiagramNode(id="c", label="Store the result"),
        ],
        edges=[DiagramEdge(from_="a", to="b"), DiagramEdge(from_="b", to="c")],
        reasoning="sample",
        source="model",
    )


def make_analysis(diagram_type: str, count: int, chain: bool = True) -> DiagramAnalysis:
    """Analysis with ``count`` nodes n1..nN, optionally chained."""
    ids = [f"n{i + 1}" for i in range(count)]
    edges = [DiagramEdge(from_=a, to=b) for a, b in zip(ids, ids[1:])] if chain else []
    return DiagramAnalysis(
        type=diagram_type,
        confidence=0.8,
        nodes=[DiagramNode(id=nid, label=f"Step {nid} label") for nid in ids],
        edges=edges,
    )


# === FIXTURES: Mock LLM ===


def model_payload(**overrides: object) -> str:
    """JSON body shaped like a model reply."""
    payload: dict[str, object] = {
        "title": "Input handling",
        "type": "flowchart",
        "nodes": [
            {"id": "1", "label": "Collect input"},
            {"id": "2", "label": "Validate"},
            {"id": "3", "label": "Store"},
        ],
        "edges": [{"from": "1", "to": "2"}, {"from": "2", "to": "3"}],
    }
    payload.update(overrides)
    return json.dumps(payload)


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock LLM response carrying a valid diagram payload."""
    return LLMResponse(
        content=model_payload(),
        input_tokens=100,
        output_tokens=50,
        model="gemini-2.5-flash",
        provider="google",
        latency_ms=500,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock(spec=BaseLLMClient)
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "mock"
    client.model_name = "mock-model"
    return client
