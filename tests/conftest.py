"""Shared fakes for semroute tests."""

import asyncio
from typing import Any

import pytest

from semroute.errors import EmbeddingFailure
from semroute.models import EmbeddingProvider, LLMProvider, LLMResponse, RouteDefinition


class FakeEmbedder(EmbeddingProvider):
    """Looks vectors up in a table; texts in ``fail_on`` raise EmbeddingFailure.

    ``delays`` maps a text to its own sleep time, overriding ``delay``.
    """

    def __init__(
        self,
        vectors: dict[str, list[float]],
        fail_on: tuple[str, ...] = (),
        delay: float = 0.0,
        delays: dict[str, float] | None = None,
    ):
        self.vectors = vectors
        self.fail_on = fail_on
        self.delay = delay
        self.delays = delays or {}
        self.completed: list[str] = []
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(text, self.delay)
            if delay:
                await asyncio.sleep(delay)
            if text in self.fail_on:
                raise EmbeddingFailure(f"cannot embed {text!r}")
            self.completed.append(text)
            return self.vectors[text]
        finally:
            self.in_flight -= 1


class FakeLLM(LLMProvider):
    """Echoes the model it was called with."""

    def __init__(self, error: bool = False):
        super().__init__()
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def chat(self, messages, model=None, max_tokens=4096, temperature=0.7, **kwargs) -> LLMResponse:
        self.calls.append({"messages": messages, "model": model, "temperature": temperature, **kwargs})
        if self.error:
            return LLMResponse(content="Error calling LLM: boom", finish_reason="error", model_used=model or "")
        return LLMResponse(content=f"answer from {model}", model_used=model or "")


@pytest.fixture
def vectors() -> dict[str, list[float]]:
    return {
        "what is 2 + 2": [1.0, 0.0, 0.0],
        "solve for x": [0.8, 0.6, 0.0],
        "who was napoleon": [0.0, 1.0, 0.0],
        "when did rome fall": [0.0, 0.6, 0.8],
    }


@pytest.fixture
def definitions() -> list[RouteDefinition]:
    return [
        RouteDefinition(
            name="math",
            description="Arithmetic and algebra",
            utterances=("what is 2 + 2", "solve for x"),
            score_threshold=0.5,
            handler_id="openai/gpt-4o-mini",
        ),
        RouteDefinition(
            name="history",
            description="Historical questions",
            utterances=("who was napoleon", "when did rome fall"),
            score_threshold=0.5,
            handler_id="gemini/gemini-1.5-flash",
        ),
    ]


@pytest.fixture
def embedder(vectors) -> FakeEmbedder:
    return FakeEmbedder(vectors)


@pytest.fixture
def make_embedder():
    return FakeEmbedder


@pytest.fixture
def make_llm():
    return FakeLLM
