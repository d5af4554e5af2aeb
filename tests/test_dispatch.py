"""Tests for routing a request through to its handler."""

import asyncio

import pytest

from semroute import (
    DispatchError,
    HandlerRegistry,
    RouteDefinition,
    SemanticRouter,
    build_route_store,
    route_and_generate,
)
from semroute.dispatch import build_messages, text_for_routing


@pytest.fixture
def llms(make_llm):
    return {"openai/gpt-4o-mini": make_llm(), "gemini/gemini-1.5-flash": make_llm()}


@pytest.fixture
def router(definitions, embedder, llms):
    store = asyncio.run(build_route_store(definitions, embedder))
    handlers = HandlerRegistry()
    for handler_id, llm in llms.items():
        handlers.register(handler_id, llm)
    return SemanticRouter(store, embedder, handlers)


def test_text_for_routing_picks_first_text():
    parts = [{"inline_data": "..."}, {"text": ""}, {"text": "Hello"}, {"text": "second"}]
    assert text_for_routing(parts) == "Hello"


def test_text_for_routing_requires_text():
    with pytest.raises(DispatchError, match="No text found"):
        text_for_routing([{"inline_data": "..."}])
    with pytest.raises(DispatchError):
        text_for_routing([])


def test_build_messages_text_only():
    assert build_messages([{"text": "a"}, {"text": "b"}], "a") == [{"role": "user", "content": "a\nb"}]
    assert build_messages([], "fallback") == [{"role": "user", "content": "fallback"}]


def test_build_messages_mixed_parts():
    image = {"type": "image_url", "image_url": {"url": "data:image/png;base64,xx"}}
    messages = build_messages([{"text": "what is this"}, image], "what is this")
    assert messages == [{"role": "user", "content": [{"type": "text", "text": "what is this"}, image]}]


def test_route_and_generate_calls_selected_handler(router, llms):
    result = asyncio.run(route_and_generate(router, [{"text": "who was napoleon"}], temperature=0.0))

    assert result.route_name == "history"
    assert result.content == "answer from gemini/gemini-1.5-flash"
    assert result.score == pytest.approx(1.0)
    assert not result.fallback
    assert result.latency_ms >= 0
    assert result.model_used == "gemini/gemini-1.5-flash"

    call = llms["gemini/gemini-1.5-flash"].calls[0]
    assert call["model"] == "gemini/gemini-1.5-flash"
    assert call["messages"] == [{"role": "user", "content": "who was napoleon"}]
    assert call["temperature"] == 0.0
    assert llms["openai/gpt-4o-mini"].calls == []


def test_route_and_generate_fallback(router, vectors, llms):
    vectors["hello"] = [0.0, 0.0, -1.0]
    result = asyncio.run(route_and_generate(router, [{"text": "hello"}]))
    assert result.route_name == "math"
    assert result.fallback
    assert result.score == 0.0
    assert len(llms["openai/gpt-4o-mini"].calls) == 1


def test_route_and_generate_error_response(definitions, embedder, make_llm):
    store = asyncio.run(build_route_store(definitions, embedder))
    handlers = HandlerRegistry(factory=lambda handler_id: make_llm(error=True))
    router = SemanticRouter(store, embedder, handlers)

    result = asyncio.run(route_and_generate(router, [{"text": "what is 2 + 2"}]))
    assert result.finish_reason == "error"
    assert result.content.startswith("Error calling LLM:")


def test_route_and_generate_unknown_handler(definitions, embedder):
    store = asyncio.run(build_route_store(definitions, embedder))
    router = SemanticRouter(store, embedder)
    with pytest.raises(DispatchError, match="No handler registered"):
        asyncio.run(route_and_generate(router, [{"text": "what is 2 + 2"}]))


def test_route_and_generate_empty_store(make_embedder):
    embedder = make_embedder({"hi": [1.0]})
    store = asyncio.run(build_route_store([], embedder))
    router = SemanticRouter(store, embedder)
    with pytest.raises(DispatchError, match="No route"):
        asyncio.run(route_and_generate(router, [{"text": "hi"}]))


def test_handler_registry_factory_caches(make_llm):
    created = []

    def factory(handler_id):
        created.append(handler_id)
        return make_llm()

    registry = HandlerRegistry(factory=factory)
    first = registry.get("m")
    assert registry.get("m") is first
    assert created == ["m"]
    assert "m" in registry
    assert registry.handler_ids == ["m"]


def test_route_without_utterances_dispatches_via_fallback(make_embedder, make_llm):
    embedder = make_embedder({"anything": [1.0, 0.0]})
    empty = RouteDefinition(name="chitchat", description="", utterances=(), score_threshold=0.5, handler_id="m")
    store = asyncio.run(build_route_store([empty], embedder))
    handlers = HandlerRegistry()
    handlers.register("m", make_llm())
    result = asyncio.run(route_and_generate(SemanticRouter(store, embedder, handlers), [{"text": "anything"}]))
    assert result.route_name == "chitchat"
    assert result.fallback


@pytest.mark.parametrize("reserved", ["model", "messages"])
def test_route_and_generate_rejects_router_owned_kwargs(router, llms, reserved):
    with pytest.raises(DispatchError, match=reserved):
        asyncio.run(route_and_generate(router, [{"text": "who was napoleon"}], **{reserved: "x"}))
    assert all(llm.calls == [] for llm in llms.values())
