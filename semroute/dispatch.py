"""Route a request and hand it to the selected route's LLM handler."""

import time
from dataclasses import dataclass
from typing import Any

from loguru import logger

from semroute.errors import DispatchError
from semroute.router import SemanticRouter


@dataclass
class DispatchResult:
    """Downstream response plus the routing decision that produced it."""
    content: str | None
    route_name: str
    score: float
    fallback: bool
    latency_ms: int
    finish_reason: str = "stop"
    model_used: str = ""


def text_for_routing(parts: list[dict[str, Any]]) -> str:
    """Return the first non-empty ``text`` among the content parts."""
    for part in parts:
        text = part.get("text")
        if text:
            return text
    raise DispatchError("No text found in query for routing.")


def build_messages(parts: list[dict[str, Any]], text: str) -> list[dict[str, Any]]:
    """Build the single user message sent to the handler."""
    if not parts:
        return [{"role": "user", "content": text}]
    if all(set(part) == {"text"} for part in parts):
        return [{"role": "user", "content": "\n".join(part["text"] for part in parts if part["text"])}]

    content: list[dict[str, Any]] = []
    for part in parts:
        if part.get("text"):
            content.append({"type": "text", "text": part["text"]})
        else:
            content.append(dict(part))
    return [{"role": "user", "content": content}]


async def route_and_generate(
    router: SemanticRouter,
    parts: list[dict[str, Any]],
    **generation_kwargs: Any,
) -> DispatchResult:
    """Route ``parts`` by their text and call the chosen route's handler.

    Latency covers the handler call only, not routing.

    Raises:
        DispatchError: If there is no text to route on, no route was
            selected, the route's handler is unknown, or ``model``/``messages``
            is passed in ``generation_kwargs``.
    """
    for reserved in ("model", "messages"):
        if reserved in generation_kwargs:
            raise DispatchError(f"'{reserved}' is set by the router and cannot be passed to route_and_generate")
    text = text_for_routing(parts)
    result = await router.route(text)
    if result.route is None:
        raise DispatchError("No route available for request")

    route = result.route
    provider = router.handlers.get(route.handler_id)
    messages = build_messages(parts, text)

    started = time.monotonic()
    response = await provider.chat(messages=messages, model=route.handler_id, **generation_kwargs)
    latency_ms = int((time.monotonic() - started) * 1000)

    if response.is_error:
        logger.warning(
            f"Handler {route.handler_id} for route {route.name} returned error "
            f"({latency_ms}ms): {response.content}"
        )
    else:
        logger.info(f"Route {route.name} answered by {route.handler_id} in {latency_ms}ms")

    return DispatchResult(
        content=response.content,
        route_name=route.name,
        score=result.score,
        fallback=result.fallback,
        latency_ms=latency_ms,
        finish_reason=response.finish_reason,
        model_used=response.model_used or route.handler_id,
    )
