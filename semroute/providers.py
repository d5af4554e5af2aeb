"""LiteLLM-backed embedding and chat providers."""

from typing import Any

import litellm
from loguru import logger

from semroute.errors import EmbeddingFailure
from semroute.models import EmbeddingProvider, LLMProvider, LLMResponse


def qualify_model(model: str, provider: str | None) -> str:
    """Prefix ``model`` with ``provider/`` unless it already names a provider."""
    if not provider or "/" in model:
        return model
    return f"{provider}/{model}"


class LiteLLMEmbedder(EmbeddingProvider):
    """Embeds text through ``litellm.aembedding``.

    Retries and timeouts are LiteLLM's; any failure surfaces as EmbeddingFailure.
    """

    def __init__(
        self,
        model: str,
        *,
        provider: str | None = None,
        api_key: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
    ):
        self.model = qualify_model(model, provider)
        self.api_key = api_key
        self.api_base = api_base
        self.timeout = timeout

    async def embed(self, text: str) -> list[float]:
        kwargs: dict[str, Any] = {"model": self.model, "input": [text]}
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            response = await litellm.aembedding(**kwargs)
        except Exception as e:
            raise EmbeddingFailure(f"Embedding request to {self.model} failed: {e}") from e

        data = getattr(response, "data", None) or []
        if not data:
            raise EmbeddingFailure(f"Embedding response from {self.model} contained no vectors")
        first = data[0]
        vector = first.get("embedding") if isinstance(first, dict) else getattr(first, "embedding", None)
        if not vector:
            raise EmbeddingFailure(f"Embedding response from {self.model} contained an empty vector")
        return [float(x) for x in vector]


class LiteLLMProvider(LLMProvider):
    """Chat provider over ``litellm.acompletion``.

    Errors are returned as content with ``finish_reason="error"`` rather than raised.
    """

    def __init__(
        self,
        default_model: str,
        api_key: str | None = None,
        api_base: str | None = None,
    ):
        super().__init__(api_key=api_key, api_base=api_base)
        self.default_model = default_model

    def get_default_model(self) -> str:
        return self.default_model

    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        **kwargs: Any,
    ) -> LLMResponse:
        use_model = model or self.default_model
        params: dict[str, Any] = {
            "model": use_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            **kwargs,
        }
        if self.api_key:
            params["api_key"] = self.api_key
        if self.api_base:
            params["api_base"] = self.api_base

        try:
            response = await litellm.acompletion(**params)
        except Exception as e:
            logger.warning(f"LLM call to {use_model} failed: {e}")
            return LLMResponse(
                content=f"Error calling LLM: {e}",
                finish_reason="error",
                model_used=use_model,
            )

        choice = response.choices[0]
        usage: dict[str, int] = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }
        return LLMResponse(
            content=choice.message.content,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
            model_used=getattr(response, "model", None) or use_model,
        )
