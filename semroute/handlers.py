"""Handler registry: maps a route's handler_id to the LLM provider that serves it."""

from collections.abc import Callable

from loguru import logger

from semroute.errors import DispatchError
from semroute.models import LLMProvider


class HandlerRegistry:
    """Capability table of downstream handlers.

    Providers are registered explicitly or, when a ``factory`` is given,
    created on first lookup and cached for the life of the registry.
    """

    def __init__(self, factory: Callable[[str], LLMProvider] | None = None) -> None:
        self._factory = factory
        self._providers: dict[str, LLMProvider] = {}

    def register(self, handler_id: str, provider: LLMProvider) -> None:
        self._providers[handler_id] = provider

    def get(self, handler_id: str) -> LLMProvider:
        provider = self._providers.get(handler_id)
        if provider is not None:
            return provider
        if self._factory is None:
            raise DispatchError(f"No handler registered for '{handler_id}'")
        provider = self._factory(handler_id)
        self._providers[handler_id] = provider
        logger.debug(f"Created handler {provider.name} for {handler_id}")
        return provider

    @property
    def handler_ids(self) -> list[str]:
        return list(self._providers)

    def __contains__(self, handler_id: object) -> bool:
        return handler_id in self._providers
