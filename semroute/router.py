"""SemanticRouter — picks a route for a text by embedding similarity."""

from pathlib import Path

from loguru import logger

from semroute.config import RouterConfig, RouterSettings, load_router_config
from semroute.handlers import HandlerRegistry
from semroute.matcher import match
from semroute.models import EmbeddingProvider, LoadedRoute, MatchResult
from semroute.providers import LiteLLMEmbedder, LiteLLMProvider
from semroute.store import RouteStore, build_route_store


class SemanticRouter:
    """Routes a query text to the route whose utterances it is closest to.

    The route store is built once (see ``from_config``) and never changes;
    ``route`` only embeds the query and runs the matcher, so it is safe to
    call concurrently.
    """

    def __init__(
        self,
        store: RouteStore,
        embedder: EmbeddingProvider,
        handlers: HandlerRegistry | None = None,
    ):
        self._store = store
        self._embedder = embedder
        self._handlers = handlers or HandlerRegistry()

    @classmethod
    async def from_config(
        cls,
        config: RouterConfig,
        *,
        settings: RouterSettings | None = None,
        embedder: EmbeddingProvider | None = None,
        handlers: HandlerRegistry | None = None,
    ) -> "SemanticRouter":
        """Build the route store for ``config`` and return a ready router.

        Raises:
            BuildFailure: If any utterance fails to embed.
        """
        settings = settings or RouterSettings()
        logger.info(f"Initializing semantic router with encoder: {config.encoder_name}")

        if embedder is None:
            embedder = LiteLLMEmbedder(
                config.encoder_name,
                provider=config.encoder_type,
                api_key=settings.api_key,
                api_base=settings.api_base,
                timeout=settings.request_timeout,
            )
        if handlers is None:
            handlers = HandlerRegistry(
                factory=lambda handler_id: LiteLLMProvider(
                    handler_id, api_key=settings.api_key, api_base=settings.api_base
                )
            )

        store = await build_route_store(
            config.definitions(),
            embedder,
            default_route=config.default_route,
            max_concurrency=settings.embed_concurrency,
        )
        return cls(store, embedder, handlers)

    @classmethod
    async def from_yaml(cls, path: str | Path, **kwargs) -> "SemanticRouter":
        return await cls.from_config(load_router_config(path), **kwargs)

    @property
    def store(self) -> RouteStore:
        return self._store

    @property
    def routes(self) -> tuple[LoadedRoute, ...]:
        return self._store.routes

    @property
    def default_route(self) -> LoadedRoute | None:
        return self._store.default_route

    @property
    def handlers(self) -> HandlerRegistry:
        return self._handlers

    async def route(self, text: str) -> MatchResult:
        """Embed ``text`` and match it against the route store.

        Raises:
            EmbeddingFailure: If the query cannot be embedded.
            DimensionMismatch: If the query vector does not fit the stored embeddings.
        """
        query = await self._embedder.embed(text)
        result = match(query, self._store)

        if result.route is None:
            logger.warning("No routes loaded, nothing to select")
        else:
            suffix = ", fallback" if result.fallback else ""
            logger.info(f"Selected route: {result.route_name} (score: {result.score:.4f}{suffix})")
        return result
