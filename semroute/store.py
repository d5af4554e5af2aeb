"""Route store: the immutable set of routes with precomputed utterance embeddings."""

import asyncio
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from loguru import logger

from semroute.errors import BuildFailure, ConfigError, DimensionMismatch
from semroute.models import EmbeddingProvider, LoadedRoute, RouteDefinition


@dataclass(frozen=True)
class RouteStore:
    """Loaded routes in configuration order plus the default (fallback) route.

    Read-only after construction, so one store can be shared by concurrent
    matchers without locking.
    """

    routes: tuple[LoadedRoute, ...] = ()
    default_route: LoadedRoute | None = None
    dimension: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "routes", tuple(self.routes))
        if self.routes and self.default_route is None:
            raise ValueError("A non-empty route store needs a default route")
        if self.default_route is not None and not any(r is self.default_route for r in self.routes):
            raise ValueError(f"Default route '{self.default_route.name}' is not in the store")

    @property
    def names(self) -> list[str]:
        return [route.name for route in self.routes]

    def get(self, name: str) -> LoadedRoute | None:
        for route in self.routes:
            if route.name == name:
                return route
        return None

    def __len__(self) -> int:
        return len(self.routes)

    def __iter__(self) -> Iterator[LoadedRoute]:
        return iter(self.routes)


async def build_route_store(
    definitions: Sequence[RouteDefinition],
    embedder: EmbeddingProvider,
    *,
    default_route: str | None = None,
    max_concurrency: int = 8,
) -> RouteStore:
    """Embed every utterance of every route and return the resulting store.

    Embedding calls run concurrently, at most ``max_concurrency`` at a time,
    and are started in route-then-utterance order. The default route is
    ``default_route`` when given, otherwise the first definition.

    Raises:
        BuildFailure: If any utterance fails to embed. No partial store is returned.
        DimensionMismatch: If the provider returns vectors of different lengths.
        ConfigError: On duplicate route names or an unknown ``default_route``.
    """
    if max_concurrency < 1:
        raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")

    seen: set[str] = set()
    for definition in definitions:
        if definition.name in seen:
            raise ConfigError(f"Duplicate route name '{definition.name}'")
        seen.add(definition.name)
    if default_route is not None and default_route not in seen:
        raise ConfigError(f"Default route '{default_route}' is not a configured route")

    semaphore = asyncio.Semaphore(max_concurrency)

    async def _embed_one(route_name: str, index: int, utterance: str) -> list[float]:
        async with semaphore:
            logger.debug(f"Embedding utterance {index} of route {route_name}")
            try:
                vector = await embedder.embed(utterance)
            except Exception as e:
                raise BuildFailure(route_name, index, str(e)) from e
        return list(vector)

    tasks: list[list[asyncio.Task]] = [
        [
            asyncio.ensure_future(_embed_one(definition.name, index, utterance))
            for index, utterance in enumerate(definition.utterances)
        ]
        for definition in definitions
    ]
    flat = [task for route_tasks in tasks for task in route_tasks]

    try:
        await asyncio.gather(*flat)
    except BaseException:
        for task in flat:
            task.cancel()
        await asyncio.gather(*flat, return_exceptions=True)
        raise

    dimension: int | None = None
    routes: list[LoadedRoute] = []
    for definition, route_tasks in zip(definitions, tasks):
        embeddings = [task.result() for task in route_tasks]
        for index, vector in enumerate(embeddings):
            if dimension is None:
                dimension = len(vector)
            elif len(vector) != dimension:
                raise DimensionMismatch(
                    dimension,
                    len(vector),
                    f"Utterance {index} of route '{definition.name}' embedded to "
                    f"{len(vector)} dimensions, expected {dimension}",
                )
        routes.append(LoadedRoute.from_definition(definition, embeddings))
        logger.info(f"Built embeddings for route: {definition.name} ({len(embeddings)} utterances)")

    if default_route is not None:
        default = next(route for route in routes if route.name == default_route)
    else:
        default = routes[0] if routes else None

    store = RouteStore(routes=tuple(routes), default_route=default, dimension=dimension)
    logger.info(
        f"Route store initialized with {len(store)} routes"
        + (f", default route: {default.name}" if default else "")
    )
    return store
