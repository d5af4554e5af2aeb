"""semroute: pick a route for a query by embedding similarity to example utterances."""

from semroute.errors import (
    BuildFailure,
    ConfigError,
    DimensionMismatch,
    DispatchError,
    EmbeddingFailure,
    RouterError,
)
from semroute.models import (
    EmbeddingProvider,
    LLMProvider,
    LLMResponse,
    LoadedRoute,
    MatchResult,
    RouteDefinition,
)
from semroute.similarity import cosine_similarity
from semroute.store import RouteStore, build_route_store
from semroute.matcher import FALLBACK_SCORE, NO_MATCH_SCORE, match
from semroute.config import RouterConfig, RouterSettings, load_router_config
from semroute.handlers import HandlerRegistry
from semroute.router import SemanticRouter
from semroute.dispatch import DispatchResult, route_and_generate

__all__ = [
    "BuildFailure",
    "ConfigError",
    "DimensionMismatch",
    "DispatchError",
    "EmbeddingFailure",
    "RouterError",
    "EmbeddingProvider",
    "LLMProvider",
    "LLMResponse",
    "LoadedRoute",
    "MatchResult",
    "RouteDefinition",
    "cosine_similarity",
    "RouteStore",
    "build_route_store",
    "FALLBACK_SCORE",
    "NO_MATCH_SCORE",
    "match",
    "RouterConfig",
    "RouterSettings",
    "load_router_config",
    "HandlerRegistry",
    "SemanticRouter",
    "DispatchResult",
    "route_and_generate",
]
