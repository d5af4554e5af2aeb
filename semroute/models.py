"""Core data models for semroute."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass(frozen=True)
class RouteDefinition:
    """A route as configured: name, example utterances, threshold and handler."""
    name: str
    description: str
    utterances: tuple[str, ...]
    score_threshold: float
    handler_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "utterances", tuple(self.utterances))
        object.__setattr__(self, "score_threshold", float(self.score_threshold))


@dataclass(frozen=True, eq=False)
class LoadedRoute:
    """A route together with one precomputed embedding per utterance."""
    name: str
    description: str
    utterances: tuple[str, ...]
    score_threshold: float
    handler_id: str
    embeddings: tuple[np.ndarray, ...] = ()

    def __post_init__(self) -> None:
        frozen = []
        for vector in self.embeddings:
            array = np.array(vector, dtype=np.float64)
            array.flags.writeable = False
            frozen.append(array)
        object.__setattr__(self, "utterances", tuple(self.utterances))
        object.__setattr__(self, "embeddings", tuple(frozen))
        if len(self.embeddings) != len(self.utterances):
            raise ValueError(
                f"Route '{self.name}' has {len(self.utterances)} utterances "
                f"but {len(self.embeddings)} embeddings"
            )

    @classmethod
    def from_definition(
        cls, definition: RouteDefinition, embeddings: Sequence[Sequence[float]]
    ) -> "LoadedRoute":
        return cls(
            name=definition.name,
            description=definition.description,
            utterances=definition.utterances,
            score_threshold=definition.score_threshold,
            handler_id=definition.handler_id,
            embeddings=tuple(embeddings),
        )

    @property
    def definition(self) -> RouteDefinition:
        return RouteDefinition(
            name=self.name,
            description=self.description,
            utterances=self.utterances,
            score_threshold=self.score_threshold,
            handler_id=self.handler_id,
        )

    def __repr__(self) -> str:
        return (
            f"LoadedRoute(name={self.name!r}, utterances={len(self.utterances)}, "
            f"score_threshold={self.score_threshold}, handler_id={self.handler_id!r})"
        )


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one query against a route store.

    ``score`` is a true cosine similarity unless ``fallback`` is set, in which
    case it is the pinned fallback score (0.0) and ``route`` is the default route.
    An empty store yields ``route=None`` and ``score=-inf``.
    """
    route: LoadedRoute | None
    score: float
    fallback: bool = False

    @property
    def route_name(self) -> str | None:
        return self.route.name if self.route is not None else None


@dataclass
class LLMResponse:
    """Response from an LLM provider."""
    content: str | None
    finish_reason: str = "stop"
    usage: dict[str, int] = field(default_factory=dict)
    model_used: str = ""

    @property
    def is_error(self) -> bool:
        return self.finish_reason == "error"


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers."""

    @abstractmethod
    async def embed(self, text: str) -> Sequence[float]:
        """Return the embedding vector for ``text``.

        Raises:
            EmbeddingFailure: If the provider cannot produce a vector.
        """
        ...

    @property
    def name(self) -> str:
        return self.__class__.__name__


class LLMProvider(ABC):
    """Abstract base class for downstream LLM handlers."""

    def __init__(self, api_key: str | None = None, api_base: str | None = None):
        self.api_key = api_key
        self.api_base = api_base

    @abstractmethod
    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        **kwargs: Any,
    ) -> LLMResponse:
        """Send a chat completion request."""
        ...

    @property
    def name(self) -> str:
        return self.__class__.__name__
