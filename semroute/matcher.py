"""Nearest-utterance matching with threshold fallback."""

from collections.abc import Sequence

import numpy as np
from loguru import logger

from semroute.models import MatchResult
from semroute.similarity import as_vector, cosine_similarity
from semroute.store import RouteStore

# Score reported when the best match is below its route's threshold. Not a similarity.
FALLBACK_SCORE = 0.0
# Score reported when the store has no routes.
NO_MATCH_SCORE = float("-inf")


def match(query_vector: Sequence[float] | np.ndarray, store: RouteStore) -> MatchResult:
    """Return the route owning the utterance embedding closest to ``query_vector``.

    Every utterance of every route is scored; only a strictly greater score
    replaces the current best, so ties go to the earlier route/utterance.
    If the winner's score is strictly below its own ``score_threshold`` the
    store's default route is returned with ``FALLBACK_SCORE`` instead.

    Raises:
        DimensionMismatch: If the query length differs from a stored embedding.
        ValueError: If the query contains NaN or infinity.
    """
    query = as_vector(query_vector)

    best_score = NO_MATCH_SCORE
    best_route = None
    for route in store.routes:
        for embedding in route.embeddings:
            score = cosine_similarity(query, embedding)
            if score > best_score:
                best_score = score
                best_route = route

    if best_route is not None and best_score < best_route.score_threshold:
        logger.info(
            f"Score {best_score:.4f} below threshold {best_route.score_threshold} of route "
            f"{best_route.name}, using default route {store.default_route.name}"
        )
        return MatchResult(route=store.default_route, score=FALLBACK_SCORE, fallback=True)

    # Routes without utterances never win directly; a store of only such
    # routes still falls back to its default route.
    if best_route is None and store.default_route is not None:
        return MatchResult(route=store.default_route, score=FALLBACK_SCORE, fallback=True)

    return MatchResult(route=best_route, score=best_score)
