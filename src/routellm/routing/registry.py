"""Strategy factory: builds configured strategies by name."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from routellm.routing.errors import InvalidStrategy
from routellm.routing.rating import PreferenceRatingEstimator
from routellm.routing.strategies.base import RoutingStrategy
from routellm.routing.strategies.baseline import RandomStrategy
from routellm.routing.strategies.sw_ranking import SimilarityWeightedRankingStrategy

if TYPE_CHECKING:
    from routellm.config.settings import Settings
    from routellm.upstream.embeddings import EmbeddingProvider

logger = logging.getLogger("routellm.routing.registry")

StrategyBuilder = Callable[["Settings", "EmbeddingProvider | None"], RoutingStrategy]


def create_strategy(
    name: str, settings: Settings, embedder: EmbeddingProvider | None = None
) -> RoutingStrategy:
    """Build the strategy registered under *name* from its typed config."""
    builder = _STRATEGY_BUILDERS.get(name)
    if builder is None:
        raise InvalidStrategy(
            f"Unsupported strategy '{name}'. Available strategies are "
            f"{', '.join(available_strategies())}."
        )
    strategy = builder(settings, embedder)
    logger.info("Created strategy '%s' (%s)", name, type(strategy).__name__)
    return strategy


def build_strategies(
    settings: Settings, embedder: EmbeddingProvider | None = None
) -> dict[str, RoutingStrategy]:
    """Build every strategy listed in ``settings.strategies``, keyed by name."""
    return {name: create_strategy(name, settings, embedder) for name in settings.strategies}


def available_strategies() -> list[str]:
    return sorted(_STRATEGY_BUILDERS)


# ---------------------------------------------------------------------------
# Per-strategy builder functions
# ---------------------------------------------------------------------------


def _build_random(settings: Settings, embedder: EmbeddingProvider | None) -> RoutingStrategy:
    return RandomStrategy(seed=settings.random.seed)


def _build_sw_ranking(settings: Settings, embedder: EmbeddingProvider | None) -> RoutingStrategy:
    if embedder is None:
        raise ValueError("sw_ranking needs an embedding provider")
    return SimilarityWeightedRankingStrategy.from_config(
        settings.sw_ranking,
        embedder,
        estimator=PreferenceRatingEstimator.from_config(settings.estimator),
        embed_timeout=settings.embedding.timeout_seconds,
    )


_STRATEGY_BUILDERS: dict[str, StrategyBuilder] = {
    "random": _build_random,
    "sw_ranking": _build_sw_ranking,
    # Classifier-backed strategies are wrapped with ExternalPredictorStrategy
    # and handed to the controller directly.
}
