"""Routing strategies."""

from routellm.routing.strategies.base import RoutingStrategy
from routellm.routing.strategies.baseline import RandomStrategy
from routellm.routing.strategies.external import ExternalPredictorStrategy
from routellm.routing.strategies.sw_ranking import SimilarityWeightedRankingStrategy

__all__ = [
    "ExternalPredictorStrategy",
    "RandomStrategy",
    "RoutingStrategy",
    "SimilarityWeightedRankingStrategy",
]
