"""LLM routing: per-request choice between a strong and a weak model."""

from routellm.routing.controller import RoutingController, decode_model_identifier
from routellm.routing.errors import (
    ErrorKind,
    EstimationFailure,
    InvalidModelFormat,
    InvalidStrategy,
    InvalidThreshold,
    RoutingError,
    UpstreamFailure,
)
from routellm.routing.rating import PreferenceRatingEstimator
from routellm.routing.similarity import SimilarityIndex
from routellm.routing.tiers import assign_tiers
from routellm.routing.types import ModelPair, PairwiseOutcome, RoutingRequest

__all__ = [
    "ErrorKind",
    "EstimationFailure",
    "InvalidModelFormat",
    "InvalidStrategy",
    "InvalidThreshold",
    "ModelPair",
    "PairwiseOutcome",
    "PreferenceRatingEstimator",
    "RoutingController",
    "RoutingError",
    "RoutingRequest",
    "SimilarityIndex",
    "UpstreamFailure",
    "assign_tiers",
    "decode_model_identifier",
]
