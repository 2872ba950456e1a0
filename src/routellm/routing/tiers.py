"""Bucket rated models into ordered strength tiers."""

from __future__ import annotations

import math
from collections.abc import Mapping

from routellm.routing.types import ModelId


def assign_tiers(ratings: Mapping[ModelId, float], num_tiers: int) -> dict[ModelId, int]:
    """Map each model to a 0-based tier, tier 0 holding the highest ratings.

    Models are sorted by rating descending; equal ratings keep the mapping's
    iteration order (Python's sort is stable), so the result is deterministic
    for a given input. Tiers are contiguous buckets of
    ``ceil(len(ratings) / num_tiers)`` models; the last one may be smaller.
    """
    if num_tiers < 1:
        raise ValueError(f"num_tiers must be >= 1, got {num_tiers}")
    if not ratings:
        return {}

    ranked = sorted(ratings, key=lambda model: -ratings[model])
    tier_size = math.ceil(len(ranked) / num_tiers)
    return {model: rank // tier_size for rank, model in enumerate(ranked)}
