"""Uniform random baseline."""

from __future__ import annotations

import random

from routellm.routing.strategies.base import RoutingStrategy


class RandomStrategy(RoutingStrategy):
    """Draws the score uniformly from [0, 1), ignoring the prompt.

    ``random.Random.random`` is a single atomic call, so concurrent scoring
    needs no extra locking.
    """

    name = "random"
    supports_concurrent_scoring = True

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    async def score(self, prompt: str) -> float:
        return self._rng.random()
