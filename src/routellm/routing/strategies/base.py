"""Routing strategy interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from routellm.routing.types import ModelId, ModelPair


class RoutingStrategy(ABC):
    """Scores a prompt with the probability that the strong model is preferred.

    Subclasses implement :meth:`score`. ``supports_concurrent_scoring`` tells
    the controller whether batch scoring may run calls concurrently; strategies
    that set it to ``False`` are always invoked one prompt at a time.
    """

    name: str = ""
    supports_concurrent_scoring: bool = True

    @abstractmethod
    async def score(self, prompt: str) -> float:
        """Return the strong-preference score for *prompt*, in [0, 1]."""
        ...

    async def route_model(self, prompt: str, threshold: float, pair: ModelPair) -> ModelId:
        """Pick ``pair.strong`` when the score reaches *threshold*, else ``pair.weak``."""
        score = await self.score(prompt)
        return pair.strong if score >= threshold else pair.weak

    async def aclose(self) -> None:
        """Release resources held by the strategy (no-op by default)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
