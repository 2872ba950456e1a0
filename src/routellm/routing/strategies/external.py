"""Adapter for opaque predictors (classifiers, learned scorers) living outside routellm."""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from collections.abc import Awaitable, Callable

from routellm.routing.strategies.base import RoutingStrategy

logger = logging.getLogger("routellm.routing.strategies.external")

Predictor = Callable[[str], "float | None | Awaitable[float | None]"]


class ExternalPredictorStrategy(RoutingStrategy):
    """Wraps any callable that maps a prompt to a probability.

    The predictor may be sync or async. Sync predictors run in a worker thread
    so they never block the event loop. A ``None`` prediction means the model
    could not produce a usable answer, and the prompt is sent to the strong
    model. With ``complement=True`` the predictor is taken to estimate the
    weak model's win probability and the score is ``1 - p``.

    Neural predictors are rarely safe to call concurrently, so concurrent
    scoring is off unless explicitly enabled.
    """

    def __init__(
        self,
        name: str,
        predictor: Predictor,
        *,
        complement: bool = False,
        supports_concurrent_scoring: bool = False,
    ) -> None:
        if not name:
            raise ValueError("External strategies need a name")
        self.name = name
        self._predictor = predictor
        self._complement = complement
        self.supports_concurrent_scoring = supports_concurrent_scoring

    async def score(self, prompt: str) -> float:
        if inspect.iscoroutinefunction(self._predictor):
            value = await self._predictor(prompt)
        else:
            value = await asyncio.to_thread(self._predictor, prompt)
            if inspect.isawaitable(value):
                value = await value

        if value is None:
            logger.debug("Predictor '%s' gave no answer; routing to strong", self.name)
            return 1.0

        value = float(value)
        if math.isnan(value) or not 0.0 <= value <= 1.0:
            raise ValueError(f"Predictor '{self.name}' returned {value}, expected a probability")
        return 1.0 - value if self._complement else value
