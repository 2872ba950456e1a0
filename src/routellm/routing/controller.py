"""Routing controller: the single entry point the server talks to.

Validates strategy names and thresholds, asks the chosen strategy for a
score, turns the score into a concrete model id, counts the decision, and
forwards completion requests to the upstream backend with the model
substituted.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from routellm.config.constants import ROUTER_MODEL_PREFIX
from routellm.routing.errors import InvalidModelFormat, InvalidStrategy, InvalidThreshold
from routellm.routing.strategies.base import RoutingStrategy
from routellm.routing.types import ModelId, ModelPair, RoutingRequest, validate_threshold
from routellm.routing.usage import UsageCounters

if TYPE_CHECKING:
    from routellm.config.settings import Settings
    from routellm.upstream.completions import CompletionBackend
    from routellm.upstream.embeddings import EmbeddingProvider

logger = logging.getLogger("routellm.routing.controller")

# Request fields that steer routing and are never forwarded upstream
_ROUTING_FIELDS = ("router", "threshold")


def decode_model_identifier(model: str) -> tuple[str, float]:
    """Split ``router-<name>-<threshold>`` into ``(name, threshold)``.

    The strategy name is not checked against any registry here.
    """
    parts = model.split("-")
    if len(parts) != 3 or parts[0] != ROUTER_MODEL_PREFIX or not parts[1]:
        raise InvalidModelFormat(
            f"Invalid model {model}. Model name must be of the format "
            f"'{ROUTER_MODEL_PREFIX}-[router name]-[threshold]'."
        )
    try:
        threshold = float(parts[2])
    except ValueError:
        raise InvalidThreshold(f"Threshold {parts[2]} must be a float.") from None
    return parts[1], validate_threshold(threshold)


def encode_model_identifier(strategy_name: str, threshold: float | None = None) -> str:
    """Inverse of :func:`decode_model_identifier`; omits the threshold when ``None``."""
    if threshold is None:
        return f"{ROUTER_MODEL_PREFIX}-{strategy_name}"
    return f"{ROUTER_MODEL_PREFIX}-{strategy_name}-{threshold:g}"


def extract_prompt(request: Mapping[str, Any]) -> str:
    """Text to route on: the last chat message, or the ``prompt`` field."""
    messages = request.get("messages")
    if messages:
        content = messages[-1].get("content", "")
        if isinstance(content, list):
            # Multi-part content: keep the text parts only
            return "\n".join(
                part.get("text", "")
                for part in content
                if isinstance(part, Mapping) and part.get("type", "text") == "text"
            )
        return content or ""

    prompt = request.get("prompt")
    if isinstance(prompt, list):
        return str(prompt[-1]) if prompt else ""
    if prompt is None:
        raise ValueError("Completion request has neither 'messages' nor 'prompt'")
    return str(prompt)


class RoutingController:
    """Owns the model pair, the registered strategies and the usage counters."""

    def __init__(
        self,
        strategies: Mapping[str, RoutingStrategy] | Iterable[RoutingStrategy],
        pair: ModelPair,
        backend: CompletionBackend | None = None,
        *,
        embedder: EmbeddingProvider | None = None,
        completion_timeout: float | None = None,
    ) -> None:
        if isinstance(strategies, Mapping):
            self._strategies = dict(strategies)
        else:
            self._strategies = {s.name: s for s in strategies}
        if not self._strategies:
            raise ValueError("RoutingController needs at least one strategy")
        self.pair = pair
        self._backend = backend
        self._embedder = embedder
        self._completion_timeout = completion_timeout
        self._usage = UsageCounters()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        backend: CompletionBackend | None = None,
        embedder: EmbeddingProvider | None = None,
    ) -> RoutingController:
        """Build the strategies, embedding provider and backend named in *settings*."""
        from routellm.routing.registry import build_strategies
        from routellm.upstream.completions import CompletionBackend
        from routellm.upstream.embeddings import OpenAIEmbeddingProvider

        if embedder is None and "sw_ranking" in settings.strategies:
            embedder = OpenAIEmbeddingProvider.from_config(settings.embedding)
        if backend is None:
            backend = CompletionBackend.from_config(settings.upstream)

        return cls(
            build_strategies(settings, embedder),
            ModelPair(strong=settings.models.strong_model, weak=settings.models.weak_model),
            backend,
            embedder=embedder,
            completion_timeout=settings.upstream.timeout_seconds,
        )

    # -- Introspection -----------------------------------------------------

    @property
    def strategy_names(self) -> list[str]:
        return list(self._strategies)

    @property
    def usage(self) -> UsageCounters:
        return self._usage

    def get_strategy(self, strategy_name: str | None) -> RoutingStrategy:
        if not strategy_name or strategy_name not in self._strategies:
            raise InvalidStrategy(
                f"Invalid router {strategy_name}. Available routers are "
                f"{', '.join(self._strategies)}."
            )
        return self._strategies[strategy_name]

    decode_model_identifier = staticmethod(decode_model_identifier)

    # -- Routing -----------------------------------------------------------

    async def route(self, prompt: str, strategy_name: str, threshold: float) -> ModelId:
        """Return the model *strategy_name* picks for *prompt* at *threshold*.

        Each successful call counts exactly once in :attr:`usage`.
        """
        strategy = self.get_strategy(strategy_name)
        threshold = validate_threshold(threshold)

        model = await strategy.route_model(prompt, threshold, self.pair)
        count = self._usage.increment(strategy_name, model)
        logger.debug(
            "Routed with '%s' at threshold %.3f -> %s (count %d)",
            strategy_name,
            threshold,
            model,
            count,
        )
        return model

    async def route_request(self, request: RoutingRequest) -> ModelId:
        return await self.route(request.prompt, request.strategy_name, request.threshold)

    async def batch_score(self, prompts: Sequence[str], strategy_name: str) -> list[float]:
        """Score every prompt; results are index-aligned with *prompts*.

        Strategies that do not support concurrent scoring are called one
        prompt at a time, in input order.
        """
        strategy = self.get_strategy(strategy_name)
        if strategy.supports_concurrent_scoring:
            return await self._score_concurrently(strategy, prompts)
        return await self._score_sequentially(strategy, prompts)

    @staticmethod
    async def _score_sequentially(strategy: RoutingStrategy, prompts: Sequence[str]) -> list[float]:
        return [await strategy.score(prompt) for prompt in prompts]

    @staticmethod
    async def _score_concurrently(strategy: RoutingStrategy, prompts: Sequence[str]) -> list[float]:
        # gather keeps argument order regardless of completion order
        return list(await asyncio.gather(*(strategy.score(prompt) for prompt in prompts)))

    # -- Completions -------------------------------------------------------

    def resolve(self, request: Mapping[str, Any]) -> tuple[str, float]:
        """Strategy name and threshold a completion request asks for.

        A ``router-`` model id wins over the ``router``/``threshold`` fields.
        """
        model = request.get("model")
        if isinstance(model, str) and model.startswith(f"{ROUTER_MODEL_PREFIX}-"):
            return decode_model_identifier(model)

        strategy_name = request.get("router")
        if not strategy_name:
            raise InvalidStrategy(
                "No router given. Set model to 'router-[router name]-[threshold]' "
                "or pass the 'router' and 'threshold' fields."
            )
        threshold = request.get("threshold")
        if threshold is None:
            raise InvalidThreshold(f"No threshold given for router '{strategy_name}'.")
        return strategy_name, validate_threshold(threshold)

    async def completion(
        self,
        request: Mapping[str, Any],
        *,
        chat: bool = True,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Route *request* and forward it upstream with the model substituted.

        The backend's response is returned unmodified.
        """
        if self._backend is None:
            raise RuntimeError("RoutingController has no completion backend configured")

        strategy_name, threshold = self.resolve(request)
        self.get_strategy(strategy_name)
        routed_model = await self.route(extract_prompt(request), strategy_name, threshold)

        payload = {k: v for k, v in request.items() if k not in _ROUTING_FIELDS and v is not None}
        payload["model"] = routed_model

        return await self._backend.complete(
            payload,
            chat=chat,
            timeout=timeout if timeout is not None else self._completion_timeout,
        )

    async def aclose(self) -> None:
        """Close the backend, the embedder and every strategy."""
        for strategy in self._strategies.values():
            await strategy.aclose()
        if self._embedder is not None and hasattr(self._embedder, "aclose"):
            await self._embedder.aclose()
        if self._backend is not None:
            await self._backend.aclose()
