"""Embedding provider: OpenAI-compatible ``/embeddings`` endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import httpx
import numpy as np

from routellm.routing.errors import UpstreamFailure
from routellm.upstream._http import auth_headers, post_json

if TYPE_CHECKING:
    from routellm.config.models import EmbeddingConfig

logger = logging.getLogger("routellm.upstream.embeddings")


class EmbeddingProvider(Protocol):
    """Anything that turns text into a fixed-length vector."""

    async def embed(
        self, text: str, model: str | None = None, *, timeout: float | None = None
    ) -> np.ndarray: ...


class OpenAIEmbeddingProvider:
    """Fetches embeddings over HTTP with a per-call deadline."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str = "",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            headers=auth_headers(api_key),
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: EmbeddingConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> OpenAIEmbeddingProvider:
        return cls(
            base_url=config.base_url,
            model=config.model,
            api_key=config.api_key,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )

    async def embed(
        self, text: str, model: str | None = None, *, timeout: float | None = None
    ) -> np.ndarray:
        body = await post_json(
            self._client,
            "embeddings",
            {"input": text, "model": model or self.model},
            service="Embedding provider",
            timeout=timeout,
        )
        try:
            vector = body["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as exc:
            raise UpstreamFailure(
                "Embedding provider response has no data[0].embedding.", retryable=False
            ) from exc
        return np.asarray(vector, dtype=float)

    async def aclose(self) -> None:
        await self._client.aclose()
