"""Test doubles shared across the suite."""

from __future__ import annotations

import asyncio
from typing import Any

import numpy as np

from routellm.routing.strategies.base import RoutingStrategy

STRONG = "gpt-4-1106-preview"
WEAK = "mixtral-8x7b-instruct-v0.1"


class FixedStrategy(RoutingStrategy):
    """Always returns the same score."""

    def __init__(self, value: float, name: str = "fixed") -> None:
        self.value = value
        self.name = name
        self.calls = 0

    async def score(self, prompt: str) -> float:
        self.calls += 1
        await asyncio.sleep(0)
        return self.value


class FakeEmbedder:
    """Maps known prompts to vectors; records every call."""

    def __init__(self, vectors: dict[str, list[float]]) -> None:
        self.vectors = vectors
        self.calls: list[tuple[str, float | None]] = []

    async def embed(self, text: str, model: str | None = None, *, timeout: float | None = None):
        self.calls.append((text, timeout))
        return np.asarray(self.vectors[text], dtype=float)


class FakeBackend:
    """Records forwarded payloads and replies with a canned completion."""

    def __init__(self, error: Exception | None = None) -> None:
        self.requests: list[dict[str, Any]] = []
        self.error = error
        self.closed = False

    async def complete(self, payload, *, chat=True, timeout=None):
        self.requests.append({"payload": payload, "chat": chat, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return {
            "id": "cmpl-123",
            "object": "chat.completion" if chat else "text_completion",
            "model": payload["model"],
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "hi"}}],
        }

    async def aclose(self) -> None:
        self.closed = True

