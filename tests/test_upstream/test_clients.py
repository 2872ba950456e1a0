"""Tests for the embedding and completion HTTP clients."""

from __future__ import annotations

import json

import httpx
import numpy as np
import pytest

from routellm.config.models import EmbeddingConfig, UpstreamConfig
from routellm.routing.errors import ErrorKind, UpstreamFailure
from routellm.upstream import CompletionBackend, OpenAIEmbeddingProvider


class Recorder:
    """MockTransport handler that records requests and replies with a fixed response."""

    def __init__(self, status: int = 200, body=None, exc: Exception | None = None) -> None:
        self.status = status
        self.body = body if body is not None else {}
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if isinstance(self.body, str):
            return httpx.Response(self.status, text=self.body)
        return httpx.Response(self.status, json=self.body)


def _backend(handler: Recorder, api_key: str = "sk-test") -> CompletionBackend:
    return CompletionBackend(
        "https://upstream.test/v1", api_key=api_key, transport=httpx.MockTransport(handler)
    )


class TestCompletionBackend:
    @pytest.mark.asyncio
    async def test_chat_passthrough(self):
        reply = {"id": "chatcmpl-1", "model": "gpt-4", "choices": [], "usage": {"total_tokens": 3}}
        handler = Recorder(body=reply)
        backend = _backend(handler)

        payload = {"model": "gpt-4", "messages": [{"role": "user", "content": "hi"}]}
        response = await backend.complete(payload)

        assert response == reply
        sent = handler.requests[0]
        assert sent.url == "https://upstream.test/v1/chat/completions"
        assert sent.headers["authorization"] == "Bearer sk-test"
        assert json.loads(sent.content) == payload
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_text_completion_endpoint(self):
        handler = Recorder(body={"object": "text_completion"})
        backend = _backend(handler, api_key="")

        await backend.complete({"model": "gpt-4", "prompt": "hi"}, chat=False, timeout=2.0)

        sent = handler.requests[0]
        assert sent.url == "https://upstream.test/v1/completions"
        assert "authorization" not in sent.headers
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_timeout_is_retryable(self):
        handler = Recorder(exc=httpx.ReadTimeout("slow"))
        backend = _backend(handler)

        with pytest.raises(UpstreamFailure) as exc_info:
            await backend.complete({"model": "gpt-4", "prompt": "hi"})

        assert exc_info.value.kind is ErrorKind.UPSTREAM_FAILURE
        assert exc_info.value.retryable
        assert exc_info.value.http_status == 500
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_connection_error(self):
        backend = _backend(Recorder(exc=httpx.ConnectError("refused")))
        with pytest.raises(UpstreamFailure, match="refused"):
            await backend.complete({"model": "gpt-4", "prompt": "hi"})
        await backend.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,retryable",
        [(400, False), (401, False), (404, False), (429, True), (500, True), (503, True)],
    )
    async def test_error_statuses(self, status, retryable):
        backend = _backend(Recorder(status=status, body={"error": {"message": "nope"}}))

        with pytest.raises(UpstreamFailure) as exc_info:
            await backend.complete({"model": "gpt-4", "prompt": "hi"})

        assert exc_info.value.status_code == status
        assert exc_info.value.retryable is retryable
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        backend = _backend(Recorder(body="<html>gateway</html>"))
        with pytest.raises(UpstreamFailure) as exc_info:
            await backend.complete({"model": "gpt-4", "prompt": "hi"})
        assert not exc_info.value.retryable
        await backend.aclose()

    def test_from_config(self):
        backend = CompletionBackend.from_config(UpstreamConfig(timeout_seconds=5.0))
        assert backend.timeout_seconds == 5.0


class TestOpenAIEmbeddingProvider:
    @pytest.mark.asyncio
    async def test_embed(self):
        handler = Recorder(body={"data": [{"embedding": [0.1, 0.2, 0.3]}]})
        provider = OpenAIEmbeddingProvider(
            "https://upstream.test/v1/",
            "text-embedding-3-small",
            api_key="sk-emb",
            transport=httpx.MockTransport(handler),
        )

        vector = await provider.embed("hello", timeout=1.0)

        np.testing.assert_allclose(vector, [0.1, 0.2, 0.3])
        sent = handler.requests[0]
        assert sent.url == "https://upstream.test/v1/embeddings"
        assert json.loads(sent.content) == {"input": "hello", "model": "text-embedding-3-small"}
        assert sent.headers["authorization"] == "Bearer sk-emb"
        await provider.aclose()

    @pytest.mark.asyncio
    async def test_model_override(self):
        handler = Recorder(body={"data": [{"embedding": [1.0]}]})
        provider = OpenAIEmbeddingProvider.from_config(
            EmbeddingConfig(base_url="https://upstream.test/v1"), transport=httpx.MockTransport(handler)
        )

        await provider.embed("hello", "other-model")

        assert json.loads(handler.requests[0].content)["model"] == "other-model"
        await provider.aclose()

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        provider = OpenAIEmbeddingProvider(
            "https://upstream.test/v1",
            "m",
            transport=httpx.MockTransport(Recorder(body={"data": []})),
        )
        with pytest.raises(UpstreamFailure) as exc_info:
            await provider.embed("hello")
        assert not exc_info.value.retryable
        await provider.aclose()

    @pytest.mark.asyncio
    async def test_timeout(self):
        provider = OpenAIEmbeddingProvider(
            "https://upstream.test/v1",
            "m",
            transport=httpx.MockTransport(Recorder(exc=httpx.ConnectTimeout("slow"))),
        )
        with pytest.raises(UpstreamFailure, match="timed out"):
            await provider.embed("hello", timeout=0.01)
        await provider.aclose()
