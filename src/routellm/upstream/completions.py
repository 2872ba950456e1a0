"""Completion backend: forwards routed requests to an OpenAI-compatible server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from routellm.upstream._http import auth_headers, post_json

if TYPE_CHECKING:
    from routellm.config.models import UpstreamConfig

CHAT_ENDPOINT = "chat/completions"
TEXT_ENDPOINT = "completions"


class CompletionBackend:
    """Thin async client; responses are returned exactly as received."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            headers=auth_headers(api_key),
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: UpstreamConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> CompletionBackend:
        return cls(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )

    async def complete(
        self,
        payload: dict[str, Any],
        *,
        chat: bool = True,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """POST *payload* to the chat or text completions endpoint."""
        return await post_json(
            self._client,
            CHAT_ENDPOINT if chat else TEXT_ENDPOINT,
            payload,
            service="Completion backend",
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
