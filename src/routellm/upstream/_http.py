"""Shared request helper that turns httpx failures into UpstreamFailure."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from routellm.routing.errors import UpstreamFailure

logger = logging.getLogger("routellm.upstream")

# Statuses worth retrying by the caller
_RETRYABLE_STATUSES = frozenset({408, 409, 429})


def auth_headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"} if api_key else {}


async def post_json(
    client: httpx.AsyncClient,
    url: str,
    payload: dict[str, Any],
    *,
    service: str,
    timeout: float | None,
) -> dict[str, Any]:
    """POST *payload* and return the decoded JSON body.

    *timeout* is the deadline for the whole exchange; ``None`` falls back to
    the client's default.
    """
    kwargs: dict[str, Any] = {"json": payload}
    if timeout is not None:
        kwargs["timeout"] = httpx.Timeout(timeout)

    try:
        resp = await client.post(url, **kwargs)
    except httpx.TimeoutException as exc:
        logger.warning("%s request timed out: %s", service, exc)
        raise UpstreamFailure(f"{service} request timed out.") from exc
    except httpx.HTTPError as exc:
        logger.warning("%s request failed: %s", service, exc)
        raise UpstreamFailure(f"{service} request failed: {exc}") from exc

    if resp.is_error:
        retryable = resp.status_code >= 500 or resp.status_code in _RETRYABLE_STATUSES
        logger.warning("%s returned HTTP %d: %s", service, resp.status_code, resp.text[:500])
        raise UpstreamFailure(
            f"{service} returned HTTP {resp.status_code}: {resp.text[:500]}",
            retryable=retryable,
            status_code=resp.status_code,
        )

    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamFailure(
            f"{service} returned a non-JSON body.", retryable=False, status_code=resp.status_code
        ) from exc
