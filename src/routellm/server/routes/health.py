"""Health and status endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

from routellm import __version__

health_router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class StatusResponse(BaseModel):
    strong_model: str
    weak_model: str
    strategies: list[str]
    usage: dict[str, dict[str, int]]
    total_routed: int
    server_host: str
    server_port: int
    started_at: str
    version: str


@health_router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    started_at = getattr(request.app.state, "started_at", datetime.now(UTC))
    uptime = (datetime.now(UTC) - started_at).total_seconds()
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(uptime, 1),
    )


@health_router.get("/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    settings = request.app.state.settings
    controller = request.app.state.controller
    started_at = getattr(request.app.state, "started_at", datetime.now(UTC))

    return StatusResponse(
        strong_model=controller.pair.strong,
        weak_model=controller.pair.weak,
        strategies=controller.strategy_names,
        usage=controller.usage.snapshot(),
        total_routed=controller.usage.total(),
        server_host=settings.server.host,
        server_port=settings.server.port,
        started_at=started_at.isoformat(),
        version=__version__,
    )
