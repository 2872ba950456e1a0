"""Application lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI

from routellm.routing.controller import RoutingController

logger = logging.getLogger("routellm.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the controller on startup (unless injected) and close it on shutdown."""
    settings = app.state.settings

    # --- Startup ---
    owns_controller = getattr(app.state, "controller", None) is None
    if owns_controller:
        app.state.controller = RoutingController.from_settings(settings)
    controller: RoutingController = app.state.controller

    logger.info(
        "routellm server starting: strategies=%s, strong=%s, weak=%s, host=%s, port=%d",
        ",".join(controller.strategy_names),
        controller.pair.strong,
        controller.pair.weak,
        settings.server.host,
        settings.server.port,
    )

    if not settings.upstream.api_key:
        logger.warning(
            "No upstream API key configured. Set OPENAI_API_KEY in the environment "
            "or ~/.routellm/.env if the backend requires one."
        )

    app.state.started_at = datetime.now(UTC)

    yield

    # --- Shutdown ---
    if owns_controller:
        await controller.aclose()
    logger.info("routellm server shutting down. Usage: %s", controller.usage.snapshot())
