"""FastAPI application factory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from routellm import __version__
from routellm.routing.errors import RoutingError
from routellm.server.lifespan import lifespan
from routellm.server.routes.health import health_router
from routellm.server.routes.openai import openai_router

if TYPE_CHECKING:
    from routellm.config.settings import Settings
    from routellm.routing.controller import RoutingController

logger = logging.getLogger("routellm.server")


def create_app(settings: Settings, controller: RoutingController | None = None) -> FastAPI:
    """Build the FastAPI application.

    1. Creates the app with the routellm lifespan
    2. Stores settings (and an injected controller, if any) on app.state;
       otherwise the lifespan builds the controller from settings
    3. Maps routing errors to ``{"error": ...}`` bodies
    4. Registers the OpenAI-compatible and health routes
    """
    app = FastAPI(
        title="routellm",
        version=__version__,
        description="OpenAI-compatible router between a strong and a weak model",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.controller = controller

    @app.exception_handler(RoutingError)
    async def _routing_error(request: Request, exc: RoutingError) -> JSONResponse:
        if exc.is_client_error:
            logger.info("Rejected %s: %s", request.url.path, exc.message)
        else:
            logger.error("%s on %s: %s", exc.kind.value, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body.", "details": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "An unexpected error occurred.", "details": str(exc)},
        )

    app.include_router(openai_router)
    app.include_router(health_router)

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors reduced to location + message."""
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
