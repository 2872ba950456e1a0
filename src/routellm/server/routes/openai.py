"""OpenAI-compatible endpoints: completions and model listing."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from routellm.config.constants import MODEL_OWNER, ROUTER_MODEL_PREFIX
from routellm.routing.controller import encode_model_identifier

openai_router = APIRouter(prefix="/v1", tags=["OpenAI"])


class _RoutedRequest(BaseModel):
    """Fields shared by both completion shapes; unknown fields pass through."""

    model_config = ConfigDict(extra="allow")

    model: str | None = None
    router: str | None = None
    threshold: float | None = None
    temperature: float | None = None
    max_tokens: int | None = None


class ChatCompletionRequest(_RoutedRequest):
    messages: list[dict[str, Any]] = Field(min_length=1)


class CompletionRequest(_RoutedRequest):
    prompt: str | list[str]


class ModelCard(BaseModel):
    id: str
    object: str = "model"
    created: int
    owned_by: str = MODEL_OWNER


class ModelList(BaseModel):
    object: str = "list"
    data: list[ModelCard]


def _created(request: Request) -> int:
    started_at = getattr(request.app.state, "started_at", None) or datetime.now(UTC)
    return int(started_at.timestamp())


@openai_router.post("/chat/completions")
async def create_chat_completion(body: ChatCompletionRequest, request: Request) -> JSONResponse:
    controller = request.app.state.controller
    response = await controller.completion(body.model_dump(exclude_none=True), chat=True)
    return JSONResponse(content=response)


@openai_router.post("/completions")
async def create_completion(body: CompletionRequest, request: Request) -> JSONResponse:
    controller = request.app.state.controller
    response = await controller.completion(body.model_dump(exclude_none=True), chat=False)
    return JSONResponse(content=response)


@openai_router.get("/models", response_model=ModelList)
async def list_models(request: Request) -> ModelList:
    controller = request.app.state.controller
    created = _created(request)
    return ModelList(
        data=[
            ModelCard(id=encode_model_identifier(name), created=created)
            for name in controller.strategy_names
        ]
    )


@openai_router.get("/models/{model_id}", response_model=ModelCard)
async def retrieve_model(model_id: str, request: Request):
    if not model_id.startswith(f"{ROUTER_MODEL_PREFIX}-"):
        return JSONResponse(status_code=404, content={"error": "Model not found"})
    return ModelCard(id=model_id, created=_created(request))
