"""Tests for the OpenAI-compatible endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from routellm.routing.controller import RoutingController
from routellm.routing.errors import EstimationFailure, UpstreamFailure
from routellm.server.app import create_app
from tests.helpers import STRONG, WEAK, FakeBackend, FixedStrategy


class ExplodingStrategy(FixedStrategy):
    def __init__(self, error: Exception) -> None:
        super().__init__(0.5, name="boom")
        self.error = error

    async def score(self, prompt: str) -> float:
        raise self.error


@pytest.fixture
def client(test_settings, controller):
    with TestClient(create_app(test_settings, controller)) as c:
        yield c


def _chat(model: str, **extra) -> dict:
    return {"model": model, "messages": [{"role": "user", "content": "Hello!"}], **extra}


class TestChatCompletions:
    def test_routes_to_strong(self, client, backend):
        resp = client.post("/v1/chat/completions", json=_chat("router-fixed-0.5"))

        assert resp.status_code == 200
        assert resp.json()["model"] == STRONG
        assert backend.requests[0]["payload"]["model"] == STRONG
        assert backend.requests[0]["chat"] is True

    def test_routes_to_weak(self, client, backend):
        resp = client.post("/v1/chat/completions", json=_chat("router-low-0.5"))

        assert resp.status_code == 200
        assert resp.json()["model"] == WEAK

    def test_extra_fields_pass_through(self, client, backend):
        resp = client.post(
            "/v1/chat/completions",
            json=_chat("router-fixed-0.5", temperature=0.3, top_p=0.9, user="abc"),
        )

        assert resp.status_code == 200
        payload = backend.requests[0]["payload"]
        assert payload["temperature"] == 0.3
        assert payload["top_p"] == 0.9
        assert payload["user"] == "abc"
        assert "router" not in payload
        assert "threshold" not in payload

    def test_router_and_threshold_fields(self, client, backend):
        resp = client.post(
            "/v1/chat/completions", json=_chat("gpt-4", router="fixed", threshold=0.9)
        )

        assert resp.status_code == 200
        assert resp.json()["model"] == WEAK

    def test_usage_is_counted(self, client, controller):
        client.post("/v1/chat/completions", json=_chat("router-fixed-0.5"))
        client.post("/v1/chat/completions", json=_chat("router-fixed-0.5"))

        assert controller.usage.get("fixed", STRONG) == 2

    @pytest.mark.parametrize(
        "model,kind",
        [
            ("router-bert-0.5", "invalid_strategy"),
            ("router-fixed-1.5", "invalid_threshold"),
            ("router-fixed-abc", "invalid_threshold"),
            ("router-fixed", "invalid_model_format"),
            ("gpt-4", "invalid_strategy"),
        ],
    )
    def test_bad_routing_input_is_400(self, client, backend, model, kind):
        resp = client.post("/v1/chat/completions", json=_chat(model))

        assert resp.status_code == 400
        body = resp.json()
        assert body["kind"] == kind
        assert body["error"]
        assert backend.requests == []

    def test_missing_threshold_is_400(self, client):
        resp = client.post("/v1/chat/completions", json=_chat("gpt-4", router="fixed"))

        assert resp.status_code == 400
        assert resp.json()["kind"] == "invalid_threshold"

    def test_empty_messages_is_400(self, client):
        resp = client.post("/v1/chat/completions", json={"model": "router-fixed-0.5", "messages": []})

        assert resp.status_code == 400
        assert "details" in resp.json()


class TestCompletions:
    def test_text_completion(self, client, backend):
        resp = client.post(
            "/v1/completions", json={"model": "router-low-0.1", "prompt": "Once upon a time"}
        )

        assert resp.status_code == 200
        sent = backend.requests[0]
        assert sent["chat"] is False
        assert sent["payload"] == {"model": STRONG, "prompt": "Once upon a time"}


class TestServerErrors:
    def test_upstream_failure_is_500(self, test_settings, pair):
        backend = FakeBackend(error=UpstreamFailure("Completion backend request timed out."))
        controller = RoutingController([FixedStrategy(0.9)], pair, backend)

        with TestClient(create_app(test_settings, controller)) as client:
            resp = client.post("/v1/chat/completions", json=_chat("router-fixed-0.5"))

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Completion backend request timed out.",
            "kind": "upstream_failure",
        }

    def test_estimation_failure_is_500(self, test_settings, pair, backend):
        controller = RoutingController(
            [ExplodingStrategy(EstimationFailure("did not converge"))], pair, backend
        )

        with TestClient(create_app(test_settings, controller)) as client:
            resp = client.post("/v1/chat/completions", json=_chat("router-boom-0.5"))

        assert resp.status_code == 500
        assert resp.json()["kind"] == "estimation_failure"
        assert controller.usage.total() == 0

    def test_unexpected_error_is_500(self, test_settings, pair, backend):
        controller = RoutingController([ExplodingStrategy(RuntimeError("kaput"))], pair, backend)
        app = create_app(test_settings, controller)

        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.post("/v1/chat/completions", json=_chat("router-boom-0.5"))

        assert resp.status_code == 500
        assert resp.json() == {"error": "An unexpected error occurred.", "details": "kaput"}


class TestModels:
    def test_list_models(self, client):
        resp = client.get("/v1/models")

        assert resp.status_code == 200
        data = resp.json()
        assert data["object"] == "list"
        assert [m["id"] for m in data["data"]] == ["router-fixed", "router-low"]
        assert all(m["owned_by"] == "routellm" for m in data["data"])
        assert all(m["created"] > 0 for m in data["data"])

    def test_retrieve_router_model(self, client):
        resp = client.get("/v1/models/router-fixed-0.5")

        assert resp.status_code == 200
        assert resp.json()["id"] == "router-fixed-0.5"

    def test_retrieve_unknown_model(self, client):
        resp = client.get("/v1/models/gpt-4")

        assert resp.status_code == 404
        assert resp.json() == {"error": "Model not found"}


def test_injected_controller_is_not_closed(test_settings, controller, backend):
    with TestClient(create_app(test_settings, controller)):
        pass
    assert not backend.closed
