"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from routellm.config.models import ModelPairConfig, RandomStrategyConfig
from routellm.config.settings import Settings
from routellm.routing.controller import RoutingController
from routellm.routing.types import ModelPair
from tests.helpers import STRONG, WEAK, FakeBackend, FixedStrategy


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch):
    """Keep tests away from the real ~/.routellm and API keys."""
    monkeypatch.setattr("routellm.config.settings.CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.setattr("routellm.config.env_utils.ENV_FILE", tmp_path / ".env")
    for var in ("OPENAI_API_KEY", "ROUTELLM_EMBEDDING_API_KEY", "ROUTELLM_HOST", "ROUTELLM_PORT"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing (no real API calls)."""
    return Settings(
        models=ModelPairConfig(strong_model=STRONG, weak_model=WEAK),
        random=RandomStrategyConfig(seed=1234),
        strategies=["random"],
    )


@pytest.fixture
def pair() -> ModelPair:
    return ModelPair(strong=STRONG, weak=WEAK)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def controller(pair: ModelPair, backend: FakeBackend) -> RoutingController:
    return RoutingController(
        {"fixed": FixedStrategy(0.7), "low": FixedStrategy(0.2, name="low")},
        pair,
        backend,
    )
