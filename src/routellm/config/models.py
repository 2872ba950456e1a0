"""Pydantic models for configuration sub-sections."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from routellm.config.constants import (
    DEFAULT_API_BASE,
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_HOST,
    DEFAULT_NUM_TIERS,
    DEFAULT_PORT,
    DEFAULT_STRONG_MODEL,
    DEFAULT_WEAK_MODEL,
)


class ModelPairConfig(BaseModel):
    """The two concrete models every routing decision picks between."""

    strong_model: str = DEFAULT_STRONG_MODEL
    weak_model: str = DEFAULT_WEAK_MODEL

    @model_validator(mode="after")
    def validate_distinct(self) -> "ModelPairConfig":
        if not self.strong_model or not self.weak_model:
            raise ValueError("strong_model and weak_model must both be set")
        if self.strong_model == self.weak_model:
            raise ValueError(
                f"strong_model and weak_model must differ, got '{self.strong_model}' for both"
            )
        return self


class ServerConfig(BaseModel):
    """HTTP server settings."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "info"


class UpstreamConfig(BaseModel):
    """OpenAI-compatible completion backend the routed request is forwarded to."""

    base_url: str = DEFAULT_API_BASE
    api_key: str = Field(default="", exclude=True)
    timeout_seconds: float = 60.0


class EmbeddingConfig(BaseModel):
    """Embedding provider used by similarity-based strategies."""

    base_url: str = DEFAULT_API_BASE
    model: str = DEFAULT_EMBEDDING_MODEL
    api_key: str = Field(default="", exclude=True)
    timeout_seconds: float = 30.0


class EstimatorConfig(BaseModel):
    """Optimizer limits for rating estimation."""

    max_iterations: int = 1000
    tolerance: float = 1e-5

    @field_validator("max_iterations")
    @classmethod
    def validate_max_iterations(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_iterations must be >= 1, got {v}")
        return v


class RandomStrategyConfig(BaseModel):
    """Random baseline: ``seed`` makes draws reproducible."""

    seed: int | None = None


class SWRankingConfig(BaseModel):
    """Similarity-weighted ranking strategy settings.

    ``strong_model`` / ``weak_model`` name the models as they appear in the
    battle corpus, which may differ from the ids served upstream.
    """

    num_tiers: int = DEFAULT_NUM_TIERS
    strong_model: str = DEFAULT_STRONG_MODEL
    weak_model: str = DEFAULT_WEAK_MODEL
    battle_datasets: list[str] = Field(default_factory=list)
    embedding_datasets: list[str] = Field(default_factory=list)

    @field_validator("num_tiers")
    @classmethod
    def validate_num_tiers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"num_tiers must be >= 1, got {v}")
        return v


# Maps (nested_key_tuple) -> env_var_name for secret fields.
# Used by the migration and env-loading logic in settings.py.
SECRET_FIELD_ENV_MAP: dict[tuple[str, ...], str] = {
    ("upstream", "api_key"): "OPENAI_API_KEY",
    ("embedding", "api_key"): "ROUTELLM_EMBEDDING_API_KEY",
}
