"""Central settings: loads from ~/.routellm/config.json + environment variables."""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from routellm.config.constants import CONFIG_FILE, ENV_FILE
from routellm.config.models import (
    SECRET_FIELD_ENV_MAP,
    EmbeddingConfig,
    EstimatorConfig,
    ModelPairConfig,
    RandomStrategyConfig,
    ServerConfig,
    SWRankingConfig,
    UpstreamConfig,
)

logger = logging.getLogger("routellm.config")


class Settings(BaseSettings):
    """All routellm configuration in one place.

    Priority (highest → lowest):
      1. Explicit keyword arguments
      2. Environment variables (ROUTELLM_ prefix, ``__`` for nesting)
      3. .env file
      4. ~/.routellm/config.json
      5. Defaults defined here
    """

    model_config = SettingsConfigDict(
        env_prefix="ROUTELLM_",
        env_nested_delimiter="__",
        env_file=(".env", str(ENV_FILE)),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Sub-configs ---
    models: ModelPairConfig = Field(default_factory=ModelPairConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    estimator: EstimatorConfig = Field(default_factory=EstimatorConfig)
    random: RandomStrategyConfig = Field(default_factory=RandomStrategyConfig)
    sw_ranking: SWRankingConfig = Field(default_factory=SWRankingConfig)

    # --- Top-level settings ---
    strategies: list[str] = Field(default_factory=lambda: ["random"])

    @field_validator("strategies")
    @classmethod
    def validate_strategies(cls, v: list[str]) -> list[str]:
        names = [name.strip() for name in v if name.strip()]
        if not names:
            raise ValueError("at least one routing strategy must be enabled")
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate strategy names in {names}")
        return names

    @model_validator(mode="before")
    @classmethod
    def load_config_file(cls, values: dict) -> dict:
        """Layer config.json under explicit/env values, then fill secrets and host/port."""
        if CONFIG_FILE.exists():
            try:
                file_data = json.loads(CONFIG_FILE.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Ignoring unreadable %s: %s", CONFIG_FILE, exc)
            else:
                if _strip_secrets(file_data):
                    CONFIG_FILE.write_text(json.dumps(file_data, indent=2), encoding="utf-8")
                values = {**file_data, **{k: v for k, v in values.items() if v is not None}}

        lookup = _EnvLookup()
        for key_path, env_var in SECRET_FIELD_ENV_MAP.items():
            _set_if_unset(values, key_path, lookup.get(env_var))
        for field in ("host", "port"):
            raw = lookup.get(f"ROUTELLM_{field.upper()}")
            if raw:
                _set_nested(values, ("server", field), int(raw) if field == "port" else raw)
        return values

    def save(self) -> None:
        """Persist current settings to config.json (secrets excluded)."""
        CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        data = self.model_dump(mode="json")
        CONFIG_FILE.write_text(json.dumps(data, indent=2), encoding="utf-8")

    @classmethod
    def config_exists(cls) -> bool:
        return CONFIG_FILE.exists()


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()


class _EnvLookup:
    """Process environment first, then ~/.routellm/.env (read once)."""

    def __init__(self) -> None:
        from routellm.config.env_utils import read_env_file

        self._file_values = read_env_file()

    def get(self, name: str) -> str:
        return os.environ.get(name) or self._file_values.get(name, "")


def _strip_secrets(file_data: dict) -> bool:
    """Move secrets found in config.json data into .env; True if any moved."""
    from routellm.config.env_utils import write_env_key

    moved = False
    for key_path, env_var in SECRET_FIELD_ENV_MAP.items():
        parent = _walk(file_data, key_path[:-1])
        value = parent.get(key_path[-1]) if parent is not None else None
        if value and isinstance(value, str):
            write_env_key(env_var, value)
            parent[key_path[-1]] = ""
            moved = True
    return moved


def _walk(values: dict, path: tuple[str, ...]) -> dict | None:
    """Nested dict at *path*, or None when some level is missing or not a dict."""
    node = values
    for part in path:
        node = node.get(part)
        if not isinstance(node, dict):
            return None
    return node


def _set_nested(values: dict, path: tuple[str, ...], value) -> None:
    """Set *value* at *path*, creating dicts as needed.

    A level that already holds a model instance was passed explicitly and is
    left untouched.
    """
    node = values
    for part in path[:-1]:
        child = node.setdefault(part, {})
        if not isinstance(child, dict):
            return
        node = child
    node[path[-1]] = value


def _set_if_unset(values: dict, path: tuple[str, ...], value: str) -> None:
    if not value:
        return
    parent = _walk(values, path[:-1])
    if parent is not None and parent.get(path[-1]):
        return
    _set_nested(values, path, value)
