"""Paths and default values used across the project."""

from pathlib import Path

# Base directory for all routellm data
ROUTELLM_HOME = Path.home() / ".routellm"

CONFIG_FILE = ROUTELLM_HOME / "config.json"
ENV_FILE = ROUTELLM_HOME / ".env"

# Server defaults
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 6060

# Default routed pair
DEFAULT_STRONG_MODEL = "gpt-4-1106-preview"
DEFAULT_WEAK_MODEL = "mixtral-8x7b-instruct-v0.1"

# OpenAI-compatible upstream defaults
DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"

# Model identifiers served by the router look like "router-<strategy>-<threshold>"
ROUTER_MODEL_PREFIX = "router"
MODEL_OWNER = "routellm"

# Elo-style rating scale
INITIAL_RATING = 1500.0
RATING_SCALE = 400.0
RATING_BASE = 10.0

DEFAULT_NUM_TIERS = 10

# Winner markers that denote a tie in arena battle dumps
TIE_MARKERS = frozenset({"tie", "tie (bothbad)"})
