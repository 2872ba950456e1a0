"""Utilities for reading and writing the ~/.routellm/.env file."""

from __future__ import annotations

from pathlib import Path

from routellm.config.constants import ENV_FILE


def write_env_key(env_key: str, value: str, env_path: Path | None = None) -> None:
    """Write or update a key in the .env file.

    Parameters
    ----------
    env_key:
        The environment variable name (e.g. ``OPENAI_API_KEY``).
    value:
        The value to store.
    env_path:
        Override .env location (default: ``~/.routellm/.env``).
    """
    if env_path is None:
        env_path = ENV_FILE
    env_path.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    if env_path.exists():
        lines = env_path.read_text(encoding="utf-8").splitlines()

    prefix = f"{env_key}="
    found = any(line.startswith(prefix) for line in lines)
    lines = [f"{prefix}{value}" if line.startswith(prefix) else line for line in lines]
    if not found:
        lines.append(f"{prefix}{value}")

    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def read_env_file(env_path: Path | None = None) -> dict[str, str]:
    """Parse the .env file into key/value pairs, dropping ``# ...`` comments."""
    if env_path is None:
        env_path = ENV_FILE

    result: dict[str, str] = {}
    if not env_path.exists():
        return result

    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        return result

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        value = value.split(" #", 1)[0]
        result[key.strip()] = value.strip().strip('"').strip("'")

    return result
