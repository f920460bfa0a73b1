"""
Configuration management for Repo Trust Guard.

Loads collector settings from:
1. Environment variables (a .env file is honored)
2. .repo-trust-guard.toml (local config)
3. pyproject.toml (project-level config)
"""

import os
import tomllib
from pathlib import Path
from typing import Any, NamedTuple

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# project_root is the parent directory of repo_trust_guard/
PROJECT_ROOT = Path(__file__).resolve().parent.parent

CONFIG_SECTION = "repo-trust-guard"

DEFAULT_GRAPHQL_ENDPOINT = "https://api.github.com/graphql"
DEFAULT_REST_ENDPOINT = "https://api.github.com"
DEFAULT_RAW_ENDPOINT = "https://raw.githubusercontent.com"
DEFAULT_NPM_REGISTRY = "https://registry.npmjs.org"


class CollectorConfig(NamedTuple):
    """Settings handed to the signal collector and the orchestrator."""

    token: str | None = None
    graphql_endpoint: str = DEFAULT_GRAPHQL_ENDPOINT
    rest_endpoint: str = DEFAULT_REST_ENDPOINT
    raw_endpoint: str = DEFAULT_RAW_ENDPOINT
    npm_registry: str = DEFAULT_NPM_REGISTRY
    page_size: int = 100
    max_retries: int = 3
    retry_backoff: float = 1.0  # seconds, doubled after every failed attempt
    timeout: float = 30.0
    max_concurrent: int = 5
    verify_ssl: bool = True


def load_config_file(config_path: Path) -> dict:
    """Load a TOML configuration file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def get_file_settings() -> dict[str, Any]:
    """
    Load the [tool.repo-trust-guard] table from configuration files.

    Priority:
    1. .repo-trust-guard.toml (local config, highest priority)
    2. pyproject.toml (project-level config, fallback)

    Returns:
        Settings dictionary (empty when no file defines the table).
    """
    for file_name in (".repo-trust-guard.toml", "pyproject.toml"):
        config = load_config_file(PROJECT_ROOT / file_name)
        settings = config.get("tool", {}).get(CONFIG_SECTION, {})
        if settings:
            return dict(settings)
    return {}


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def load_collector_config(
    token: str | None = None, verify_ssl: bool | None = None
) -> CollectorConfig:
    """
    Build a CollectorConfig from files, environment and explicit arguments.

    Explicit arguments win over environment variables, which win over
    configuration files, which win over the built-in defaults.

    Args:
        token: GitHub token. Falls back to the GITHUB_TOKEN environment variable.
        verify_ssl: Whether to verify SSL certificates (None keeps the configured value).

    Returns:
        Immutable collector configuration.
    """
    settings: dict[str, Any] = {}
    file_settings = get_file_settings()
    for field in CollectorConfig._fields:
        if field != "token" and field in file_settings:
            settings[field] = file_settings[field]

    env_overrides: dict[str, Any] = {
        "graphql_endpoint": os.getenv("REPO_TRUST_GUARD_GRAPHQL_ENDPOINT"),
        "rest_endpoint": os.getenv("REPO_TRUST_GUARD_REST_ENDPOINT"),
        "max_retries": _env_int("REPO_TRUST_GUARD_MAX_RETRIES"),
        "retry_backoff": _env_float("REPO_TRUST_GUARD_RETRY_BACKOFF"),
    }
    settings.update({k: v for k, v in env_overrides.items() if v is not None})

    settings["token"] = token or os.getenv("GITHUB_TOKEN")
    if verify_ssl is not None:
        settings["verify_ssl"] = verify_ssl

    return CollectorConfig(**settings)
