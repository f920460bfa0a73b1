"""
Tests for configuration loading.
"""

from unittest.mock import patch

import pytest

from repo_trust_guard.config import (
    DEFAULT_GRAPHQL_ENDPOINT,
    CollectorConfig,
    get_file_settings,
    load_collector_config,
    load_config_file,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the loader reads."""
    for name in (
        "GITHUB_TOKEN",
        "REPO_TRUST_GUARD_GRAPHQL_ENDPOINT",
        "REPO_TRUST_GUARD_REST_ENDPOINT",
        "REPO_TRUST_GUARD_MAX_RETRIES",
        "REPO_TRUST_GUARD_RETRY_BACKOFF",
    ):
        monkeypatch.delenv(name, raising=False)
    with patch("repo_trust_guard.config.get_file_settings", return_value={}):
        yield monkeypatch


def test_defaults(clean_env):
    config = load_collector_config()
    assert config == CollectorConfig()
    assert config.token is None
    assert config.graphql_endpoint == DEFAULT_GRAPHQL_ENDPOINT
    assert config.max_retries == 3
    assert config.retry_backoff == 1.0


def test_token_from_environment(clean_env):
    clean_env.setenv("GITHUB_TOKEN", "env-token")
    assert load_collector_config().token == "env-token"


def test_explicit_token_wins(clean_env):
    clean_env.setenv("GITHUB_TOKEN", "env-token")
    assert load_collector_config(token="cli-token").token == "cli-token"


def test_environment_overrides(clean_env):
    clean_env.setenv("REPO_TRUST_GUARD_GRAPHQL_ENDPOINT", "http://localhost/graphql")
    clean_env.setenv("REPO_TRUST_GUARD_MAX_RETRIES", "5")
    clean_env.setenv("REPO_TRUST_GUARD_RETRY_BACKOFF", "0.5")
    config = load_collector_config()
    assert config.graphql_endpoint == "http://localhost/graphql"
    assert config.max_retries == 5
    assert config.retry_backoff == 0.5


def test_invalid_numbers_are_ignored(clean_env):
    clean_env.setenv("REPO_TRUST_GUARD_MAX_RETRIES", "many")
    assert load_collector_config().max_retries == 3


def test_file_settings_below_environment(clean_env):
    clean_env.setenv("REPO_TRUST_GUARD_MAX_RETRIES", "7")
    with patch(
        "repo_trust_guard.config.get_file_settings",
        return_value={"max_retries": 1, "page_size": 50, "token": "ignored"},
    ):
        config = load_collector_config()
    assert config.max_retries == 7
    assert config.page_size == 50
    assert config.token is None


def test_verify_ssl_override(clean_env):
    assert load_collector_config(verify_ssl=False).verify_ssl is False
    assert load_collector_config().verify_ssl is True


def test_load_config_file_missing(tmp_path):
    assert load_config_file(tmp_path / "missing.toml") == {}


def test_load_config_file_invalid(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("[tool\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Failed to load config"):
        load_config_file(path)


def test_local_file_takes_priority(tmp_path):
    (tmp_path / ".repo-trust-guard.toml").write_text(
        '[tool.repo-trust-guard]\npage_size = 25\n', encoding="utf-8"
    )
    (tmp_path / "pyproject.toml").write_text(
        '[tool.repo-trust-guard]\npage_size = 75\n', encoding="utf-8"
    )
    with patch("repo_trust_guard.config.PROJECT_ROOT", tmp_path):
        assert get_file_settings() == {"page_size": 25}


def test_pyproject_fallback(tmp_path):
    (tmp_path / "pyproject.toml").write_text(
        '[tool.repo-trust-guard]\nmax_concurrent = 2\n', encoding="utf-8"
    )
    with patch("repo_trust_guard.config.PROJECT_ROOT", tmp_path):
        assert get_file_settings() == {"max_concurrent": 2}
