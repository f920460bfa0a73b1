"""
Shared fixtures.
"""

import httpx
import pytest

from repo_trust_guard.config import CollectorConfig


@pytest.fixture
def collector_config():
    """Collector configuration with a token and no retry backoff."""
    return CollectorConfig(token="test-token", max_retries=2, retry_backoff=0)


@pytest.fixture
def make_client():
    """Build an AsyncClient that answers every request with a handler."""

    def _make(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
