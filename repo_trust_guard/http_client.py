"""Shared HTTP client handling."""

import httpx

from repo_trust_guard.config import CollectorConfig


def create_async_http_client(config: CollectorConfig) -> httpx.AsyncClient:
    """Create an async HTTP client with connection pooling.

    Every scoring run owns its client, so concurrent runs never share
    connection state or event loops.
    """
    return httpx.AsyncClient(
        verify=config.verify_ssl,
        timeout=config.timeout,
        follow_redirects=True,
        limits=httpx.Limits(
            max_connections=20,
            max_keepalive_connections=10,
            keepalive_expiry=30.0,
        ),
    )
