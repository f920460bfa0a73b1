"""
npm package resolver.
"""

from typing import Any
from urllib.parse import quote, urlparse

import httpx

from repo_trust_guard.config import CollectorConfig
from repo_trust_guard.resolvers.base import PackageResolver
from repo_trust_guard.retry import build_retrying

NPM_HOSTS = ("npmjs.com", "www.npmjs.com", "npmjs.org", "www.npmjs.org")


class NpmResolver(PackageResolver):
    """Resolver for packages published on the npm registry."""

    @property
    def ecosystem_name(self) -> str:
        return "npm"

    def matches(self, url: str) -> bool:
        host = urlparse(url.strip()).netloc.lower()
        return host in NPM_HOSTS

    def package_name_from_url(self, url: str) -> str | None:
        """
        Extract the package name from an npm package page URL.

        Supports plain and scoped packages, with or without a version suffix:
        ``https://www.npmjs.com/package/express``,
        ``https://www.npmjs.com/package/@babel/core/v/7.0.0``.

        Returns:
            Package name, or None if the URL has no package segment.
        """
        parts = [p for p in urlparse(url.strip()).path.split("/") if p]
        if len(parts) < 2 or parts[0] != "package":
            return None
        if parts[1].startswith("@"):
            if len(parts) < 3:
                return None
            return f"{parts[1]}/{parts[2]}"
        return parts[1]

    async def fetch_manifest(
        self, package_name: str, client: httpx.AsyncClient, config: CollectorConfig
    ) -> dict[str, Any]:
        """
        Fetch the package document from the npm registry.

        Raises:
            httpx.HTTPStatusError: If the registry answers with an error status.
            ValueError: If the registry answers with a body that is not JSON.
        """
        url = f"{config.npm_registry.rstrip('/')}/{quote(package_name, safe='@')}"
        async for attempt in build_retrying(config):
            with attempt:
                response = await client.get(url)
                response.raise_for_status()
        return response.json()
