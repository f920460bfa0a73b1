"""
Base class for package-manager resolvers.
"""

from abc import ABC, abstractmethod
from typing import Any

import httpx

from repo_trust_guard.config import CollectorConfig


class PackageResolver(ABC):
    """Maps a package-manager URL to the package's registry manifest."""

    @property
    @abstractmethod
    def ecosystem_name(self) -> str:
        """Ecosystem identifier, e.g. 'npm'."""

    @abstractmethod
    def matches(self, url: str) -> bool:
        """Return True if the URL points at this package manager."""

    @abstractmethod
    def package_name_from_url(self, url: str) -> str | None:
        """Extract the package name from a package page URL."""

    @abstractmethod
    async def fetch_manifest(
        self, package_name: str, client: httpx.AsyncClient, config: CollectorConfig
    ) -> dict[str, Any]:
        """Fetch the registry manifest for a package."""
