"""
Resolver registry and repository URL resolution.
"""

import httpx

from repo_trust_guard.config import CollectorConfig
from repo_trust_guard.exceptions import ResolutionError
from repo_trust_guard.repository import (
    normalize_repository_field,
    parse_repository_url,
)
from repo_trust_guard.resolvers.base import PackageResolver
from repo_trust_guard.resolvers.npm import NpmResolver

# Global registry of resolvers
_RESOLVERS: dict[str, PackageResolver] = {}


def _initialize_resolvers() -> None:
    """Initialize all registered resolvers."""
    if not _RESOLVERS:
        _RESOLVERS["npm"] = NpmResolver()


def get_resolver(ecosystem: str) -> PackageResolver | None:
    """
    Get resolver for the specified ecosystem.

    Args:
        ecosystem: Ecosystem name (e.g., 'npm').

    Returns:
        PackageResolver instance or None if ecosystem is not registered.
    """
    _initialize_resolvers()
    return _RESOLVERS.get(ecosystem.lower())


def register_resolver(ecosystem: str, resolver: PackageResolver) -> None:
    """Register a resolver for an additional package manager."""
    _initialize_resolvers()
    _RESOLVERS[ecosystem.lower()] = resolver


def find_resolver_for_url(url: str) -> PackageResolver | None:
    """Return the resolver whose package manager hosts the URL, if any."""
    _initialize_resolvers()
    for resolver in _RESOLVERS.values():
        if resolver.matches(url):
            return resolver
    return None


async def resolve_package_url(
    url: str, client: httpx.AsyncClient, config: CollectorConfig
) -> str:
    """
    Resolve a repository or package-manager URL to a canonical repository URL.

    Package-manager URLs are resolved through the registry manifest's
    ``repository`` field; repository URLs are normalized directly.

    Args:
        url: Repository URL or package page URL.
        client: HTTP client used for the registry request.
        config: Collector configuration (registry endpoint, retry policy).

    Returns:
        Canonical ``https://github.com/owner/repo`` URL.

    Raises:
        ResolutionError: If no usable repository reference can be derived.
    """
    if not url or not url.strip():
        raise ResolutionError("Empty repository URL.")

    resolver = find_resolver_for_url(url)
    if resolver is None:
        reference = parse_repository_url(url)
        if reference is None:
            raise ResolutionError(f"Not a GitHub repository URL: {url}")
        return reference.url

    package_name = resolver.package_name_from_url(url)
    if not package_name:
        raise ResolutionError(f"Invalid {resolver.ecosystem_name} package URL: {url}")

    try:
        manifest = await resolver.fetch_manifest(package_name, client, config)
    except (httpx.HTTPError, ValueError) as e:
        raise ResolutionError(
            f"Could not fetch {resolver.ecosystem_name} manifest for {package_name}: {e}"
        ) from e
    if not isinstance(manifest, dict):
        raise ResolutionError(
            f"Unexpected {resolver.ecosystem_name} manifest for {package_name}."
        )

    repository_url = normalize_repository_field(manifest.get("repository"))
    if repository_url is None:
        raise ResolutionError(
            f"No GitHub repository found in {resolver.ecosystem_name} manifest for {package_name}."
        )
    return repository_url
