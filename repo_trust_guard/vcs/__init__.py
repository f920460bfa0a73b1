"""
VCS (Version Control System) signal collection for Repo Trust Guard.

Collectors fetch the raw repository facts (commit authorship, issue lifecycle,
pull request reviews, dependency manifest) that the metrics are computed from.
"""

import httpx

from repo_trust_guard.config import CollectorConfig
from repo_trust_guard.vcs.base import (
    BaseSignalCollector,
    ContributorLedger,
    IssueLedger,
    PullRequestReview,
    RepositorySignals,
    ReviewStats,
)
from repo_trust_guard.vcs.github import GitHubCollector

__all__ = [
    "BaseSignalCollector",
    "ContributorLedger",
    "GitHubCollector",
    "IssueLedger",
    "PullRequestReview",
    "RepositorySignals",
    "ReviewStats",
    "get_collector",
    "list_supported_platforms",
]

# Registry of supported collectors
_COLLECTORS: dict[str, type[GitHubCollector]] = {
    "github": GitHubCollector,
}


def get_collector(
    config: CollectorConfig,
    platform: str = "github",
    client: httpx.AsyncClient | None = None,
) -> GitHubCollector:
    """
    Factory function to get a signal collector instance.

    Args:
        config: Collector configuration (token, endpoints, retry policy).
        platform: VCS platform name. Default: 'github'
        client: Optional HTTP client to share with the caller.

    Returns:
        Initialized collector instance

    Raises:
        ValueError: If platform is not supported
    """
    platform_lower = platform.lower()

    if platform_lower not in _COLLECTORS:
        supported = ", ".join(sorted(_COLLECTORS.keys()))
        raise ValueError(
            f"Unsupported VCS platform: {platform}. Supported platforms: {supported}"
        )

    return _COLLECTORS[platform_lower](config, client=client)


def list_supported_platforms() -> list[str]:
    """List all supported VCS platforms."""
    return sorted(_COLLECTORS.keys())
