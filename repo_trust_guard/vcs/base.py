"""
Signal types and the collector interface shared by VCS providers.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, NamedTuple

from repo_trust_guard.repository import RepositoryReference

# login -> number of commits authored on the default branch
ContributorLedger = dict[str, int]


class IssueLedger(NamedTuple):
    """Issue lifecycle counts and close durations."""

    open_count: int = 0
    closed_count: int = 0
    close_durations: tuple[float, ...] = ()  # days, in fetch order


class PullRequestReview(NamedTuple):
    """Review metadata of a single merged pull request."""

    number: int
    has_reviewer: bool
    changed_lines: int | None  # None when the file list could not be fetched


class ReviewStats(NamedTuple):
    """Review metadata of recently closed pull requests."""

    available: bool = True  # False when the pull request list itself failed
    merged_prs: tuple[PullRequestReview, ...] = ()


class RepositorySignals(NamedTuple):
    """Everything collected for one repository before metric computation."""

    repo_url: str
    contributors: Mapping[str, int]
    issues: IssueLedger
    readme_text: str | None
    license_name: str | None
    manifest: Mapping[str, Any] | None
    review_stats: ReviewStats


class BaseSignalCollector(ABC):
    """Interface for platform-specific signal collectors."""

    @abstractmethod
    def get_platform_name(self) -> str:
        """Return the platform identifier (e.g. 'github')."""

    @abstractmethod
    async def fetch_commit_authors(
        self, repo: RepositoryReference
    ) -> ContributorLedger:
        """Tally commits per author login over the default branch history."""

    @abstractmethod
    async def fetch_issue_ledger(self, repo: RepositoryReference) -> IssueLedger:
        """Count open and closed issues and record close durations."""

    @abstractmethod
    async def fetch_review_stats(self, repo: RepositoryReference) -> ReviewStats:
        """Collect reviewer and changed-line data for merged pull requests."""

    @abstractmethod
    async def fetch_manifest(
        self, repo: RepositoryReference
    ) -> dict[str, Any] | None:
        """Fetch the dependency manifest at the default branch head."""
