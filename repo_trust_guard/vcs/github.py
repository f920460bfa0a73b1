"""
GitHub signal collector for Repo Trust Guard.

Commit and issue history come from the GitHub GraphQL API using strictly
sequential cursor pagination; pull request review data comes from the REST API
and the dependency manifest from a raw fetch at the default branch head.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from datetime import datetime
from typing import Any

import httpx
from rich.console import Console

from repo_trust_guard.config import CollectorConfig
from repo_trust_guard.exceptions import CollectionError
from repo_trust_guard.http_client import create_async_http_client
from repo_trust_guard.repository import RepositoryReference
from repo_trust_guard.retry import build_retrying
from repo_trust_guard.vcs.base import (
    BaseSignalCollector,
    ContributorLedger,
    IssueLedger,
    PullRequestReview,
    ReviewStats,
)

console = Console(stderr=True)

MANIFEST_FILE = "package.json"
SECONDS_PER_DAY = 24 * 3600

COMMIT_HISTORY_QUERY = """
query CommitHistory($owner: String!, $name: String!, $pageSize: Int!, $cursor: String) {
  repository(owner: $owner, name: $name) {
    defaultBranchRef {
      target {
        ... on Commit {
          history(first: $pageSize, after: $cursor) {
            edges {
              node {
                author {
                  user {
                    login
                  }
                }
              }
            }
            pageInfo {
              hasNextPage
              endCursor
            }
          }
        }
      }
    }
  }
}
"""

ISSUE_HISTORY_QUERY = """
query IssueHistory($owner: String!, $name: String!, $pageSize: Int!, $cursor: String) {
  repository(owner: $owner, name: $name) {
    issues(first: $pageSize, after: $cursor) {
      edges {
        node {
          state
          createdAt
          closedAt
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
  }
}
"""


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _commit_history(repository: dict[str, Any]) -> dict[str, Any] | None:
    branch = repository.get("defaultBranchRef")
    if not branch or not branch.get("target"):
        return None
    return branch["target"].get("history")


def _issue_connection(repository: dict[str, Any]) -> dict[str, Any] | None:
    return repository.get("issues")


class GitHubCollector(BaseSignalCollector):
    """Collects repository signals from GitHub."""

    def __init__(
        self, config: CollectorConfig, client: httpx.AsyncClient | None = None
    ):
        """
        Initialize the GitHub collector.

        Args:
            config: Collector configuration carrying the API token and endpoints.
            client: Optional HTTP client. When omitted the collector creates
                    one and closes it in aclose().

        Raises:
            ValueError: If the configuration has no GitHub token.
        """
        if not config.token:
            raise ValueError(
                "GITHUB_TOKEN is required for GitHub collection.\n"
                "\n"
                "To get started:\n"
                "1. Create a GitHub Personal Access Token (classic):\n"
                "   -> https://github.com/settings/tokens/new\n"
                "2. Select scope: 'public_repo'\n"
                "3. Set the token:\n"
                "   export GITHUB_TOKEN='your_token_here'  # Linux/macOS\n"
                "   or add to your .env file: GITHUB_TOKEN=your_token_here\n"
            )
        self.config = config
        self._owns_client = client is None
        self.client = client or create_async_http_client(config)

    async def __aenter__(self) -> "GitHubCollector":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if the collector created it."""
        if self._owns_client and not self.client.is_closed:
            await self.client.aclose()

    def get_platform_name(self) -> str:
        """Return 'github' as the platform identifier."""
        return "github"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Accept": "application/vnd.github+json",
        }

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request under the retry policy and raise for error statuses."""
        async for attempt in build_retrying(self.config):
            with attempt:
                response = await self.client.request(
                    method, url, headers=self._headers(), **kwargs
                )
                response.raise_for_status()
        return response

    async def _query_graphql(
        self, query: str, variables: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Execute a GraphQL query against the GitHub API.

        Raises:
            CollectionError: If the request fails after retries or the API
                             reports errors.
        """
        try:
            response = await self._send(
                "POST",
                self.config.graphql_endpoint,
                json={"query": query, "variables": variables},
            )
        except httpx.HTTPError as e:
            raise CollectionError(f"GitHub GraphQL request failed: {e}") from e

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise CollectionError(f"GitHub GraphQL response is not JSON: {e}") from e
        if "errors" in data:
            raise CollectionError(f"GitHub API Errors: {data['errors']}")
        return data.get("data") or {}

    async def _paginate(
        self,
        query: str,
        repo: RepositoryReference,
        connection: Callable[[dict[str, Any]], dict[str, Any] | None],
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield connection nodes page by page, advancing one cursor at a time."""
        cursor: str | None = None
        while True:
            variables = {
                "owner": repo.owner,
                "name": repo.name,
                "pageSize": self.config.page_size,
                "cursor": cursor,
            }
            data = await self._query_graphql(query, variables)
            repository = data.get("repository")
            if repository is None:
                raise CollectionError(
                    f"Repository {repo.slug} not found or is inaccessible."
                )

            page = connection(repository)
            if not page:
                return
            for edge in page.get("edges") or []:
                node = edge.get("node") if edge else None
                if node:
                    yield node

            page_info = page.get("pageInfo") or {}
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not cursor:
                return

    async def fetch_commit_authors(
        self, repo: RepositoryReference
    ) -> ContributorLedger:
        """
        Tally commits per author login over the default branch history.

        Commits whose author is not linked to a GitHub account are skipped.
        """
        contributors: ContributorLedger = {}
        async for node in self._paginate(COMMIT_HISTORY_QUERY, repo, _commit_history):
            author = node.get("author") or {}
            login = (author.get("user") or {}).get("login")
            if login:
                contributors[login] = contributors.get(login, 0) + 1
        return contributors

    async def fetch_issue_ledger(self, repo: RepositoryReference) -> IssueLedger:
        """Count open and closed issues and record close durations in days."""
        open_count = 0
        closed_count = 0
        durations: list[float] = []
        async for node in self._paginate(ISSUE_HISTORY_QUERY, repo, _issue_connection):
            if node.get("state") != "CLOSED":
                open_count += 1
                continue
            closed_count += 1
            created_at, closed_at = node.get("createdAt"), node.get("closedAt")
            if not created_at or not closed_at:
                continue
            try:
                elapsed = _parse_timestamp(closed_at) - _parse_timestamp(created_at)
            except ValueError:
                continue
            durations.append(elapsed.total_seconds() / SECONDS_PER_DAY)
        return IssueLedger(open_count, closed_count, tuple(durations))

    async def _fetch_changed_lines(
        self, repo: RepositoryReference, number: int, semaphore: asyncio.Semaphore
    ) -> int | None:
        """Sum changed lines over every page of a pull request's file list."""
        url: str | None = (
            f"{self.config.rest_endpoint}/repos/{repo.slug}/pulls/{number}/files"
        )
        params: dict[str, Any] | None = {"per_page": 100}
        changed_lines = 0
        async with semaphore:
            while url:
                try:
                    response = await self._send("GET", url, params=params)
                    files = response.json()
                except (httpx.HTTPError, json.JSONDecodeError) as e:
                    console.print(
                        f"  [yellow]⚠️  Skipping PR #{number} of {repo.slug}: {e}[/yellow]"
                    )
                    return None
                if not isinstance(files, list):
                    console.print(
                        f"  [yellow]⚠️  Skipping PR #{number} of {repo.slug}: "
                        "unexpected file listing[/yellow]"
                    )
                    return None
                changed_lines += sum(
                    int(f.get("changes", 0) or 0) for f in files if isinstance(f, dict)
                )
                # The next link already carries per_page and page
                url = response.links.get("next", {}).get("url")
                params = None
        return changed_lines

    async def fetch_review_stats(self, repo: RepositoryReference) -> ReviewStats:
        """
        Collect reviewer and changed-line data for recently merged pull requests.

        Failures are absorbed here: a failed pull request listing yields an
        unavailable ReviewStats, and a failed file listing leaves that pull
        request's changed-line count unknown.
        """
        url = f"{self.config.rest_endpoint}/repos/{repo.slug}/pulls"
        try:
            response = await self._send(
                "GET", url, params={"state": "closed", "per_page": 100}
            )
            pulls = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            console.print(
                f"  [yellow]⚠️  Pull request listing failed for {repo.slug}: {e}[/yellow]"
            )
            return ReviewStats(available=False)

        if not isinstance(pulls, list):
            console.print(
                f"  [yellow]⚠️  Unexpected pull request listing for {repo.slug}[/yellow]"
            )
            return ReviewStats(available=False)

        merged = [
            pr for pr in pulls if isinstance(pr, dict) and pr.get("merged_at")
        ]
        reviewed = [bool(pr.get("requested_reviewers")) for pr in merged]
        if not any(reviewed):
            return ReviewStats(
                merged_prs=tuple(
                    PullRequestReview(pr["number"], False, None) for pr in merged
                )
            )

        semaphore = asyncio.Semaphore(self.config.max_concurrent)
        changed_lines = await asyncio.gather(
            *[
                self._fetch_changed_lines(repo, pr["number"], semaphore)
                for pr in merged
            ]
        )
        return ReviewStats(
            merged_prs=tuple(
                PullRequestReview(pr["number"], has_reviewer, lines)
                for pr, has_reviewer, lines in zip(merged, reviewed, changed_lines)
            )
        )

    async def fetch_manifest(
        self, repo: RepositoryReference
    ) -> dict[str, Any] | None:
        """
        Fetch package.json at the default branch head.

        Returns:
            Parsed manifest, or None when the repository has no (valid) manifest.

        Raises:
            CollectionError: If the fetch fails for any reason other than 404.
        """
        url = f"{self.config.raw_endpoint}/{repo.slug}/HEAD/{MANIFEST_FILE}"
        try:
            response = await self._send("GET", url)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise CollectionError(f"Manifest fetch failed for {repo.slug}: {e}") from e
        except httpx.HTTPError as e:
            raise CollectionError(f"Manifest fetch failed for {repo.slug}: {e}") from e

        try:
            manifest = json.loads(response.text)
        except json.JSONDecodeError:
            console.print(
                f"  [yellow]⚠️  {MANIFEST_FILE} of {repo.slug} is not valid JSON[/yellow]"
            )
            return None
        return manifest if isinstance(manifest, dict) else None
