"""
Core scoring pipeline for Repo Trust Guard.

A run moves through START -> RESOLVE_URL -> COLLECT_SIGNALS -> COMPUTE_METRICS
-> AGGREGATE -> DONE; any failure ends it in FAILED and yields None.
"""

import asyncio
import time
from collections.abc import Awaitable, Sequence
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, NamedTuple

import httpx
from rich.console import Console

from repo_trust_guard.checkout import list_tree, temporary_checkout
from repo_trust_guard.config import CollectorConfig, load_collector_config
from repo_trust_guard.exceptions import (
    CollectionError,
    MetricComputationError,
    ResolutionError,
)
from repo_trust_guard.http_client import create_async_http_client
from repo_trust_guard.locator import locate_license, locate_readme
from repo_trust_guard.metrics import MetricResult, load_metric_specs
from repo_trust_guard.repository import RepositoryReference, parse_repository_url
from repo_trust_guard.resolvers import resolve_package_url
from repo_trust_guard.vcs import RepositorySignals, get_collector

console = Console(stderr=True)

# --- Constants ---

WEIGHT_BUS_FACTOR = 0.20
WEIGHT_RESPONSIVENESS = 0.18
WEIGHT_CORRECTNESS = 0.18
WEIGHT_RAMP_UP_TIME = 0.14
WEIGHT_LICENSING = 0.14
WEIGHT_DEPENDENCY_PINNING = 0.10
WEIGHT_CODE_REVIEW = 0.06

# Same order as the calculate_score arguments
WEIGHTS = (
    WEIGHT_BUS_FACTOR,
    WEIGHT_RESPONSIVENESS,
    WEIGHT_CORRECTNESS,
    WEIGHT_RAMP_UP_TIME,
    WEIGHT_LICENSING,
    WEIGHT_DEPENDENCY_PINNING,
    WEIGHT_CODE_REVIEW,
)

# Registry admission rule: artifacts scoring below this are rejected.
ADMISSION_THRESHOLD = 0.5


# --- Data Structures ---


class RunState(str, Enum):
    """Stages of a scoring run."""

    START = "start"
    RESOLVE_URL = "resolve_url"
    COLLECT_SIGNALS = "collect_signals"
    COMPUTE_METRICS = "compute_metrics"
    AGGREGATE = "aggregate"
    DONE = "done"
    FAILED = "failed"


class RepoDataResult(NamedTuple):
    """
    The result of scoring one repository.

    url is the canonical repository URL the input resolved to: package page
    URLs and decorated git URLs are reported as https://github.com/owner/repo.

    Latencies are seconds elapsed between the start of the run and the moment
    each value was computed, so they grow monotonically across metrics rather
    than measuring each metric in isolation.
    """

    url: str
    net_score: float
    net_score_latency: float
    ramp_up: float
    ramp_up_latency: float
    correctness: float
    correctness_latency: float
    bus_factor: float
    bus_factor_latency: float
    responsive_maintainer: float
    responsive_maintainer_latency: float
    license: float
    license_latency: float
    good_pinning_practice: float
    good_pinning_practice_latency: float
    pull_request: float
    pull_request_latency: float


# --- Aggregation ---


def calculate_score(
    bus_factor: float,
    responsiveness: float,
    correctness: float,
    ramp_up: float,
    licensing: float,
    pinning: float,
    review: float,
    weights: Sequence[float] = WEIGHTS,
) -> float:
    """
    Combine the seven metric values into the NetScore.

    NetScore = sum(value x weight) / sum(weight). Dividing by the weight sum
    keeps the result in [0, 1] whatever the weights add up to.

    Args:
        bus_factor, responsiveness, correctness, ramp_up, licensing, pinning,
        review: Metric values in [0, 1].
        weights: Seven weights in argument order (default: WEIGHTS).

    Returns:
        Weighted mean in [0, 1].

    Raises:
        ValueError: If weights does not hold seven values with a positive sum.
    """
    if len(weights) != 7:
        raise ValueError(f"Expected 7 weights, got {len(weights)}")
    weight_sum = sum(weights)
    if weight_sum <= 0:
        raise ValueError("Weights must have a positive sum")

    values = (
        bus_factor,
        responsiveness,
        correctness,
        ramp_up,
        licensing,
        pinning,
        review,
    )
    weighted_sum = sum(value * weight for value, weight in zip(values, weights))
    return weighted_sum / weight_sum


def is_admissible(result: RepoDataResult | None) -> bool:
    """Apply the registry admission rule to a scoring result."""
    return result is not None and result.net_score >= ADMISSION_THRESHOLD


# --- Pipeline ---


async def _join_all(*awaitables: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently; the first failure cancels the rest and re-raises."""
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _inspect_tree(checkout: Path) -> tuple[str | None, str | None]:
    tree = list_tree(checkout)
    readme = locate_readme(tree)
    license_name = locate_license(tree, readme)
    readme_text = (
        readme.read_text(encoding="utf-8", errors="replace") if readme else None
    )
    return readme_text, license_name


class ScoringRun:
    """One scoring request, from URL to RepoDataResult."""

    def __init__(
        self,
        url: str,
        config: CollectorConfig,
        verbose: bool = False,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.config = config
        self.verbose = verbose
        self.state = RunState.START
        self.failed_state: RunState | None = None
        self.started_at = 0.0
        self._client = client

    def _transition(self, state: RunState) -> None:
        self.state = state
        if self.verbose:
            console.print(f"[dim]{self.url}: {state.value}[/dim]")

    def _fail(self, error: Exception) -> None:
        self.failed_state = self.state
        self._transition(RunState.FAILED)
        console.print(
            f"  [yellow]⚠️  Scoring failed for {self.url} "
            f"during {self.failed_state.value}: {error}[/yellow]"
        )

    async def execute(self) -> RepoDataResult | None:
        """
        Run the pipeline.

        Returns:
            RepoDataResult, or None if the URL could not be resolved or any
            collection or computation step failed.
        """
        self.started_at = time.perf_counter()
        client = self._client or create_async_http_client(self.config)
        try:
            self._transition(RunState.RESOLVE_URL)
            repo_url = await resolve_package_url(self.url, client, self.config)

            self._transition(RunState.COLLECT_SIGNALS)
            signals = await self._collect_signals(repo_url, client)

            self._transition(RunState.COMPUTE_METRICS)
            results = await self._compute_metrics(signals)

            self._transition(RunState.AGGREGATE)
            result = self._aggregate(signals.repo_url, results)

            self._transition(RunState.DONE)
            return result
        except (ResolutionError, CollectionError, MetricComputationError) as e:
            self._fail(e)
            return None
        finally:
            if self._client is None:
                await client.aclose()

    async def _inspect_checkout(
        self, repo: RepositoryReference
    ) -> tuple[str | None, str | None]:
        async with temporary_checkout(repo.url) as checkout:
            return await asyncio.to_thread(_inspect_tree, checkout)

    async def _collect_signals(
        self, repo_url: str, client: httpx.AsyncClient
    ) -> RepositorySignals:
        repo = parse_repository_url(repo_url)
        if repo is None:
            raise ResolutionError(f"Not a GitHub repository URL: {repo_url}")

        async with get_collector(self.config, client=client) as collector:
            (
                (readme_text, license_name),
                contributors,
                issues,
                review_stats,
                manifest,
            ) = await _join_all(
                self._inspect_checkout(repo),
                collector.fetch_commit_authors(repo),
                collector.fetch_issue_ledger(repo),
                collector.fetch_review_stats(repo),
                collector.fetch_manifest(repo),
            )

        if self.verbose:
            console.print(
                f"[dim]  {len(contributors)} contributor(s), "
                f"{issues.open_count} open / {issues.closed_count} closed issue(s), "
                f"license: {license_name or 'unknown'}[/dim]"
            )

        return RepositorySignals(
            repo_url=repo.url,
            contributors=MappingProxyType(dict(contributors)),
            issues=issues,
            readme_text=readme_text,
            license_name=license_name,
            manifest=MappingProxyType(manifest) if manifest is not None else None,
            review_stats=review_stats,
        )

    async def _compute_metrics(
        self, signals: RepositorySignals
    ) -> dict[str, MetricResult]:
        specs = load_metric_specs()
        results = await _join_all(
            *[
                asyncio.to_thread(spec.checker, getattr(signals, spec.signal))
                for spec in specs
            ]
        )
        return {result.name: result for result in results}

    def _aggregate(
        self, repo_url: str, results: dict[str, MetricResult]
    ) -> RepoDataResult:
        def value(name: str) -> float:
            return results[name].value

        def latency(name: str) -> float:
            return results[name].completed_at - self.started_at

        net_score = calculate_score(
            value("BusFactor"),
            value("ResponsiveMaintainer"),
            value("Correctness"),
            value("RampUp"),
            value("License"),
            value("GoodPinningPractice"),
            value("PullRequest"),
        )
        net_score_latency = time.perf_counter() - self.started_at

        return RepoDataResult(
            url=repo_url,
            net_score=net_score,
            net_score_latency=net_score_latency,
            ramp_up=value("RampUp"),
            ramp_up_latency=latency("RampUp"),
            correctness=value("Correctness"),
            correctness_latency=latency("Correctness"),
            bus_factor=value("BusFactor"),
            bus_factor_latency=latency("BusFactor"),
            responsive_maintainer=value("ResponsiveMaintainer"),
            responsive_maintainer_latency=latency("ResponsiveMaintainer"),
            license=value("License"),
            license_latency=latency("License"),
            good_pinning_practice=value("GoodPinningPractice"),
            good_pinning_practice_latency=latency("GoodPinningPractice"),
            pull_request=value("PullRequest"),
            pull_request_latency=latency("PullRequest"),
        )


async def score(
    url: str,
    config: CollectorConfig | None = None,
    verbose: bool = False,
    client: httpx.AsyncClient | None = None,
) -> RepoDataResult | None:
    """
    Score a repository or package-manager URL.

    Args:
        url: Repository URL (https://github.com/owner/repo) or npm package URL.
        config: Collector configuration. Loaded from the environment when omitted.
        verbose: Print pipeline stages to stderr.
        client: Optional HTTP client shared with the caller.

    Returns:
        RepoDataResult, or None when resolution, collection or metric
        computation failed.

    Raises:
        ValueError: If no GitHub token is configured.
    """
    run = ScoringRun(url, config or load_collector_config(), verbose, client)
    return await run.execute()


def score_repository(
    url: str, config: CollectorConfig | None = None, verbose: bool = False
) -> RepoDataResult | None:
    """Synchronous wrapper around score() running on a fresh event loop."""
    return asyncio.run(score(url, config, verbose))
