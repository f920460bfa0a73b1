"""
Tests for the scoring pipeline and NetScore aggregation.
"""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import patch

import pytest

from repo_trust_guard.core import (
    ADMISSION_THRESHOLD,
    WEIGHTS,
    RepoDataResult,
    RunState,
    ScoringRun,
    _join_all,
    calculate_score,
    is_admissible,
    score,
)
from repo_trust_guard.exceptions import CheckoutError, CollectionError
from repo_trust_guard.vcs.base import IssueLedger, ReviewStats

# --- Fakes ---


class FakeCollector:
    """Collector returning canned signals."""

    def __init__(self, issues=None, manifest=None, failing=None):
        self.issues = issues or IssueLedger(1, 3, (0.0,))
        self.manifest = manifest
        self.failing = failing
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def fetch_commit_authors(self, repo):
        return {"alice": 10}

    async def fetch_issue_ledger(self, repo):
        if self.failing:
            raise self.failing
        return self.issues

    async def fetch_review_stats(self, repo):
        return ReviewStats()

    async def fetch_manifest(self, repo):
        return self.manifest


def fake_checkout(files):
    """Build a temporary_checkout replacement holding the given files."""
    cloned = []

    @asynccontextmanager
    async def _checkout(repo_url, tmp_root):
        cloned.append(repo_url)
        for name, content in files.items():
            (tmp_root / name).write_text(content, encoding="utf-8")
        yield tmp_root

    return _checkout, cloned


@pytest.fixture
def run_pipeline(tmp_path, collector_config):
    """Run a ScoringRun with a fake collector and checkout."""

    def _run(url, files, collector):
        checkout, cloned = fake_checkout(files)

        def checkout_for(repo_url):
            return checkout(repo_url, tmp_path)

        run = ScoringRun(url, collector_config)
        with patch(
            "repo_trust_guard.core.get_collector", return_value=collector
        ), patch("repo_trust_guard.core.temporary_checkout", checkout_for):
            result = asyncio.run(run.execute())
        return run, result, cloned

    return _run


HEALTHY_FILES = {
    "README.md": "# Demo\n\n## Installation\n\n## Usage\n",
    "LICENSE": "MIT License\n\nCopyright (c) 2024",
}


# --- Aggregation ---


class TestCalculateScore:
    """Test the weighted NetScore."""

    def test_weights_sum_to_one(self):
        assert sum(WEIGHTS) == pytest.approx(1.0)
        assert len(WEIGHTS) == 7

    def test_all_perfect(self):
        assert calculate_score(1, 1, 1, 1, 1, 1, 1) == pytest.approx(1.0)

    def test_all_zero(self):
        assert calculate_score(0, 0, 0, 0, 0, 0, 0) == 0

    def test_weighted_mean(self):
        net = calculate_score(0.8, 0.7, 0.9, 0.6, 1.0, 0.9, 0.75)
        assert round(net, 3) == 0.807

    def test_weight_scaling_does_not_change_score(self):
        values = (0.8, 0.7, 0.9, 0.6, 1.0, 0.9, 0.75)
        doubled = [w * 2 for w in WEIGHTS]
        assert calculate_score(*values, weights=doubled) == pytest.approx(
            calculate_score(*values)
        )

    def test_bus_factor_dominates(self):
        """Only bus factor set: the score equals its weight."""
        assert calculate_score(1, 0, 0, 0, 0, 0, 0) == pytest.approx(0.20)

    def test_invalid_weight_count(self):
        with pytest.raises(ValueError, match="Expected 7 weights"):
            calculate_score(1, 1, 1, 1, 1, 1, 1, weights=(1, 1))

    def test_non_positive_weight_sum(self):
        with pytest.raises(ValueError, match="positive sum"):
            calculate_score(1, 1, 1, 1, 1, 1, 1, weights=(0,) * 7)


class TestAdmission:
    def _result(self, net_score):
        return RepoDataResult("https://github.com/o/r", net_score, *([0.0] * 15))

    def test_threshold(self):
        assert is_admissible(self._result(ADMISSION_THRESHOLD))
        assert is_admissible(self._result(0.9))
        assert not is_admissible(self._result(0.49))

    def test_no_result(self):
        assert not is_admissible(None)


# --- Pipeline ---


def test_join_all_cancels_pending_work():
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    async def fail():
        raise CollectionError("boom")

    with pytest.raises(CollectionError):
        asyncio.run(_join_all(slow(), fail()))
    assert cancelled == [True]


class TestScoringRun:
    """Test the full pipeline with faked network and checkout."""

    def test_successful_run(self, run_pipeline):
        collector = FakeCollector(manifest={"dependencies": {"a": "1.0.0", "b": "^1"}})
        run, result, cloned = run_pipeline(
            "https://github.com/octo/demo.git", HEALTHY_FILES, collector
        )

        assert run.state == RunState.DONE
        assert cloned == ["https://github.com/octo/demo"]
        assert collector.closed
        assert result.url == "https://github.com/octo/demo"
        assert result.bus_factor == 1.0
        assert result.correctness == 0.75
        assert result.responsive_maintainer == 1.0
        assert result.ramp_up == pytest.approx(0.4)
        assert result.license == 1.0
        assert result.good_pinning_practice == pytest.approx(0.5)
        assert result.pull_request == 1.0
        assert result.net_score == pytest.approx(0.821)

    def test_package_url_reports_resolved_repository(self, run_pipeline):
        with patch(
            "repo_trust_guard.core.resolve_package_url",
            return_value="https://github.com/octo/demo",
        ):
            _, result, cloned = run_pipeline(
                "https://www.npmjs.com/package/demo", HEALTHY_FILES, FakeCollector()
            )
        assert cloned == ["https://github.com/octo/demo"]
        assert result.url == "https://github.com/octo/demo"

    def test_latencies_share_the_run_start(self, run_pipeline):
        _, result, _ = run_pipeline(
            "https://github.com/octo/demo", HEALTHY_FILES, FakeCollector()
        )
        latencies = [
            getattr(result, field)
            for field in RepoDataResult._fields
            if field.endswith("_latency") and field != "net_score_latency"
        ]
        assert len(latencies) == 7
        for latency in latencies:
            assert 0 <= latency <= result.net_score_latency

    def test_resolution_failure(self, run_pipeline):
        run, result, cloned = run_pipeline(
            "https://gitlab.com/octo/demo", HEALTHY_FILES, FakeCollector()
        )
        assert result is None
        assert run.state == RunState.FAILED
        assert run.failed_state == RunState.RESOLVE_URL
        assert cloned == []

    def test_collection_failure(self, run_pipeline):
        collector = FakeCollector(failing=CollectionError("rate limited"))
        run, result, _ = run_pipeline(
            "https://github.com/octo/demo", HEALTHY_FILES, collector
        )
        assert result is None
        assert run.failed_state == RunState.COLLECT_SIGNALS
        assert collector.closed

    def test_missing_readme_and_license(self, run_pipeline):
        run, result, _ = run_pipeline(
            "https://github.com/octo/demo", {"index.js": ""}, FakeCollector()
        )
        assert result is None
        assert run.failed_state == RunState.COLLECT_SIGNALS

    def test_missing_readme_fails_ramp_up(self, run_pipeline):
        run, result, _ = run_pipeline(
            "https://github.com/octo/demo",
            {"LICENSE": "MIT License"},
            FakeCollector(),
        )
        assert result is None
        assert run.failed_state == RunState.COMPUTE_METRICS

    def test_checkout_failure(self, collector_config):
        @asynccontextmanager
        async def broken_checkout(repo_url):
            raise CheckoutError("clone failed")
            yield

        run = ScoringRun("https://github.com/octo/demo", collector_config)
        with patch(
            "repo_trust_guard.core.get_collector", return_value=FakeCollector()
        ), patch("repo_trust_guard.core.temporary_checkout", broken_checkout):
            assert asyncio.run(run.execute()) is None
        assert run.failed_state == RunState.COLLECT_SIGNALS

    def test_score_entry_point(self, collector_config):
        with patch("repo_trust_guard.core.get_collector", return_value=FakeCollector()):
            assert asyncio.run(score("https://gitlab.com/o/r", collector_config)) is None
