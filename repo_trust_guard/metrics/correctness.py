"""Correctness metric."""

from repo_trust_guard.metrics.base import MetricResult, MetricSpec, completed
from repo_trust_guard.vcs.base import IssueLedger


def correctness(open_count: int, closed_count: int) -> MetricResult:
    """
    Share of issues that have been closed.

    With no issues at all the ratio is undefined and the worst value (0) is
    reported.
    """
    total = open_count + closed_count
    if total == 0:
        return completed(METRIC.name, 0.0)
    return completed(METRIC.name, 1 - open_count / total)


def _check(issues: IssueLedger) -> MetricResult:
    return correctness(issues.open_count, issues.closed_count)


METRIC = MetricSpec(name="Correctness", signal="issues", checker=_check)
