"""Responsive maintainer metric."""

from collections.abc import Sequence

from repo_trust_guard.metrics.base import MetricResult, MetricSpec, completed
from repo_trust_guard.vcs.base import IssueLedger

DAYS_PER_YEAR = 365


def responsiveness(durations: Sequence[float]) -> MetricResult:
    """
    Score how quickly issues get closed.

    value = 1 - mean(close duration in days) / 365, clamped to [0, 1].
    Without any closed issue the project is presumed healthy (1).
    """
    if not durations:
        return completed(METRIC.name, 1.0)
    average = sum(durations) / len(durations)
    value = min(1.0, max(0.0, 1 - average / DAYS_PER_YEAR))
    return completed(METRIC.name, value)


def _check(issues: IssueLedger) -> MetricResult:
    return responsiveness(issues.close_durations)


METRIC = MetricSpec(name="ResponsiveMaintainer", signal="issues", checker=_check)
