"""Bus factor metric."""

from collections.abc import Mapping

from repo_trust_guard.metrics.base import MetricResult, MetricSpec, completed

# Share of all commits the counted contributors must account for.
ACCUMULATION = 0.975


def bus_factor(contributors: Mapping[str, int]) -> MetricResult:
    """
    Fraction of contributors needed to cover 97.5% of the commit history.

    Contributors are consumed in descending commit order until their running
    total reaches ACCUMULATION of all commits. A low value means a few people
    wrote almost everything.

    Returns:
        MetricResult with value = consumed / distinct contributors
        (0 for an empty ledger).
    """
    counts = sorted(contributors.values(), reverse=True)
    if not counts:
        return completed(METRIC.name, 0.0)

    threshold = sum(counts) * ACCUMULATION
    cumulative = 0
    consumed = 0
    for commits in counts:
        cumulative += commits
        consumed += 1
        if cumulative >= threshold:
            break

    return completed(METRIC.name, consumed / len(counts))


METRIC = MetricSpec(name="BusFactor", signal="contributors", checker=bus_factor)
