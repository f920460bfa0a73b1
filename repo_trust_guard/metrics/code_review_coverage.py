"""Code review coverage metric."""

from repo_trust_guard.metrics.base import MetricResult, MetricSpec, completed
from repo_trust_guard.vcs.base import ReviewStats


def code_review_coverage(review_stats: ReviewStats) -> MetricResult:
    """
    Share of merged changed lines that went through a requested review.

    Scoring:
    - Pull request listing failed: 0
    - No merged pull request, or none with a requested reviewer: 1
    - Otherwise: reviewed changed lines / all changed lines, over the merged
      pull requests whose file list could be fetched
    """
    if not review_stats.available:
        return completed(METRIC.name, 0.0)

    merged = review_stats.merged_prs
    if not merged or not any(pr.has_reviewer for pr in merged):
        return completed(METRIC.name, 1.0)

    measured = [pr for pr in merged if pr.changed_lines is not None]
    total_lines = sum(pr.changed_lines for pr in measured)
    if total_lines == 0:
        return completed(METRIC.name, 1.0)

    reviewed_lines = sum(pr.changed_lines for pr in measured if pr.has_reviewer)
    return completed(METRIC.name, reviewed_lines / total_lines)


METRIC = MetricSpec(
    name="PullRequest", signal="review_stats", checker=code_review_coverage
)
