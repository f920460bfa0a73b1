"""Ramp-up time metric."""

import re

from repo_trust_guard.exceptions import MetricComputationError
from repo_trust_guard.metrics.base import MetricResult, MetricSpec, completed

# One pattern per documentation category; FAQ and help count as one.
RAMP_UP_PATTERNS = [
    re.compile(r"installation", re.IGNORECASE),
    re.compile(r"usage", re.IGNORECASE),
    re.compile(r"configuration", re.IGNORECASE),
    re.compile(r"faq|help", re.IGNORECASE),
    re.compile(r"resources", re.IGNORECASE),
]


def ramp_up_time(readme_text: str | None) -> MetricResult:
    """
    Fraction of onboarding categories the README covers.

    Raises:
        MetricComputationError: If the repository has no README.
    """
    if readme_text is None:
        raise MetricComputationError("README file not found.")
    matched = sum(1 for pattern in RAMP_UP_PATTERNS if pattern.search(readme_text))
    return completed(METRIC.name, matched / len(RAMP_UP_PATTERNS))


METRIC = MetricSpec(name="RampUp", signal="readme_text", checker=ramp_up_time)
