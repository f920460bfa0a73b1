"""License compatibility metric."""

from repo_trust_guard.metrics.base import MetricResult, MetricSpec, completed


def license_compatibility(license_name: str | None) -> MetricResult:
    """1 when a license was classified, 0 otherwise."""
    return completed(METRIC.name, 1.0 if license_name else 0.0)


METRIC = MetricSpec(
    name="License", signal="license_name", checker=license_compatibility
)
