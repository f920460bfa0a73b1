"""
Metric calculators and their registry.

Every calculator is a pure function over already-collected signals. Each
module exposes a METRIC spec naming the signal it consumes.
"""

from importlib import import_module

from repo_trust_guard.metrics.base import MetricResult, MetricSpec

__all__ = ["MetricResult", "MetricSpec", "load_metric_specs"]

_BUILTIN_MODULES = [
    "repo_trust_guard.metrics.bus_factor",
    "repo_trust_guard.metrics.correctness",
    "repo_trust_guard.metrics.responsiveness",
    "repo_trust_guard.metrics.ramp_up_time",
    "repo_trust_guard.metrics.license_compatibility",
    "repo_trust_guard.metrics.dependency_pinning",
    "repo_trust_guard.metrics.code_review_coverage",
]


def _load_builtin_metric_specs() -> list[MetricSpec]:
    specs: list[MetricSpec] = []
    for module_path in _BUILTIN_MODULES:
        module = import_module(module_path)
        spec = getattr(module, "METRIC", None)
        if isinstance(spec, MetricSpec):
            specs.append(spec)
    return specs


def load_metric_specs() -> list[MetricSpec]:
    """Load the metric specs in scoring order, skipping duplicate names."""
    specs: list[MetricSpec] = []
    seen: set[str] = set()
    for spec in _load_builtin_metric_specs():
        if spec.name in seen:
            continue
        seen.add(spec.name)
        specs.append(spec)
    return specs
