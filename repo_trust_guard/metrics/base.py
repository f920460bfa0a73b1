"""
Shared metric types.
"""

import time
from typing import Any, Callable, NamedTuple


class MetricResult(NamedTuple):
    """Value of one metric and the moment it was computed."""

    name: str
    value: float  # in [0, 1]
    completed_at: float  # time.perf_counter() reading


class MetricSpec(NamedTuple):
    """Specification for a metric calculator."""

    name: str
    signal: str  # RepositorySignals field handed to the checker
    checker: Callable[[Any], MetricResult]


def completed(name: str, value: float) -> MetricResult:
    """Stamp a metric value with its completion time."""
    return MetricResult(name, float(value), time.perf_counter())
