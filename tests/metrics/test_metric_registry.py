"""
Tests for metric registry loading.
"""

from unittest.mock import patch

from repo_trust_guard.metrics import MetricSpec, load_metric_specs
from repo_trust_guard.metrics.bus_factor import METRIC as BUS_FACTOR
from repo_trust_guard.vcs.base import RepositorySignals


def test_load_metric_specs_order():
    names = [spec.name for spec in load_metric_specs()]
    assert names == [
        "BusFactor",
        "Correctness",
        "ResponsiveMaintainer",
        "RampUp",
        "License",
        "GoodPinningPractice",
        "PullRequest",
    ]


def test_metric_signals_exist():
    """Every spec names a field the collector fills in."""
    for spec in load_metric_specs():
        assert spec.signal in RepositorySignals._fields


def test_load_metric_specs_deduplicates_names():
    duplicate = MetricSpec(BUS_FACTOR.name, "contributors", lambda _: None)
    with patch(
        "repo_trust_guard.metrics._load_builtin_metric_specs",
        return_value=[BUS_FACTOR, duplicate],
    ):
        specs = load_metric_specs()
    assert specs == [BUS_FACTOR]
