"""
Tests for the bus_factor metric.
"""

import pytest

from repo_trust_guard.metrics.bus_factor import METRIC, bus_factor


class TestBusFactorMetric:
    """Test the bus_factor metric function."""

    def test_bus_factor_empty_ledger(self):
        """An empty ledger has no contributors to spread risk over."""
        result = bus_factor({})
        assert result.name == "BusFactor"
        assert result.value == 0

    def test_bus_factor_single_contributor(self):
        """A single contributor accounts for all commits."""
        result = bus_factor({"alice": 10})
        assert result.value == 1

    def test_bus_factor_dominant_contributor(self):
        """One contributor above the accumulation threshold is enough."""
        result = bus_factor({"alice": 0, "bob": 0, "carol": 100})
        assert result.value == pytest.approx(1 / 3)

    def test_bus_factor_uneven_three_way_split(self):
        """50/30/20 needs all three contributors to reach 97.5% of commits."""
        result = bus_factor({"alice": 50, "bob": 30, "carol": 20})
        assert result.value == 1

    def test_bus_factor_long_tail(self):
        """Contributors past the threshold are not consumed."""
        contributors = {"alice": 975, "bob": 20, "carol": 3, "dave": 2}
        result = bus_factor(contributors)
        assert result.value == pytest.approx(1 / 4)

    def test_bus_factor_threshold_reached_exactly(self):
        """Reaching the threshold exactly stops accumulation."""
        result = bus_factor({"alice": 39, "bob": 1})
        assert result.value == pytest.approx(1 / 2)

    def test_bus_factor_stays_in_unit_interval(self):
        """Values lie in [0, 1] for any non-empty ledger."""
        ledgers = [
            {"a": 1},
            {"a": 1, "b": 1},
            {"a": 5, "b": 3, "c": 1, "d": 1},
            {f"user{i}": i + 1 for i in range(50)},
        ]
        for ledger in ledgers:
            assert 0 <= bus_factor(ledger).value <= 1

    def test_bus_factor_does_not_mutate_ledger(self):
        """The ledger is only read."""
        ledger = {"bob": 1, "alice": 5}
        bus_factor(ledger)
        assert ledger == {"bob": 1, "alice": 5}

    def test_metric_spec(self):
        """The spec consumes the contributor ledger."""
        assert METRIC.name == "BusFactor"
        assert METRIC.signal == "contributors"
        assert METRIC.checker is bus_factor
