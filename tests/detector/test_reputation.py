"""
Tests for reputation strategies.
"""

import pytest

from src.detector.configuration import AlgorithmConfiguration
from src.detector.methods import build_algorithm
from src.detector.metrics import FalseNegativeMetric, TruePositiveMetric
from src.detector.reputation import (
    BetaReputation,
    ConstantReputation,
    MetricReputation,
    get_reputation,
)
from src.detector.schema import AlgorithmType
from src.experiments.dataseries import DataSeries
from src.experiments.models import DataType


@pytest.fixture
def view(five_snapshot_experiment):
    series = DataSeries.of(five_snapshot_experiment.snapshots[0].observation.indicators[0])
    return five_snapshot_experiment.build_snapshots_for(DataType.SERIES, series, None), series


class TestBetaReputation:
    """Tests for BetaReputation."""

    def test_no_evidence(self):
        """Test an algorithm that never fires on a fault-free run gets 0.5."""
        assert BetaReputation().evaluate_experiment_reputation([], {}) == 0.5

    def test_hits_and_false_alarms(self, view):
        """Test (hits + 1) / (hits + false alarms + 2)."""
        snapshots, series = view
        precise = build_algorithm(
            series, AlgorithmConfiguration(AlgorithmType.STATIC_THRESHOLD, {"threshold": "5"})
        )
        noisy = build_algorithm(
            series, AlgorithmConfiguration(AlgorithmType.STATIC_THRESHOLD, {"threshold": "0.5"})
        )

        assert BetaReputation().evaluate_reputation(precise, snapshots) == pytest.approx(2 / 3)
        # 1 hit, 4 false alarms
        assert BetaReputation().evaluate_reputation(noisy, snapshots) == pytest.approx(2 / 7)


class TestMetricReputation:
    """Tests for MetricReputation."""

    def test_uses_metric_value(self, view):
        """Test the reputation is the metric value on the view."""
        snapshots, series = view
        algorithm = build_algorithm(
            series, AlgorithmConfiguration(AlgorithmType.STATIC_THRESHOLD, {"threshold": "5"})
        )

        reputation = MetricReputation(TruePositiveMetric())

        assert reputation.evaluate_reputation(algorithm, snapshots) == pytest.approx(0.2)
        assert reputation.name == "Metric(True Positives)"

    @pytest.mark.parametrize("metric", [FalseNegativeMetric(), TruePositiveMetric(absolute=True)])
    def test_rejects_unsuitable_metrics(self, metric):
        """Test minimised or absolute metrics cannot be reputations."""
        with pytest.raises(ValueError):
            MetricReputation(metric)


class TestGetReputation:
    """Tests for the reputation factory."""

    def test_beta(self):
        """Test the beta strategy."""
        assert isinstance(get_reputation("Beta"), BetaReputation)

    def test_metric(self):
        """Test the metric strategy needs a metric."""
        assert isinstance(get_reputation("metric", TruePositiveMetric()), MetricReputation)
        with pytest.raises(ValueError):
            get_reputation("metric")

    def test_constant(self):
        """Test numbers give a constant reputation."""
        reputation = get_reputation("0.7")

        assert isinstance(reputation, ConstantReputation)
        assert reputation.evaluate_experiment_reputation([], {}) == 0.7

    def test_unknown(self):
        """Test unknown strategies raise ValueError."""
        with pytest.raises(ValueError, match="Unknown reputation"):
            get_reputation("trust-me")
