"""
Tests for metrics: detection counting, compliance window skipping and comparators.
"""

import math

import pytest

from src.core.errors import DataIntegrityError
from src.detector.metrics import (
    FalseNegativeMetric,
    FalsePositiveMetric,
    FScoreMetric,
    MetricType,
    PrecisionMetric,
    RecallMetric,
    TrueNegativeMetric,
    TruePositiveMetric,
    anomaly_true_false,
    count_detections,
    get_metric,
)


def scores_for(experiment, values):
    """Map per-step scores onto the snapshot timestamps of an experiment."""
    return {snap.timestamp: value for snap, value in zip(experiment, values, strict=True)}


class TestAnomalyThreshold:
    """Tests for score binarisation."""

    def test_threshold_is_inclusive(self):
        """Test 1.0 is already anomalous."""
        assert anomaly_true_false(1.0)
        assert anomaly_true_false(1.5)
        assert not anomaly_true_false(0.999)


class TestCountDetections:
    """Tests for count_detections and the compliance window."""

    def test_no_faults(self, make_experiment):
        """Test snapshots without faults are true negatives or false positives."""
        exp = make_experiment([1] * 4)
        counts = count_detections(exp.snapshots, scores_for(exp, [0, 2, 0, 0]))

        assert (counts.tp, counts.fn, counts.fp, counts.tn) == (0, 0, 1, 3)
        assert counts.detectable == 4

    def test_compliant_snapshots_skipped(self, make_experiment):
        """Test snapshots inside the window are neither hits nor alarms."""
        # fault at t0, next fault at t3: t1 and t2 are covered by the first fault
        exp = make_experiment([1] * 5, fault_steps=[0, 3])
        counts = count_detections(exp.snapshots, scores_for(exp, [0, 5, 5, 2, 5]))

        assert counts.fn == 1
        assert counts.tp == 1
        assert counts.fp == 0
        # t4 is covered by the fault at t3
        assert counts.undetectable == 3
        assert counts.detectable == 2

    def test_next_fault_is_counted(self, make_experiment):
        """Test the snapshot ending a window is evaluated on its own."""
        exp = make_experiment([1] * 5, fault_steps=[0, 3])
        counts = count_detections(exp.snapshots, scores_for(exp, [0, 0, 0, 0, 0]))

        assert counts.fn == 2
        assert counts.tn == 0

    def test_grace_period_ends_window(self, make_experiment):
        """Test snapshots after the grace period are evaluated again."""
        exp = make_experiment([1] * 5, fault_steps=[0], grace_seconds=1)
        counts = count_detections(exp.snapshots, scores_for(exp, [2, 2, 2, 0, 0]))

        assert counts.tp == 1
        assert counts.undetectable == 1
        assert counts.fp == 1
        assert counts.tn == 2

    def test_missing_score(self, make_experiment):
        """Test a snapshot without a score is a data error."""
        exp = make_experiment([1, 1])
        partial = {exp.snapshots[0].timestamp: 0.0}

        with pytest.raises(DataIntegrityError):
            count_detections(exp.snapshots, partial)


class TestTruePositiveMetric:
    """Tests for TruePositiveMetric."""

    def test_zero_without_faults(self, make_experiment):
        """Test an experiment without faults has no true positive."""
        exp = make_experiment([1] * 5)

        assert TruePositiveMetric().evaluate(exp, scores_for(exp, [0] * 5)) == 0.0

    def test_empty_experiment(self):
        """Test an empty snapshot list scores 0."""
        assert TruePositiveMetric().evaluate_anomaly_results([], {}) == 0.0

    def test_single_detection(self, five_snapshot_experiment):
        """Test one hit among five detectable snapshots."""
        exp = five_snapshot_experiment
        scores = scores_for(exp, [0, 0, 1.5, 0, 0])

        assert TruePositiveMetric().evaluate(exp, scores) == pytest.approx(0.2)
        assert TruePositiveMetric(absolute=True).evaluate(exp, scores) == 1.0

    def test_window_reduces_denominator(self, make_experiment):
        """Test compliant snapshots leave the denominator."""
        exp = make_experiment([1] * 5, fault_steps=[2])

        assert TruePositiveMetric().evaluate(exp, scores_for(exp, [0, 0, 1.5, 0, 0])) == (
            pytest.approx(1 / 3)
        )

    def test_evaluate_rewinds_cursor(self, five_snapshot_experiment):
        """Test evaluate leaves the experiment cursor at the start."""
        exp = five_snapshot_experiment
        exp.next_snapshot()

        TruePositiveMetric().evaluate(exp, scores_for(exp, [0] * 5))

        assert exp.next_snapshot().timestamp == exp.first_timestamp


class TestFalseNegativeMetric:
    """Tests for FalseNegativeMetric."""

    def test_always_anomalous(self, five_snapshot_experiment):
        """Test an always-anomalous detector misses nothing."""
        exp = five_snapshot_experiment

        assert FalseNegativeMetric().evaluate(exp, scores_for(exp, [1.5] * 5)) == 0.0

    def test_missed_fault(self, five_snapshot_experiment):
        """Test a silent detector misses the fault."""
        exp = five_snapshot_experiment

        assert FalseNegativeMetric().evaluate(exp, scores_for(exp, [0] * 5)) == pytest.approx(0.2)
        assert FalseNegativeMetric(absolute=True).evaluate(exp, scores_for(exp, [0] * 5)) == 1.0

    def test_end_to_end_scenario(self, five_snapshot_experiment):
        """Test a detector firing only at the fault has no false negative."""
        exp = five_snapshot_experiment

        assert FalseNegativeMetric().evaluate(exp, scores_for(exp, [0, 0, 1.5, 0, 0])) == 0.0


class TestRateMetrics:
    """Tests for the remaining count and rate metrics."""

    @pytest.fixture
    def scores(self, five_snapshot_experiment):
        # hit at the fault, one false alarm
        return scores_for(five_snapshot_experiment, [0, 2, 1.5, 0, 0])

    def test_false_positive(self, five_snapshot_experiment, scores):
        """Test false alarms over detectable snapshots."""
        assert FalsePositiveMetric().evaluate(five_snapshot_experiment, scores) == pytest.approx(0.2)

    def test_true_negative(self, five_snapshot_experiment, scores):
        """Test quiet normal snapshots over detectable snapshots."""
        assert TrueNegativeMetric().evaluate(five_snapshot_experiment, scores) == pytest.approx(0.6)

    def test_precision_recall_fscore(self, five_snapshot_experiment, scores):
        """Test precision, recall and F1 of one hit and one false alarm."""
        exp = five_snapshot_experiment

        assert PrecisionMetric().evaluate(exp, scores) == pytest.approx(0.5)
        assert RecallMetric().evaluate(exp, scores) == pytest.approx(1.0)
        assert FScoreMetric().evaluate(exp, scores) == pytest.approx(2 / 3)

    def test_fscore_without_hits(self, five_snapshot_experiment):
        """Test F-score is 0 when nothing is detected."""
        exp = five_snapshot_experiment

        assert FScoreMetric().evaluate(exp, scores_for(exp, [0] * 5)) == 0.0

    def test_invalid_beta(self):
        """Test beta must be positive."""
        with pytest.raises(ValueError):
            FScoreMetric(beta=0)


class TestVoting:
    """Tests for evaluate_voting."""

    def test_votes_normalised_by_threshold(self, five_snapshot_experiment):
        """Test votes reaching the threshold count as anomalies."""
        exp = five_snapshot_experiment
        votes = scores_for(exp, [0, 0, 3.0, 1.0, 0])

        # 3/2 is anomalous, 1/2 is not
        assert TruePositiveMetric().evaluate_voting(exp, votes, 2.0) == pytest.approx(0.2)
        assert FalsePositiveMetric().evaluate_voting(exp, votes, 2.0) == 0.0

    def test_invalid_threshold(self, five_snapshot_experiment):
        """Test the voting threshold must be positive."""
        with pytest.raises(ValueError):
            TruePositiveMetric().evaluate_voting(five_snapshot_experiment, {}, 0)


class TestCompare:
    """Tests for metric comparators."""

    def test_maximised_metric(self):
        """Test bigger is better for maximised metrics."""
        metric = TruePositiveMetric()

        assert metric.compare(0.5, 0.3) == 1
        assert metric.compare(0.3, 0.5) == -1
        assert metric.compare(0.3, 0.3) == 0

    def test_minimised_metric(self):
        """Test smaller is better for minimised metrics."""
        metric = FalseNegativeMetric()

        assert metric.compare(0.1, 0.3) == 1
        assert metric.compare(0.3, 0.1) == -1
        assert metric.compare(0.2, 0.2) == 0

    @pytest.mark.parametrize("metric", [TruePositiveMetric(), FalseNegativeMetric()])
    def test_nan_loses(self, metric):
        """Test NaN is worse than any number, whatever the direction."""
        assert metric.compare(0.0, math.nan) == 1
        assert metric.compare(math.nan, 0.0) == -1
        assert metric.compare(math.nan, math.nan) == 0


class TestGetMetric:
    """Tests for the metric factory."""

    def test_by_name(self):
        """Test metrics are created from case-insensitive tags."""
        assert isinstance(get_metric("TP"), TruePositiveMetric)
        assert isinstance(get_metric(MetricType.FN), FalseNegativeMetric)
        assert get_metric("fp", absolute=True).absolute

    def test_options(self):
        """Test metric-specific options are forwarded."""
        assert get_metric("fscore", beta=2.0).beta == 2.0

    def test_unknown(self):
        """Test unknown metrics raise ValueError."""
        with pytest.raises(ValueError, match="Unknown metric"):
            get_metric("auc")
