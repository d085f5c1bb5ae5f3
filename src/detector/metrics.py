"""
Metrics: turn per-snapshot anomaly scores and the injected-fault ground truth
of an experiment into one quality value.

Scores are binarised with ``score >= 1.0``. A snapshot where a fault is
injected is a detection point; the snapshots that follow it while they still
comply with that fault are undetectable and excluded from the counts, so a
fault is credited (or penalised) once.
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import numpy as np

from src.core.errors import DataIntegrityError
from src.experiments.experiment import ExperimentData
from src.experiments.snapshot import Snapshot

ANOMALY_THRESHOLD = 1.0


class MetricType(Enum):
    """Available metrics"""

    TP = "tp"
    FN = "fn"
    FP = "fp"
    TN = "tn"
    PRECISION = "precision"
    RECALL = "recall"
    FSCORE = "fscore"


def anomaly_true_false(score: float) -> bool:
    """Convert a numeric anomaly score into an anomalous / normal flag"""
    return score >= ANOMALY_THRESHOLD


def score_snapshots(algorithm, snapshots: Sequence[Snapshot]) -> dict[datetime, float]:
    """Score every snapshot of a view with an algorithm"""
    return {snap.timestamp: algorithm.evaluate_snapshot(snap) for snap in snapshots}


def _lookup(evaluations: Mapping[datetime, float], snap: Snapshot) -> float:
    score = evaluations.get(snap.timestamp)
    if score is None:
        raise DataIntegrityError(f"No anomaly score for snapshot at {snap.timestamp.isoformat()}")
    return score


@dataclass(frozen=True)
class DetectionCounts:
    """Confusion counts of one experiment"""

    tp: int = 0
    fn: int = 0
    fp: int = 0
    tn: int = 0
    undetectable: int = 0
    total: int = 0

    @property
    def detectable(self) -> int:
        return self.total - self.undetectable


def count_detections(
    snapshots: Sequence[Snapshot], evaluations: Mapping[datetime, float]
) -> DetectionCounts:
    """Walk the snapshots in order and count hits, misses and alarms

    After a detection point, the following snapshots are skipped for as long
    as they comply with the injected fault; the first one that does not ends
    the window.
    """
    tp = fn = fp = tn = undetectable = 0
    i = 0
    n = len(snapshots)
    while i < n:
        snap = snapshots[i]
        anomalous = anomaly_true_false(_lookup(evaluations, snap))
        i += 1

        if not snap.is_detection_point:
            if anomalous:
                fp += 1
            else:
                tn += 1
            continue

        if anomalous:
            tp += 1
        else:
            fn += 1
        while i < n and snap.injected.complies_with(snapshots[i].timestamp):
            undetectable += 1
            i += 1

    return DetectionCounts(tp, fn, fp, tn, undetectable, n)


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


@dataclass(frozen=True)
class MetricEvaluation:
    """Metric value of one experiment plus the mean anomaly score the algorithm produced"""

    value: float
    mean_score: float


class Metric(ABC):
    """Base metric

    Each metric states whether bigger or smaller values are better; compare()
    is the only way the trainer decides which configuration wins.
    """

    metric_type: MetricType
    maximize: bool = True

    def __init__(self, absolute: bool = False):
        self.absolute = absolute

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable metric name"""
        pass

    @abstractmethod
    def evaluate_anomaly_results(
        self, snapshots: Sequence[Snapshot], evaluations: Mapping[datetime, float]
    ) -> float:
        """Evaluate the scores of every snapshot of an experiment

        Args:
            snapshots: Snapshots in timestamp order
            evaluations: Anomaly score per snapshot timestamp

        Returns:
            Metric value for the experiment
        """
        pass

    def evaluate(self, experiment: ExperimentData, evaluations: Mapping[datetime, float]) -> float:
        """Evaluate scores against an experiment, walking it with its cursor"""
        snapshots = []
        experiment.reset_iterator()
        while experiment.has_next_snapshot():
            snapshots.append(experiment.next_snapshot())
        experiment.reset_iterator()
        return self.evaluate_anomaly_results(snapshots, evaluations)

    def evaluate_voting(
        self,
        experiment: ExperimentData,
        voting: Mapping[datetime, float],
        anomaly_threshold: float,
    ) -> float:
        """Evaluate raw votes, normalising each one by the anomaly threshold"""
        if anomaly_threshold <= 0:
            raise ValueError(f"Anomaly threshold must be positive, got {anomaly_threshold}")
        converted = {ts: vote / anomaly_threshold for ts, vote in voting.items()}
        return self.evaluate(experiment, converted)

    def evaluate_metric(self, algorithm, snapshots: Sequence[Snapshot]) -> MetricEvaluation:
        """Score a view with an algorithm and evaluate the result"""
        evaluations = score_snapshots(algorithm, snapshots)
        mean_score = float(np.mean(list(evaluations.values()))) if evaluations else 0.0
        return MetricEvaluation(self.evaluate_anomaly_results(snapshots, evaluations), mean_score)

    def compare(self, current: float, best: float) -> int:
        """+1 if current is strictly better than best, 0 if equal, -1 if worse

        NaN is worse than any number.
        """
        if math.isnan(current) or math.isnan(best):
            if math.isnan(current) and math.isnan(best):
                return 0
            return -1 if math.isnan(current) else 1
        if current == best:
            return 0
        better = current > best if self.maximize else current < best
        return 1 if better else -1

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(absolute={self.absolute})"


class TruePositiveMetric(Metric):
    metric_type = MetricType.TP
    maximize = True

    @property
    def name(self) -> str:
        return "True Positives"

    def evaluate_anomaly_results(self, snapshots, evaluations) -> float:
        counts = count_detections(snapshots, evaluations)
        if counts.total == 0:
            return 0.0
        if self.absolute:
            return float(counts.tp)
        return counts.tp / counts.detectable


class FalseNegativeMetric(Metric):
    metric_type = MetricType.FN
    maximize = False

    @property
    def name(self) -> str:
        return "False Negatives"

    def evaluate_anomaly_results(self, snapshots, evaluations) -> float:
        counts = count_detections(snapshots, evaluations)
        if self.absolute:
            return float(counts.fn)
        return _ratio(counts.fn, counts.total)


class FalsePositiveMetric(Metric):
    metric_type = MetricType.FP
    maximize = False

    @property
    def name(self) -> str:
        return "False Positives"

    def evaluate_anomaly_results(self, snapshots, evaluations) -> float:
        counts = count_detections(snapshots, evaluations)
        if self.absolute:
            return float(counts.fp)
        return _ratio(counts.fp, counts.detectable)


class TrueNegativeMetric(Metric):
    metric_type = MetricType.TN
    maximize = True

    @property
    def name(self) -> str:
        return "True Negatives"

    def evaluate_anomaly_results(self, snapshots, evaluations) -> float:
        counts = count_detections(snapshots, evaluations)
        if self.absolute:
            return float(counts.tn)
        return _ratio(counts.tn, counts.detectable)


class PrecisionMetric(Metric):
    metric_type = MetricType.PRECISION
    maximize = True

    @property
    def name(self) -> str:
        return "Precision"

    def evaluate_anomaly_results(self, snapshots, evaluations) -> float:
        counts = count_detections(snapshots, evaluations)
        return _ratio(counts.tp, counts.tp + counts.fp)


class RecallMetric(Metric):
    metric_type = MetricType.RECALL
    maximize = True

    @property
    def name(self) -> str:
        return "Recall"

    def evaluate_anomaly_results(self, snapshots, evaluations) -> float:
        counts = count_detections(snapshots, evaluations)
        return _ratio(counts.tp, counts.tp + counts.fn)


class FScoreMetric(Metric):
    """F-beta score of precision and recall (beta=1 gives the F-measure)"""

    metric_type = MetricType.FSCORE
    maximize = True

    def __init__(self, absolute: bool = False, beta: float = 1.0):
        super().__init__(absolute)
        if beta <= 0:
            raise ValueError(f"Beta must be positive, got {beta}")
        self.beta = beta

    @property
    def name(self) -> str:
        return f"F-Score(beta={self.beta})"

    def evaluate_anomaly_results(self, snapshots, evaluations) -> float:
        counts = count_detections(snapshots, evaluations)
        precision = _ratio(counts.tp, counts.tp + counts.fp)
        recall = _ratio(counts.tp, counts.tp + counts.fn)
        beta2 = self.beta**2
        return _ratio((1 + beta2) * precision * recall, beta2 * precision + recall)


METRIC_REGISTRY: dict[MetricType, type[Metric]] = {
    MetricType.TP: TruePositiveMetric,
    MetricType.FN: FalseNegativeMetric,
    MetricType.FP: FalsePositiveMetric,
    MetricType.TN: TrueNegativeMetric,
    MetricType.PRECISION: PrecisionMetric,
    MetricType.RECALL: RecallMetric,
    MetricType.FSCORE: FScoreMetric,
}


def get_metric(name: str | MetricType, absolute: bool = False, **kwargs) -> Metric:
    """Factory to create a metric

    Args:
        name: Metric tag (e.g. 'tp', 'fscore'), case-insensitive
        absolute: Return raw counts instead of rates (count metrics only)
        **kwargs: Metric-specific options (e.g. beta for 'fscore')

    Raises:
        ValueError: If the metric is not registered
    """
    try:
        metric_type = name if isinstance(name, MetricType) else MetricType(str(name).lower())
    except ValueError as e:
        available = ", ".join(t.value for t in METRIC_REGISTRY)
        raise ValueError(f"Unknown metric '{name}'. Available metrics: {available}") from e
    return METRIC_REGISTRY[metric_type](absolute=absolute, **kwargs)
