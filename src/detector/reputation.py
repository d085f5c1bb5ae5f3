"""
Reputation: a trust score for a trained algorithm, independent of the metric
used to select its configuration. The ensemble uses it as the voting weight.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import datetime

from src.experiments.snapshot import Snapshot

from .metrics import Metric, count_detections, score_snapshots


class Reputation(ABC):
    """Base reputation strategy"""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def evaluate_experiment_reputation(
        self, snapshots: Sequence[Snapshot], evaluations: Mapping[datetime, float]
    ) -> float:
        """Reputation earned on one experiment"""
        pass

    def evaluate_reputation(self, algorithm, snapshots: Sequence[Snapshot]) -> float:
        return self.evaluate_experiment_reputation(snapshots, score_snapshots(algorithm, snapshots))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class ConstantReputation(Reputation):
    """Same reputation for every algorithm"""

    def __init__(self, value: float = 1.0):
        self.value = value

    @property
    def name(self) -> str:
        return f"Constant({self.value})"

    def evaluate_experiment_reputation(self, snapshots, evaluations) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"ConstantReputation(value={self.value})"


class BetaReputation(Reputation):
    """Expected value of a Beta(hits + 1, false alarms + 1) distribution

    An algorithm with no evidence either way gets 0.5.
    """

    @property
    def name(self) -> str:
        return "Beta"

    def evaluate_experiment_reputation(self, snapshots, evaluations) -> float:
        counts = count_detections(snapshots, evaluations)
        return (counts.tp + 1) / (counts.tp + counts.fp + 2)


class MetricReputation(Reputation):
    """Uses a (relative, maximised) metric value as reputation"""

    def __init__(self, metric: Metric):
        if not metric.maximize or metric.absolute:
            raise ValueError(f"{metric!r} cannot be used as reputation: needs a relative maximised metric")
        self.metric = metric

    @property
    def name(self) -> str:
        return f"Metric({self.metric.name})"

    def evaluate_experiment_reputation(self, snapshots, evaluations) -> float:
        return self.metric.evaluate_anomaly_results(snapshots, evaluations)

    def __repr__(self) -> str:
        return f"MetricReputation(metric={self.metric!r})"


def get_reputation(name: str, metric: Metric | None = None) -> Reputation:
    """Factory to create a reputation strategy

    Args:
        name: 'beta', 'metric', or a number for a constant reputation
        metric: Metric to use for 'metric'

    Raises:
        ValueError: If the name is not recognised or 'metric' has no metric
    """
    tag = str(name).strip().lower()
    if tag == "beta":
        return BetaReputation()
    if tag == "metric":
        if metric is None:
            raise ValueError("Metric reputation requires a metric")
        return MetricReputation(metric)
    try:
        return ConstantReputation(float(tag))
    except ValueError as e:
        raise ValueError(
            f"Unknown reputation '{name}'. Available: beta, metric, <constant value>"
        ) from e
