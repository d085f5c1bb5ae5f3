"""
Configuration and result models for the training engine.
"""

import os
from dataclasses import dataclass, field
from functools import cmp_to_key

from dotenv import load_dotenv

from src.core.errors import TrainingFailure
from src.experiments.models import DataCategory, LayerType

from .configuration import AlgorithmConfiguration
from .schema import AlgorithmType


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else None


@dataclass
class TrainingConfig:
    """Configuration for a training run"""

    # Worker pool
    max_workers: int = 4
    timeout_seconds: float | None = None  # None = wait for every trainer

    # Selection strategy
    metric_name: str = "tp"
    absolute_metric: bool = False
    reputation_name: str = "beta"

    # Injected fault compliance window, in seconds, applied to every experiment
    # (None = keep the windows the experiments were built with)
    fault_grace_seconds: float | None = None

    # Data series selection
    layers: list[LayerType] | None = None  # None = every layer
    data_categories: list[DataCategory] = field(default_factory=lambda: [DataCategory.PLAIN])
    combine_indicators: bool = False

    # Algorithms to train (None = every algorithm with candidates)
    algorithms: list[AlgorithmType] | None = None

    @classmethod
    def from_env(cls) -> "TrainingConfig":
        """Build configuration from DETECTOR_* environment variables (and .env)"""
        load_dotenv()
        config = cls()
        config.max_workers = int(os.getenv("DETECTOR_MAX_WORKERS", str(config.max_workers)))
        config.timeout_seconds = _env_float("DETECTOR_TIMEOUT_SECONDS")
        config.metric_name = os.getenv("DETECTOR_METRIC", config.metric_name)
        config.absolute_metric = os.getenv("DETECTOR_ABSOLUTE_METRIC", "false").lower() == "true"
        config.reputation_name = os.getenv("DETECTOR_REPUTATION", config.reputation_name)
        config.fault_grace_seconds = _env_float("DETECTOR_FAULT_GRACE_SECONDS")

        layers = os.getenv("DETECTOR_LAYERS")
        if layers:
            config.layers = [LayerType(name.strip().lower()) for name in layers.split(",")]
        categories = os.getenv("DETECTOR_DATA_CATEGORIES")
        if categories:
            config.data_categories = [
                DataCategory(name.strip().lower()) for name in categories.split(",")
            ]
        return config


@dataclass(frozen=True)
class TrainingResult:
    """Outcome of one trainer: best configuration and its scores"""

    algorithm_type: AlgorithmType
    series_name: str | None
    layer: LayerType | None
    data_category: DataCategory | None
    series_description: str
    configuration: AlgorithmConfiguration
    metric_score: float
    reputation_score: float
    usable: bool  # False when the detector gives the same outcome on every experiment

    @property
    def key(self) -> tuple[str | None, LayerType | None, DataCategory | None]:
        return (self.series_name, self.layer, self.data_category)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            "algorithm_type": self.algorithm_type.value,
            "series_name": self.series_name,
            "layer": self.layer.value if self.layer else None,
            "data_category": self.data_category.value if self.data_category else None,
            "series_description": self.series_description,
            "configuration": self.configuration.items(),
            "metric_score": self.metric_score,
            "reputation_score": self.reputation_score,
            "usable": self.usable,
        }


@dataclass
class TrainingReport:
    """Results and failures of a training run"""

    results: list[TrainingResult] = field(default_factory=list)
    failures: list[TrainingFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    def ranked(self, metric) -> list[TrainingResult]:
        """Results sorted best first according to a metric's ordering (stable)"""
        return sorted(
            self.results,
            key=cmp_to_key(lambda a, b: metric.compare(b.metric_score, a.metric_score)),
        )

    def usable_results(self) -> list[TrainingResult]:
        return [r for r in self.results if r.usable]

    def by_series(self) -> dict[tuple, list[TrainingResult]]:
        """Results grouped by (series name, layer, data category)"""
        grouped: dict[tuple, list[TrainingResult]] = {}
        for result in self.results:
            grouped.setdefault(result.key, []).append(result)
        return grouped

    def best_by_series(self, metric) -> dict[tuple, TrainingResult]:
        """Best result per (series name, layer, data category) according to a metric's ordering

        Ties keep the result of the trainer submitted first.
        """
        best: dict[tuple, TrainingResult] = {}
        for result in self.results:
            current = best.get(result.key)
            if current is None or metric.compare(result.metric_score, current.metric_score) == 1:
                best[result.key] = result
        return best

    def stats(self) -> dict:
        return {
            "trained": len(self.results),
            "usable": len(self.usable_results()),
            "failed": len(self.failures),
            "elapsed_sec": round(self.elapsed_seconds, 2),
        }
