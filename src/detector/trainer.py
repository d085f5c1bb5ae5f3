"""
Algorithm trainer.

Grid-searches the candidate configurations of one algorithm on one data
series, keeps the best one according to the metric and computes its final
metric and reputation scores. A trainer owns deep copies of everything it
touches, so many trainers can run concurrently on the same inputs.
"""

import math
import threading
import time
from collections.abc import Sequence

import numpy as np
import structlog

from src.core.errors import ConfigurationError, DataIntegrityError, TrainingFailure
from src.experiments.dataseries import DataSeries
from src.experiments.experiment import ExperimentData
from src.experiments.models import DataCategory, LayerType
from src.experiments.snapshot import Snapshot

from .configuration import AlgorithmConfiguration
from .methods import DetectionAlgorithm, build_algorithm, get_method
from .metrics import Metric
from .models import TrainingResult
from .reputation import Reputation
from .schema import SCORE, WEIGHT, AlgorithmType

logger = structlog.get_logger(__name__)


class AlgorithmTrainer:
    """Selects the best configuration of one algorithm for one data series"""

    def __init__(
        self,
        algorithm_type: AlgorithmType,
        data_series: DataSeries | None,
        metric: Metric,
        reputation: Reputation,
        train_data: Sequence[ExperimentData],
        configurations: Sequence[AlgorithmConfiguration] | None = None,
        configuration: AlgorithmConfiguration | None = None,
    ):
        """Initialize a trainer

        Exactly one of ``configurations`` (candidates to search, in order) and
        ``configuration`` (fixed, no search) must be given. Experiments and
        configurations are copied here, once.
        """
        if (configurations is None) == (configuration is None):
            raise ValueError("Provide either candidate configurations or a fixed configuration")

        self.algorithm_type = algorithm_type
        self.data_series = data_series
        self.metric = metric
        self.reputation = reputation
        self.method = get_method(algorithm_type)

        self.experiments = [exp.copy() for exp in train_data]
        if configuration is not None:
            self.fixed_configuration: AlgorithmConfiguration | None = configuration.copy()
            self.configurations = [self.fixed_configuration]
        else:
            self.fixed_configuration = None
            self.configurations = [conf.copy() for conf in configurations]

    @property
    def series_name(self) -> str | None:
        return self.data_series.name if self.data_series else None

    @property
    def layer(self) -> LayerType | None:
        return self.data_series.layer if self.data_series else None

    @property
    def data_category(self) -> DataCategory | None:
        return self.data_series.category if self.data_series else None

    @property
    def series_description(self) -> str:
        return str(self.data_series) if self.data_series else "Default"

    def train(self, cancel_event: threading.Event | None = None) -> TrainingResult:
        """Run the training

        Args:
            cancel_event: Optional event checked between candidate evaluations

        Returns:
            TrainingResult with the best configuration and its scores

        Raises:
            TrainingFailure: If no candidate could be evaluated, the views
                cannot be built, or training was cancelled
        """
        log = logger.bind(algorithm=self.algorithm_type.value, series=self.series_description)
        start_time = time.time()

        if not self.experiments:
            raise self._failure("no training experiments")
        if not self.configurations:
            raise self._failure("no candidate configurations")

        views = self._load_views()

        if self.fixed_configuration is not None:
            best_conf = self.fixed_configuration.copy()
        else:
            best_conf = self._search(views, cancel_event, log)

        self._check_cancelled(cancel_event)
        try:
            algorithm = build_algorithm(self.data_series, best_conf)
        except ConfigurationError as e:
            raise self._failure(f"invalid configuration: {e}") from e

        metric_score, usable = self._evaluate_metric_score(algorithm, views)
        reputation_score = self._evaluate_reputation_score(algorithm, views)

        best_conf.add_item(WEIGHT, reputation_score)
        best_conf.add_item(SCORE, metric_score)

        if not usable:
            log.warning(
                "Detector gives the same outcome on every experiment, not usable for voting",
                metric_score=metric_score,
            )

        log.info(
            "Algorithm trained",
            configuration=best_conf.parameters(),
            metric_score=round(metric_score, 4),
            reputation_score=round(reputation_score, 4),
            usable=usable,
            elapsed_sec=round(time.time() - start_time, 2),
        )

        return TrainingResult(
            algorithm_type=self.algorithm_type,
            series_name=self.series_name,
            layer=self.layer,
            data_category=self.data_category,
            series_description=self.series_description,
            configuration=best_conf,
            metric_score=metric_score,
            reputation_score=reputation_score,
            usable=usable,
        )

    def _load_views(self) -> list[list[Snapshot]]:
        """Build one view per experiment using the reference configuration

        The reference is the fixed configuration, or the first candidate; the
        views are reused unchanged for every candidate.
        """
        ref_conf = self.fixed_configuration or self.configurations[0]
        try:
            return [
                exp.build_snapshots_for(self.method.data_type, self.data_series, ref_conf)
                for exp in self.experiments
            ]
        except (ConfigurationError, DataIntegrityError) as e:
            raise self._failure(f"unable to build snapshot views: {e}") from e

    def _search(self, views, cancel_event, log) -> AlgorithmConfiguration:
        best_value = math.nan
        best_conf = None

        for index, conf in enumerate(self.configurations):
            self._check_cancelled(cancel_event)
            try:
                algorithm = build_algorithm(self.data_series, conf)
            except ConfigurationError as e:
                log.warning("Skipping invalid configuration", candidate=index, error=str(e))
                continue

            current_value = self._average_metric(algorithm, views)
            log.debug("Candidate evaluated", candidate=index, metric_value=current_value)

            # ties keep the earlier candidate
            if self.metric.compare(current_value, best_value) == 1:
                best_value = current_value
                best_conf = conf.copy()

        if best_conf is None:
            raise self._failure("no candidate configuration could be instantiated")
        return best_conf

    def _average_metric(self, algorithm: DetectionAlgorithm, views) -> float:
        return float(np.mean([self.metric.evaluate_metric(algorithm, view).value for view in views]))

    def _evaluate_metric_score(self, algorithm: DetectionAlgorithm, views) -> tuple[float, bool]:
        """Final metric score, and whether the detector discriminates between experiments"""
        evaluations = [self.metric.evaluate_metric(algorithm, view) for view in views]
        mean_scores = [e.mean_score for e in evaluations]
        usable = not np.isclose(np.std(mean_scores), 0.0, rtol=0.0, atol=1e-12)
        return float(np.mean([e.value for e in evaluations])), usable

    def _evaluate_reputation_score(self, algorithm: DetectionAlgorithm, views) -> float:
        return float(np.mean([self.reputation.evaluate_reputation(algorithm, view) for view in views]))

    def _check_cancelled(self, cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise self._failure("cancelled")

    def _failure(self, reason: str) -> TrainingFailure:
        return TrainingFailure(self.algorithm_type, self.series_name, reason)

    def __repr__(self) -> str:
        return (
            f"AlgorithmTrainer(algorithm={self.algorithm_type.value}, "
            f"series={self.series_description}, candidates={len(self.configurations)})"
        )
