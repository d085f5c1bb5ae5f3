"""
Training orchestrator.

Creates one trainer per (algorithm type x data series) combination, runs them
in a worker pool and collects their results. A failing trainer is reported
without affecting its siblings.
"""

import concurrent.futures
import threading
import time
from collections.abc import Mapping, Sequence

import structlog

from src.core.errors import TrainingFailure
from src.experiments.dataseries import DataSeries, build_data_series
from src.experiments.experiment import ExperimentData
from src.experiments.models import DataType, Indicator

from .configuration import AlgorithmConfiguration
from .methods import get_method
from .metrics import Metric, get_metric
from .models import TrainingConfig, TrainingReport
from .reputation import Reputation, get_reputation
from .schema import AlgorithmType
from .trainer import AlgorithmTrainer

logger = structlog.get_logger(__name__)


class TrainingOrchestrator:
    """Runs every trainer needed by the configured layers"""

    def __init__(
        self,
        config: TrainingConfig,
        configurations: Mapping[AlgorithmType, Sequence[AlgorithmConfiguration]],
        metric: Metric | None = None,
        reputation: Reputation | None = None,
    ):
        self.config = config
        self.configurations = {k: list(v) for k, v in configurations.items()}
        self.metric = metric or get_metric(config.metric_name, absolute=config.absolute_metric)
        self.reputation = reputation or get_reputation(config.reputation_name, self.metric)

        logger.info(
            "Orchestrator initialized",
            metric=self.metric.name,
            reputation=self.reputation.name,
            algorithms=[t.value for t in self.configurations],
            max_workers=config.max_workers,
        )

    def select_data_series(self, experiments: Sequence[ExperimentData]) -> list[DataSeries]:
        """Data series of the numeric indicators found in the experiments"""
        indicators: dict[Indicator, None] = {}
        for exp in experiments:
            for category in self.config.data_categories:
                for indicator in exp.numeric_indicators(category):
                    indicators.setdefault(indicator, None)

        return build_data_series(
            indicators,
            categories=self.config.data_categories,
            layers=self.config.layers,
            combine=self.config.combine_indicators,
        )

    def build_trainers(
        self,
        experiments: Sequence[ExperimentData],
        data_series: Sequence[DataSeries] | None = None,
    ) -> list[AlgorithmTrainer]:
        """One trainer per algorithm and data series; snapshot-level algorithms get a single one"""
        if data_series is None:
            data_series = self.select_data_series(experiments)
        if self.config.fault_grace_seconds is not None:
            experiments = [
                exp.with_grace_period(self.config.fault_grace_seconds) for exp in experiments
            ]

        trainers = []
        for alg_type, candidates in self.configurations.items():
            if self.config.algorithms is not None and alg_type not in self.config.algorithms:
                continue
            if get_method(alg_type).data_type is DataType.SNAPSHOT:
                targets = [None]
            else:
                targets = list(data_series)
            for series in targets:
                trainers.append(
                    AlgorithmTrainer(
                        alg_type,
                        series,
                        self.metric,
                        self.reputation,
                        experiments,
                        configurations=candidates,
                    )
                )

        logger.info(
            "Trainers created",
            trainers=len(trainers),
            experiments=len(experiments),
            data_series=len(data_series),
        )
        return trainers

    def train(
        self,
        experiments: Sequence[ExperimentData],
        data_series: Sequence[DataSeries] | None = None,
    ) -> TrainingReport:
        """Train every (algorithm, data series) pair in parallel

        Returns:
            TrainingReport with results in trainer creation order and the failures
        """
        trainers = self.build_trainers(experiments, data_series)
        return self.run(trainers)

    def run(self, trainers: Sequence[AlgorithmTrainer]) -> TrainingReport:
        """Run already-built trainers and wait for all of them"""
        report = TrainingReport()
        start_time = time.time()
        cancel_event = threading.Event()

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=max(1, self.config.max_workers), thread_name_prefix="trainer"
        ) as executor:
            futures = [executor.submit(trainer.train, cancel_event) for trainer in trainers]
            _, pending = concurrent.futures.wait(futures, timeout=self.config.timeout_seconds)
            if pending:
                logger.warning(
                    "Training timeout reached, cancelling remaining trainers",
                    pending=len(pending),
                    timeout_seconds=self.config.timeout_seconds,
                )
                # queued trainers never start; running ones stop at their next candidate
                for future in pending:
                    future.cancel()
                cancel_event.set()

        for trainer, future in zip(trainers, futures, strict=True):
            if future.cancelled():
                report.failures.append(
                    TrainingFailure(trainer.algorithm_type, trainer.series_name, "cancelled")
                )
                continue
            try:
                report.results.append(future.result())
            except TrainingFailure as e:
                logger.error(
                    "Trainer failed",
                    algorithm=trainer.algorithm_type.value,
                    series=trainer.series_description,
                    reason=e.reason,
                )
                report.failures.append(e)
            except Exception as e:
                logger.error(
                    "Trainer crashed",
                    algorithm=trainer.algorithm_type.value,
                    series=trainer.series_description,
                    error=str(e),
                    exc_info=e,
                )
                failure = TrainingFailure(trainer.algorithm_type, trainer.series_name, str(e))
                failure.__cause__ = e
                report.failures.append(failure)

        report.elapsed_seconds = time.time() - start_time
        logger.info("Training completed", **report.stats())
        return report
