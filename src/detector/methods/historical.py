"""
Historical indicator checker.

Compares the value of an indicator with the statistics recorded for that
indicator while the currently active services were running.
"""

import math
from typing import Any

from src.core.errors import ConfigurationError
from src.experiments.models import DataType
from src.experiments.snapshot import Snapshot

from ..configuration import AlgorithmConfiguration
from ..schema import AlgorithmType
from .base import DetectionAlgorithm


class HistoricalIndicatorChecker(DetectionAlgorithm):
    """Flags values further than ``sigma`` standard deviations from the history"""

    algorithm_type = AlgorithmType.HISTORICAL_CHECKER
    data_type = DataType.SERIES

    def __init__(self, data_series, conf: AlgorithmConfiguration):
        super().__init__(data_series, conf)
        if data_series is None or not data_series.is_simple:
            raise ConfigurationError("Historical checker requires a single-indicator data series")
        self.sigma = conf.get_float("sigma")
        if self.sigma <= 0:
            raise ConfigurationError(f"Sigma must be positive, got {self.sigma}")

    def get_config(self) -> dict[str, Any]:
        return {"sigma": self.sigma}

    def evaluate_snapshot(self, snapshot: Snapshot) -> float:
        value = getattr(snapshot, "value", math.nan)
        if math.isnan(value):
            return 0.0

        results = []
        for call in snapshot.service_calls:
            stat = snapshot.get_service_stat(call.service_name)
            ind_stat = stat.get_indicator_stat(self.indicator.name) if stat else None
            if ind_stat is None:
                continue
            results.append(self.evaluate_abs_diff(value, ind_stat.all, self.sigma))

        if not results:
            return 0.0
        return sum(results) / len(results)
