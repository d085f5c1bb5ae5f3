"""
Static threshold on a data series.
"""

import math
from typing import Any

from src.core.errors import ConfigurationError
from src.experiments.models import DataType
from src.experiments.snapshot import Snapshot

from ..configuration import AlgorithmConfiguration
from ..schema import AlgorithmType
from .base import DetectionAlgorithm


class StaticThresholdChecker(DetectionAlgorithm):
    """Scores the series value against a fixed upper threshold"""

    algorithm_type = AlgorithmType.STATIC_THRESHOLD
    data_type = DataType.SERIES

    def __init__(self, data_series, conf: AlgorithmConfiguration):
        super().__init__(data_series, conf)
        self.threshold = conf.get_float("threshold")
        if self.threshold <= 0:
            raise ConfigurationError(f"Threshold must be positive, got {self.threshold}")

    def get_config(self) -> dict[str, Any]:
        return {"threshold": self.threshold}

    def evaluate_snapshot(self, snapshot: Snapshot) -> float:
        value = getattr(snapshot, "value", math.nan)
        if math.isnan(value):
            return 0.0
        return value / self.threshold
