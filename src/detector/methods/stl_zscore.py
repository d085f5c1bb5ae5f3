"""
STL + Z-Score detection method.

The per-algorithm view decomposes each experiment's series into Trend +
Seasonal + Residual using STL (seasonal period taken from the reference
configuration) and stores the residual z-score in every snapshot. Candidate
configurations only differ by the z-score threshold, so the expensive
decomposition runs once per experiment for the whole search.
"""

import math
from typing import Any

from src.core.errors import ConfigurationError
from src.experiments.models import DataType
from src.experiments.snapshot import Snapshot

from ..configuration import AlgorithmConfiguration
from ..schema import AlgorithmType
from .base import DetectionAlgorithm


class STLZScoreMethod(DetectionAlgorithm):
    """STL decomposition + Z-score on residuals"""

    algorithm_type = AlgorithmType.STL_ZSCORE
    data_type = DataType.RESIDUAL

    def __init__(self, data_series, conf: AlgorithmConfiguration):
        super().__init__(data_series, conf)
        self.seasonal_period = conf.get_int("seasonal_period")
        self.trend_period = conf.get_int("trend_period", None)
        self.z_score_threshold = conf.get_float("z_score_threshold")
        if self.z_score_threshold <= 0:
            raise ConfigurationError(
                f"Z-score threshold must be positive, got {self.z_score_threshold}"
            )

    def get_config(self) -> dict[str, Any]:
        return {
            "seasonal_period": self.seasonal_period,
            "trend_period": self.trend_period,
            "z_score_threshold": self.z_score_threshold,
        }

    def evaluate_snapshot(self, snapshot: Snapshot) -> float:
        z_score = getattr(snapshot, "value", math.nan)
        if math.isnan(z_score):
            return 0.0
        return abs(z_score) / self.z_score_threshold
