"""
Base abstract interface for detection algorithms.

All detection algorithms must inherit from DetectionAlgorithm and implement:
- evaluate_snapshot(): Score one snapshot
- get_config(): Expose the parsed parameters
"""

import math
from abc import ABC, abstractmethod
from typing import Any

from src.core.errors import ConfigurationError
from src.experiments.dataseries import DataSeries
from src.experiments.models import DataType, Indicator, StatPair
from src.experiments.snapshot import Snapshot

from ..configuration import AlgorithmConfiguration
from ..schema import AlgorithmType


class DetectionAlgorithm(ABC):
    """Abstract base class for all detection algorithms

    An algorithm is built from one configuration and is immutable afterwards:
    evaluate_snapshot() is a pure function of the snapshot. Scores are
    normalised so that a value >= 1.0 means "anomalous".

    Subclasses declare which view they consume through ``data_type``.
    """

    algorithm_type: AlgorithmType
    data_type: DataType = DataType.SERIES

    def __init__(self, data_series: DataSeries | None, conf: AlgorithmConfiguration):
        """Initialize with a data series and configuration

        Raises:
            ConfigurationError: If a required parameter is missing or malformed
        """
        if data_series is None and self.data_type is not DataType.SNAPSHOT:
            raise ConfigurationError(f"{self.algorithm_type.value} requires a data series")
        self.data_series = data_series
        self.conf = conf

    @abstractmethod
    def evaluate_snapshot(self, snapshot: Snapshot) -> float:
        """Score a snapshot

        Args:
            snapshot: Snapshot from the view built for this algorithm

        Returns:
            Anomaly score (>= 1.0 means anomalous)
        """
        pass

    @abstractmethod
    def get_config(self) -> dict[str, Any]:
        """Get the parsed configuration of this algorithm"""
        pass

    @property
    def name(self) -> str:
        return self.algorithm_type.value

    @property
    def weight(self) -> float:
        """Static confidence of the algorithm, independent of training"""
        return 1.0

    @property
    def indicator(self) -> Indicator | None:
        if self.data_series is None or not self.data_series.is_simple:
            return None
        return self.data_series.indicators[0]

    @staticmethod
    def evaluate_abs_diff(value: float, stat: StatPair, tolerance: float = 1.0) -> float:
        """1.0 if value is further than tolerance * std from the mean, else 0.0"""
        if math.isnan(value):
            return 0.0
        return 1.0 if abs(value - stat.avg) > tolerance * stat.std else 0.0

    @staticmethod
    def evaluate_over_diff(value: float, stat: StatPair) -> float:
        """1.0 if value exceeds the mean by more than one std, else 0.0"""
        if math.isnan(value):
            return 0.0
        return 1.0 if value - stat.avg > stat.std else 0.0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(series={self.data_series}, config={self.get_config()})"
