"""
Detection algorithm registry and factory.
"""

from src.experiments.dataseries import DataSeries

from ..configuration import AlgorithmConfiguration
from ..schema import AlgorithmType
from .base import DetectionAlgorithm
from .historical import HistoricalIndicatorChecker
from .remote_call import RemoteCallChecker
from .stl_zscore import STLZScoreMethod
from .threshold import StaticThresholdChecker

# Registry of available algorithms
METHOD_REGISTRY: dict[AlgorithmType, type[DetectionAlgorithm]] = {
    AlgorithmType.REMOTE_CALL_CHECKER: RemoteCallChecker,
    AlgorithmType.STATIC_THRESHOLD: StaticThresholdChecker,
    AlgorithmType.HISTORICAL_CHECKER: HistoricalIndicatorChecker,
    AlgorithmType.STL_ZSCORE: STLZScoreMethod,
}


def get_method(algorithm_type: AlgorithmType) -> type[DetectionAlgorithm]:
    """Look up the algorithm class registered for a type tag

    Raises:
        ValueError: If the algorithm type is not registered
    """
    if algorithm_type not in METHOD_REGISTRY:
        available = ", ".join(t.value for t in METHOD_REGISTRY)
        raise ValueError(f"Unknown algorithm '{algorithm_type}'. Available algorithms: {available}")
    return METHOD_REGISTRY[algorithm_type]


def build_algorithm(
    data_series: DataSeries | None, conf: AlgorithmConfiguration
) -> DetectionAlgorithm:
    """Factory to instantiate the algorithm described by a configuration

    Raises:
        ConfigurationError: If the configuration is missing or has malformed parameters
    """
    return get_method(conf.algorithm_type)(data_series, conf)


def list_methods() -> list[str]:
    """List all available detection algorithms"""
    return [t.value for t in METHOD_REGISTRY]


__all__ = [
    "DetectionAlgorithm",
    "HistoricalIndicatorChecker",
    "METHOD_REGISTRY",
    "RemoteCallChecker",
    "STLZScoreMethod",
    "StaticThresholdChecker",
    "build_algorithm",
    "get_method",
    "list_methods",
]
