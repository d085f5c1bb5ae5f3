"""
Detector training and selection engine.

For every detection algorithm and monitored data series, grid-searches the
candidate configurations against a metric on recorded experiments with
injected faults, and reports the best configuration with its metric and
reputation scores for the ensemble.

Usage:
    orchestrator = TrainingOrchestrator(TrainingConfig(), configurations)
    report = orchestrator.train(experiments)
    best = report.best_by_series(orchestrator.metric)
"""

from .configuration import AlgorithmConfiguration, parse_configurations
from .methods import DetectionAlgorithm, build_algorithm, get_method, list_methods
from .metrics import Metric, MetricType, get_metric
from .models import TrainingConfig, TrainingReport, TrainingResult
from .orchestrator import TrainingOrchestrator
from .reputation import Reputation, get_reputation
from .schema import SCORE, WEIGHT, AlgorithmType
from .trainer import AlgorithmTrainer

__all__ = [
    "AlgorithmConfiguration",
    "AlgorithmTrainer",
    "AlgorithmType",
    "DetectionAlgorithm",
    "Metric",
    "MetricType",
    "Reputation",
    "SCORE",
    "TrainingConfig",
    "TrainingOrchestrator",
    "TrainingReport",
    "TrainingResult",
    "WEIGHT",
    "build_algorithm",
    "get_method",
    "get_metric",
    "get_reputation",
    "list_methods",
    "parse_configurations",
]
