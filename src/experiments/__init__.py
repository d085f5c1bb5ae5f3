"""
Experiment data model.

Recorded experiment runs (observations, service calls, injected faults) are
turned into ordered Snapshots, the unit every detection algorithm scores.
"""

from .dataseries import DataSeries, SeriesOperation, build_data_series
from .experiment import ExperimentData
from .loader import ExperimentRecords, build_experiment, load_experiments
from .models import (
    DataCategory,
    DataType,
    Indicator,
    IndicatorStat,
    InjectedElement,
    LayerType,
    Observation,
    ServiceCall,
    ServiceStat,
    StatPair,
)
from .snapshot import DataSeriesSnapshot, Snapshot

__all__ = [
    "DataCategory",
    "DataSeries",
    "DataSeriesSnapshot",
    "DataType",
    "ExperimentData",
    "ExperimentRecords",
    "Indicator",
    "IndicatorStat",
    "InjectedElement",
    "LayerType",
    "Observation",
    "SeriesOperation",
    "ServiceCall",
    "ServiceStat",
    "Snapshot",
    "StatPair",
    "build_data_series",
    "build_experiment",
    "load_experiments",
]
