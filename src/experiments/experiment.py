"""
Experiment data: the ordered snapshots of one recorded run, together with its
service calls, injected faults, service statistics and monitor timings.
"""

import copy
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import replace
from datetime import datetime

import pandas as pd
import structlog

from src.core.errors import DataIntegrityError

from .dataseries import DataSeries
from .decomposition import residual_zscores
from .models import (
    DataCategory,
    DataType,
    Indicator,
    InjectedElement,
    LayerType,
    Observation,
    ServiceCall,
    ServiceStat,
)
from .snapshot import DataSeriesSnapshot, Snapshot

logger = structlog.get_logger(__name__)

Timings = Mapping[str, Mapping[LayerType, Sequence[int]]]


class ExperimentData:
    """Snapshots and side information of one experiment run

    The instance owns its snapshot list and exposes a forward-only cursor over
    it. Trainers never share an instance: each one works on ``copy()``.
    """

    def __init__(
        self,
        name: str,
        snapshots: Sequence[Snapshot],
        service_calls: Sequence[ServiceCall] = (),
        injections: Sequence[InjectedElement] = (),
        service_stats: Mapping[str, ServiceStat] | None = None,
        timings: Timings | None = None,
    ):
        self.name = name
        self._snapshots: list[Snapshot] = list(snapshots)
        self.service_calls: list[ServiceCall] = list(service_calls)
        self.injections: list[InjectedElement] = sorted(injections, key=lambda inj: inj.timestamp)
        self.service_stats: dict[str, ServiceStat] = dict(service_stats or {})
        self.timings: dict = {k: dict(v) for k, v in (timings or {}).items()}
        self._cursor = 0

        timestamps = [snap.timestamp for snap in self._snapshots]
        if timestamps != sorted(timestamps):
            raise DataIntegrityError(f"Snapshots of {name} are not ordered by timestamp")
        duplicated = [ts for ts, count in Counter(timestamps).items() if count > 1]
        if duplicated:
            raise DataIntegrityError(
                f"Duplicate snapshot timestamps in {name}: {sorted(duplicated)[:3]}"
            )

    @classmethod
    def from_observations(
        cls,
        name: str,
        observations: Iterable[Observation],
        service_calls: Sequence[ServiceCall] = (),
        injections: Sequence[InjectedElement] = (),
        service_stats: Mapping[str, ServiceStat] | None = None,
        timings: Timings | None = None,
        grace_seconds: float | None = None,
    ) -> "ExperimentData":
        """Build the snapshots of an experiment from its observations

        Each snapshot gets the service calls alive at its timestamp and the
        injection happening exactly at its timestamp, if any. Every injection
        is bounded by the next distinct injection and by ``grace_seconds``.

        Raises:
            DataIntegrityError: If two observations share a timestamp
        """
        stats = dict(service_stats or {})
        injections = _bound_injections(injections, grace_seconds)
        observations = sorted(observations, key=lambda obs: obs.timestamp)

        snapshots = []
        inj_index = 0
        for obs in observations:
            current_calls = tuple(call for call in service_calls if call.is_alive_at(obs.timestamp))
            while inj_index < len(injections) and injections[inj_index].timestamp < obs.timestamp:
                inj_index += 1
            current_inj = None
            if inj_index < len(injections) and injections[inj_index].happens_at(obs.timestamp):
                current_inj = injections[inj_index]
            snapshots.append(Snapshot(obs.timestamp, obs, current_calls, current_inj, stats))

        return cls(name, snapshots, service_calls, injections, stats, timings)

    # ========================================
    # Cursor
    # ========================================

    def reset_iterator(self) -> None:
        self._cursor = 0

    def has_next_snapshot(self) -> bool:
        return self._cursor < len(self._snapshots)

    def next_snapshot(self) -> Snapshot | None:
        """Advance the cursor, returning None (and logging) once exhausted"""
        if not self.has_next_snapshot():
            logger.error("No such snapshot", experiment=self.name, reason="Empty snapshot list")
            return None
        snap = self._snapshots[self._cursor]
        self._cursor += 1
        return snap

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def copy(self) -> "ExperimentData":
        """Independent deep copy with a cursor positioned at the start"""
        clone = copy.deepcopy(self)
        clone.reset_iterator()
        return clone

    def with_grace_period(self, grace_seconds: float | None) -> "ExperimentData":
        """Copy whose injected faults all use the given compliance window

        None closes each window only at the next distinct injection.
        """
        injections = _bound_injections(
            [replace(inj, grace_seconds=grace_seconds) for inj in self.injections], None
        )
        by_timestamp: dict[datetime, InjectedElement] = {}
        for inj in injections:
            by_timestamp.setdefault(inj.timestamp, inj)

        snapshots = [
            snap
            if snap.injected is None
            else replace(snap, injected=by_timestamp[snap.injected.timestamp])
            for snap in self._snapshots
        ]
        return ExperimentData(
            self.name, snapshots, self.service_calls, injections, self.service_stats, self.timings
        )

    # ========================================
    # Accessors
    # ========================================

    @property
    def snapshots(self) -> tuple[Snapshot, ...]:
        return tuple(self._snapshots)

    @property
    def snapshot_number(self) -> int:
        return len(self._snapshots)

    @property
    def first_timestamp(self) -> datetime | None:
        return self._snapshots[0].timestamp if self._snapshots else None

    @property
    def monitor_performance_indexes(self) -> dict:
        return self.timings

    def indicator_names(self) -> list[str]:
        if not self._snapshots:
            return []
        return [ind.name for ind in self._snapshots[0].observation.indicators]

    def numeric_indicators(self, category: DataCategory = DataCategory.PLAIN) -> list[Indicator]:
        """Indicators whose first observed value is a number"""
        if not self._snapshots:
            return []
        first = self._snapshots[0].observation
        return [
            ind
            for ind in first.indicators
            if not pd.isna(first.get_numeric(ind, category))
        ]

    def layer_indicators(self) -> dict[LayerType, int]:
        """Number of indicators per layer"""
        if not self._snapshots:
            return {}
        return dict(Counter(ind.layer for ind in self._snapshots[0].observation.indicators))

    def to_frame(self, category: DataCategory = DataCategory.PLAIN) -> pd.DataFrame:
        """Numeric indicator values, one row per snapshot and one column per indicator"""
        rows = {
            snap.timestamp: {
                ind.name: snap.observation.get_numeric(ind, category)
                for ind in snap.observation.indicators
            }
            for snap in self._snapshots
        }
        frame = pd.DataFrame.from_dict(rows, orient="index")
        frame.index.name = "timestamp"
        return frame

    def series_values(self, data_series: DataSeries) -> pd.Series:
        return pd.Series(
            [data_series.value_at(snap.observation) for snap in self._snapshots],
            index=[snap.timestamp for snap in self._snapshots],
            dtype=float,
        )

    # ========================================
    # Per-algorithm views
    # ========================================

    def build_snapshots_for(
        self, data_type: DataType, data_series: DataSeries | None, configuration
    ) -> list[Snapshot]:
        """Build the snapshot view an algorithm consumes

        Args:
            data_type: Kind of view the algorithm needs
            data_series: Series to project on (ignored for SNAPSHOT views)
            configuration: Reference configuration, read by views that
                depend on algorithm parameters (e.g. the STL seasonal period)

        Returns:
            Snapshots in timestamp order

        Raises:
            DataIntegrityError: If the view cannot be computed on this experiment
        """
        if data_type is DataType.SNAPSHOT:
            return list(self._snapshots)

        if data_series is None:
            raise DataIntegrityError(f"A {data_type.value} view requires a data series")

        if data_type is DataType.SERIES:
            values = self.series_values(data_series)
        elif data_type is DataType.RESIDUAL:
            values = residual_zscores(
                self.series_values(data_series),
                seasonal_period=configuration.get_int("seasonal_period"),
                trend_period=configuration.get_int("trend_period", None),
            )
        else:
            raise DataIntegrityError(f"Unsupported view type: {data_type}")

        return [
            DataSeriesSnapshot(
                snap.timestamp,
                snap.observation,
                snap.service_calls,
                snap.injected,
                snap.service_stats,
                data_series=data_series,
                value=float(value),
            )
            for snap, value in zip(self._snapshots, values, strict=True)
        ]

    def __repr__(self) -> str:
        return (
            f"ExperimentData(name={self.name!r}, snapshots={len(self._snapshots)}, "
            f"injections={len(self.injections)})"
        )


def _bound_injections(
    injections: Iterable[InjectedElement], grace_seconds: float | None
) -> list[InjectedElement]:
    """Sort injections and close each compliance window at the next distinct injection"""
    ordered = sorted(injections, key=lambda inj: inj.timestamp)
    bounded = []
    for i, inj in enumerate(ordered):
        until = next(
            (later.timestamp for later in ordered[i + 1 :] if later.timestamp > inj.timestamp),
            None,
        )
        grace = inj.grace_seconds if inj.grace_seconds is not None else grace_seconds
        bounded.append(InjectedElement(inj.timestamp, inj.description, grace, until))
    return bounded
