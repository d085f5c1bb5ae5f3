"""
Data models for recorded experiments: indicators, observations, service
calls, service statistics and injected faults.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from src.core.errors import DataIntegrityError


class LayerType(Enum):
    """Layers of the monitored system an indicator can belong to"""

    NO_LAYER = "no_layer"
    OS = "os"
    NETWORK = "network"
    MIDDLEWARE = "middleware"
    JVM = "jvm"
    APPLICATION = "application"


class DataCategory(Enum):
    """How an indicator value was obtained"""

    PLAIN = "plain"
    DERIVED = "derived"


class DataType(Enum):
    """Kind of per-algorithm snapshot view an algorithm consumes"""

    SNAPSHOT = "snapshot"  # full snapshots, no data series
    SERIES = "series"  # snapshots projected on a data series
    RESIDUAL = "residual"  # STL residual z-score of a data series


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 timestamp (or pass a datetime through)

    Raises:
        DataIntegrityError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise DataIntegrityError(f"Unparsable timestamp: {value!r}") from e


def to_float(value) -> float:
    """Convert a raw indicator value to float, NaN when it is not a number"""
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


@dataclass(frozen=True)
class Indicator:
    """A monitored indicator, identified by name and layer"""

    name: str
    layer: LayerType = LayerType.NO_LAYER

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Observation:
    """Values of all indicators at one timestamp"""

    timestamp: datetime
    values: Mapping[Indicator, Mapping[DataCategory, str]] = field(default_factory=dict)

    @property
    def indicators(self) -> list[Indicator]:
        return list(self.values.keys())

    def find_indicator(self, name: str) -> Indicator | None:
        for indicator in self.values:
            if indicator.name == name:
                return indicator
        return None

    def get_value(self, indicator: Indicator, category: DataCategory) -> str | None:
        data = self.values.get(indicator)
        if data is None:
            return None
        return data.get(category)

    def get_numeric(self, indicator: Indicator, category: DataCategory) -> float:
        return to_float(self.get_value(indicator, category))


@dataclass(frozen=True)
class ServiceCall:
    """A service invocation observed during the experiment"""

    service_name: str
    start_time: datetime
    end_time: datetime | None
    response_code: str = "200"

    def is_alive_at(self, timestamp: datetime) -> bool:
        """True if the call started at or before timestamp and had not ended before it"""
        if timestamp < self.start_time:
            return False
        return self.end_time is None or timestamp <= self.end_time

    def ends_at(self, timestamp: datetime) -> bool:
        return self.end_time is not None and self.end_time == timestamp

    @property
    def duration_seconds(self) -> float | None:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()


@dataclass(frozen=True)
class StatPair:
    """Mean / standard deviation pair"""

    avg: float
    std: float

    @classmethod
    def parse(cls, avg, std) -> "StatPair":
        """Build from raw (possibly string-encoded) values

        Raises:
            DataIntegrityError: If either value is not a number
        """
        pair = cls(to_float(avg), to_float(std))
        if math.isnan(pair.avg) or math.isnan(pair.std):
            raise DataIntegrityError(f"Invalid statistic pair: avg={avg!r}, std={std!r}")
        return pair


@dataclass(frozen=True)
class IndicatorStat:
    """Historical statistics of an indicator while a service is running"""

    name: str
    first: StatPair
    last: StatPair
    all: StatPair


@dataclass(frozen=True)
class ServiceStat:
    """Historical statistics of a service"""

    service_name: str
    time_stat: StatPair
    obs_stat: StatPair
    indicator_stats: Mapping[str, IndicatorStat] = field(default_factory=dict)

    def get_indicator_stat(self, name: str) -> IndicatorStat | None:
        return self.indicator_stats.get(name)


@dataclass(frozen=True)
class InjectedElement:
    """A fault injected during the experiment

    The compliance window decides which later timestamps are still
    attributable to this fault: strictly after the injection, strictly before
    the next distinct injection (``until``) and, when ``grace_seconds`` is
    set, no more than that many seconds after the injection.
    """

    timestamp: datetime
    description: str
    grace_seconds: float | None = None
    until: datetime | None = None

    def happens_at(self, timestamp: datetime) -> bool:
        return self.timestamp == timestamp

    def complies_with(self, timestamp: datetime) -> bool:
        if timestamp <= self.timestamp:
            return False
        if self.until is not None and timestamp >= self.until:
            return False
        if self.grace_seconds is not None:
            return (timestamp - self.timestamp).total_seconds() <= self.grace_seconds
        return True

    def bounded_by(self, until: datetime | None) -> "InjectedElement":
        return replace(self, until=until)
