"""
Snapshots: the atomic unit of anomaly scoring.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

from .dataseries import DataSeries
from .models import InjectedElement, Observation, ServiceCall, ServiceStat


@dataclass(frozen=True)
class Snapshot:
    """One timestamped system state"""

    timestamp: datetime
    observation: Observation
    service_calls: tuple[ServiceCall, ...]
    injected: InjectedElement | None
    service_stats: Mapping[str, ServiceStat] = field(compare=False, repr=False)

    @property
    def is_detection_point(self) -> bool:
        """True if a fault was injected exactly at this snapshot"""
        return self.injected is not None and self.injected.happens_at(self.timestamp)

    def get_service_stat(self, service_name: str) -> ServiceStat | None:
        return self.service_stats.get(service_name)


@dataclass(frozen=True)
class DataSeriesSnapshot(Snapshot):
    """Snapshot projected on a data series for one algorithm view"""

    data_series: DataSeries | None = None
    value: float = float("nan")
