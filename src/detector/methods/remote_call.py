"""
Remote call checker.

Checks whether the service calls active at a snapshot behave as their
historical statistics say they should: calls ending with an error code score
the configured weight, calls whose duration deviates from the expected one
score 1.0.
"""

from datetime import datetime
from typing import Any

from src.experiments.models import DataType, ServiceCall, ServiceStat
from src.experiments.snapshot import Snapshot

from ..configuration import AlgorithmConfiguration
from ..schema import AlgorithmType
from .base import DetectionAlgorithm

WEIGHT_TAG = "rcc_weight"
OK_RESPONSE = "200"


class RemoteCallChecker(DetectionAlgorithm):
    """Service call duration / response code checker"""

    algorithm_type = AlgorithmType.REMOTE_CALL_CHECKER
    data_type = DataType.SNAPSHOT

    def __init__(self, data_series, conf: AlgorithmConfiguration):
        super().__init__(None, conf)
        self._weight = conf.get_float(WEIGHT_TAG)

    @property
    def weight(self) -> float:
        return self._weight

    def get_config(self) -> dict[str, Any]:
        return {WEIGHT_TAG: self._weight}

    def evaluate_snapshot(self, snapshot: Snapshot) -> float:
        results = []
        for call in snapshot.service_calls:
            stat = snapshot.get_service_stat(call.service_name)
            # calls of services without history cannot be judged
            if stat is None:
                continue
            results.append(self._analyze_call(snapshot.timestamp, call, stat))

        if not results:
            return 0.0
        return sum(results) / len(results)

    def _analyze_call(self, snap_time: datetime, call: ServiceCall, stat: ServiceStat) -> float:
        if call.ends_at(snap_time):
            if call.response_code != OK_RESPONSE:
                return self._weight
            return self.evaluate_abs_diff(call.duration_seconds, stat.time_stat, 1.0)
        elapsed = (snap_time - call.start_time).total_seconds()
        return self.evaluate_over_diff(elapsed, stat.time_stat)
