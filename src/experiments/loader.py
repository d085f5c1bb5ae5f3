"""
Builds ExperimentData from raw experiment records.

The records mirror what the ingestion layer extracts for one run: string
encoded indicator values, ISO timestamps and (avg, std) statistic pairs. Any
malformed record makes the whole experiment invalid; ``load_experiments``
drops such experiments and keeps going.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import structlog

from src.core.errors import DataIntegrityError

from .experiment import ExperimentData
from .models import (
    DataCategory,
    Indicator,
    IndicatorStat,
    InjectedElement,
    LayerType,
    Observation,
    ServiceCall,
    ServiceStat,
    StatPair,
    parse_timestamp,
)

logger = structlog.get_logger(__name__)


@dataclass
class ExperimentRecords:
    """Raw records of one experiment run

    observations: [{"timestamp": str, "values": {indicator: {"plain": str, "derived": str}}}]
    indicator_layers: {indicator: layer name}
    service_calls: [{"service": str, "start": str, "end": str | None, "response": str}]
    injections: [{"timestamp": str, "description": str}]
    service_stats: [{"service": str, "duration": [avg, std], "observations": [avg, std],
                     "indicators": {indicator: {"first": [avg, std], "last": [...], "all": [...]}}}]
    timings: {performance type: {layer name: [int, ...]}}
    """

    run_id: str
    observations: list[dict[str, Any]] = field(default_factory=list)
    indicator_layers: dict[str, str] = field(default_factory=dict)
    service_calls: list[dict[str, Any]] = field(default_factory=list)
    injections: list[dict[str, Any]] = field(default_factory=list)
    service_stats: list[dict[str, Any]] = field(default_factory=list)
    timings: dict[str, dict[str, list]] = field(default_factory=dict)


def _parse_layer(name: str | None) -> LayerType:
    if name is None:
        return LayerType.NO_LAYER
    try:
        return LayerType(str(name).lower())
    except ValueError as e:
        raise DataIntegrityError(f"Unknown layer: {name!r}") from e


def _parse_category(name: str) -> DataCategory:
    try:
        return DataCategory(str(name).lower())
    except ValueError as e:
        raise DataIntegrityError(f"Unknown data category: {name!r}") from e


def _parse_observations(records: ExperimentRecords) -> list[Observation]:
    indicators = {
        name: Indicator(name, _parse_layer(layer)) for name, layer in records.indicator_layers.items()
    }
    observations = []
    for raw in records.observations:
        if "timestamp" not in raw:
            raise DataIntegrityError("Observation without timestamp")
        values = {}
        try:
            for name, data in raw.get("values", {}).items():
                indicator = indicators.setdefault(name, Indicator(name))
                values[indicator] = {
                    _parse_category(cat): None if value is None else str(value)
                    for cat, value in data.items()
                }
        except (AttributeError, TypeError) as e:
            raise DataIntegrityError(f"Malformed observation values: {e}") from e
        observations.append(Observation(parse_timestamp(raw["timestamp"]), values))
    return observations


def _parse_service_calls(records: ExperimentRecords) -> list[ServiceCall]:
    calls = []
    for raw in records.service_calls:
        try:
            end = raw.get("end")
            calls.append(
                ServiceCall(
                    service_name=raw["service"],
                    start_time=parse_timestamp(raw["start"]),
                    end_time=parse_timestamp(end) if end is not None else None,
                    response_code=str(raw.get("response", "200")),
                )
            )
        except KeyError as e:
            raise DataIntegrityError(f"Service call missing field {e}") from e
    return calls


def _parse_injections(records: ExperimentRecords) -> list[InjectedElement]:
    injections = []
    for raw in records.injections:
        if "timestamp" not in raw:
            raise DataIntegrityError("Injection without timestamp")
        injections.append(
            InjectedElement(parse_timestamp(raw["timestamp"]), str(raw.get("description", "")))
        )
    return injections


def _parse_service_stats(records: ExperimentRecords) -> dict[str, ServiceStat]:
    stats = {}
    for raw in records.service_stats:
        try:
            indicator_stats = {
                name: IndicatorStat(
                    name,
                    StatPair.parse(*pairs["first"]),
                    StatPair.parse(*pairs["last"]),
                    StatPair.parse(*pairs["all"]),
                )
                for name, pairs in raw.get("indicators", {}).items()
            }
            stats[raw["service"]] = ServiceStat(
                service_name=raw["service"],
                time_stat=StatPair.parse(*raw["duration"]),
                obs_stat=StatPair.parse(*raw["observations"]),
                indicator_stats=indicator_stats,
            )
        except (KeyError, TypeError) as e:
            raise DataIntegrityError(f"Malformed service statistics: {e}") from e
    return stats


def _parse_timings(records: ExperimentRecords) -> dict:
    timings = {}
    for perf_type, by_layer in records.timings.items():
        try:
            timings[perf_type] = {
                _parse_layer(layer): [int(sample) for sample in samples]
                for layer, samples in by_layer.items()
            }
        except (TypeError, ValueError) as e:
            raise DataIntegrityError(f"Malformed timing samples for {perf_type}") from e
    return timings


def _check_timezones(
    observations: list[Observation],
    service_calls: list[ServiceCall],
    injections: list[InjectedElement],
) -> None:
    """All timestamps of a run must be either timezone-aware or naive"""
    timestamps = [obs.timestamp for obs in observations]
    timestamps += [inj.timestamp for inj in injections]
    for call in service_calls:
        timestamps.append(call.start_time)
        if call.end_time is not None:
            timestamps.append(call.end_time)

    aware = {ts.tzinfo is not None and ts.utcoffset() is not None for ts in timestamps}
    if len(aware) > 1:
        raise DataIntegrityError("Timezone-aware and naive timestamps mixed in one run")


def build_experiment(records: ExperimentRecords, grace_seconds: float | None = None) -> ExperimentData:
    """Build one experiment from its raw records

    Args:
        records: Raw records of the run
        grace_seconds: Compliance window of injected faults (None = until the next fault)

    Raises:
        DataIntegrityError: If any record is malformed or inconsistent
    """
    observations = _parse_observations(records)
    service_calls = _parse_service_calls(records)
    injections = _parse_injections(records)
    _check_timezones(observations, service_calls, injections)

    return ExperimentData.from_observations(
        name=f"exp{records.run_id}",
        observations=observations,
        service_calls=sorted(service_calls, key=lambda call: call.start_time),
        injections=injections,
        service_stats=_parse_service_stats(records),
        timings=_parse_timings(records),
        grace_seconds=grace_seconds,
    )


def load_experiments(
    records: Iterable[ExperimentRecords], grace_seconds: float | None = None
) -> list[ExperimentData]:
    """Build every valid experiment, skipping (and logging) the malformed ones"""
    experiments = []
    skipped = 0
    for run in records:
        try:
            experiments.append(build_experiment(run, grace_seconds))
        except DataIntegrityError as e:
            skipped += 1
            logger.error("Experiment excluded from training set", run_id=run.run_id, error=str(e))

    logger.info("Experiments loaded", loaded=len(experiments), skipped=skipped)
    return experiments
