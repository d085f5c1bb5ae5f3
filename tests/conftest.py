"""
Pytest configuration and shared fixtures.
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.detector.configuration import AlgorithmConfiguration
from src.detector.schema import AlgorithmType
from src.experiments.experiment import ExperimentData
from src.experiments.models import (
    DataCategory,
    Indicator,
    InjectedElement,
    LayerType,
    Observation,
    ServiceCall,
    ServiceStat,
    StatPair,
)
from src.generator.models import FaultType, GeneratorConfig

T0 = datetime(2024, 1, 1, tzinfo=UTC)

CPU = Indicator("cpu_usage_percent", LayerType.OS)
RESPONSE_TIME = Indicator("response_time_ms", LayerType.APPLICATION)


def at(seconds: float) -> datetime:
    """Timestamp ``seconds`` after the reference start time."""
    return T0 + timedelta(seconds=seconds)


# Experiment fixtures
@pytest.fixture
def make_experiment():
    """Factory building an experiment from per-snapshot indicator values.

    Snapshots are one second apart; faults are injected at the given steps.
    """

    def _make(
        values,
        fault_steps=(),
        name="exp1",
        grace_seconds=None,
        indicators=(CPU,),
        service_calls=(),
        service_stats=None,
    ):
        observations = []
        for step, value in enumerate(values):
            row = value if isinstance(value, (list, tuple)) else [value] * len(indicators)
            observations.append(
                Observation(
                    at(step),
                    {
                        ind: {DataCategory.PLAIN: str(v), DataCategory.DERIVED: "0.0"}
                        for ind, v in zip(indicators, row, strict=True)
                    },
                )
            )
        injections = [InjectedElement(at(step), f"fault{step}") for step in fault_steps]
        return ExperimentData.from_observations(
            name,
            observations,
            service_calls=service_calls,
            injections=injections,
            service_stats=service_stats,
            grace_seconds=grace_seconds,
        )

    return _make


@pytest.fixture
def five_snapshot_experiment(make_experiment):
    """5 snapshots, fault injected at the third one, no compliant follow-ups."""
    return make_experiment([1.0, 1.0, 10.0, 1.0, 1.0], fault_steps=[2], grace_seconds=0)


@pytest.fixture
def api_stat():
    """Historical statistics of the api service: 10s +- 2s per call."""
    return ServiceStat(
        service_name="api",
        time_stat=StatPair(10.0, 2.0),
        obs_stat=StatPair(2.0, 0.5),
    )


@pytest.fixture
def api_call():
    """A call to the api service running from t=0 to t=3."""
    return ServiceCall("api", at(0), at(3), "200")


# Configuration fixtures
@pytest.fixture
def threshold_candidates():
    """Static threshold candidates, in search order."""
    return [
        AlgorithmConfiguration(AlgorithmType.STATIC_THRESHOLD, {"threshold": value})
        for value in ("20", "5", "0.5")
    ]


# Generator fixtures
@pytest.fixture
def minimal_config():
    """Small, seeded generator configuration for fast tests."""
    return GeneratorConfig(num_snapshots=30, fault_probability=0.0, seed=7)


@pytest.fixture
def faulty_config():
    """Seeded configuration where a fault starts whenever none is active."""
    return GeneratorConfig(
        num_snapshots=30,
        fault_probability=1.0,
        fault_duration_steps=(2, 4),
        enabled_faults=[FaultType.CPU_SPIKE],
        seed=11,
    )


@pytest.fixture
def all_fault_types():
    """List of all fault types."""
    return list(FaultType)
