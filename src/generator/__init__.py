"""
Synthetic Experiment Generator
Simulates monitored runs of a multi-layer system with injected faults, as
training data for the detector engine.
"""

from .config import (
    CHAOS_CONFIG,
    DEV_CONFIG,
    NETWORK_STRESS_CONFIG,
    NORMAL_CONFIG,
    SERVICE_FOCUS_CONFIG,
)
from .generator import ExperimentGenerator
from .models import (
    DEFAULT_INDICATORS,
    DEFAULT_SERVICES,
    FAULT_EFFECTS,
    SERVICE_FAULTS,
    FaultType,
    GeneratorConfig,
    IndicatorProfile,
)
from .server_state import ServerState
from .service_state import ServiceState

__all__ = [
    "FaultType",
    "GeneratorConfig",
    "IndicatorProfile",
    "ServerState",
    "ServiceState",
    "ExperimentGenerator",
    "DEFAULT_INDICATORS",
    "DEFAULT_SERVICES",
    "FAULT_EFFECTS",
    "SERVICE_FAULTS",
    "NORMAL_CONFIG",
    "CHAOS_CONFIG",
    "SERVICE_FOCUS_CONFIG",
    "NETWORK_STRESS_CONFIG",
    "DEV_CONFIG",
]

__version__ = "1.0.0"
