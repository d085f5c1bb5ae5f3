"""
Predefined configurations for different experiment scenarios.
"""

from .models import FaultType, GeneratorConfig

# Normal operation (rare faults)
NORMAL_CONFIG = GeneratorConfig(
    num_snapshots=240,
    fault_probability=0.01,
    interval_seconds=5.0,
)


# Chaos mode (frequent faults, all types)
CHAOS_CONFIG = GeneratorConfig(
    num_snapshots=240,
    fault_probability=0.08,
    fault_duration_steps=(2, 6),
    interval_seconds=2.0,
)


# Service level faults only
SERVICE_FOCUS_CONFIG = GeneratorConfig(
    num_snapshots=180,
    fault_probability=0.03,
    call_probability=0.6,
    enabled_faults=[FaultType.LATENCY_SPIKE, FaultType.ERROR_BURST],
)


# Network stress testing
NETWORK_STRESS_CONFIG = GeneratorConfig(
    num_snapshots=180,
    fault_probability=0.03,
    enabled_faults=[
        FaultType.NETWORK_SATURATION,
        FaultType.LATENCY_SPIKE,
        FaultType.CONNECTION_EXHAUSTION,
    ],
    interval_seconds=1.0,
)


# Development/Testing (small and reproducible)
DEV_CONFIG = GeneratorConfig(num_snapshots=60, fault_probability=0.05, seed=42)
