"""
Data models and enums for the synthetic experiment generator.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from src.core.errors import ConfigurationError
from src.experiments.models import LayerType


class FaultType(Enum):
    """Types of faults that can be injected"""

    CPU_SPIKE = "cpu_spike"
    MEMORY_LEAK = "memory_leak"
    NETWORK_SATURATION = "network_saturation"
    DISK_IO_BOTTLENECK = "disk_io_bottleneck"
    GC_PRESSURE = "gc_pressure"
    CONNECTION_EXHAUSTION = "connection_exhaustion"
    LATENCY_SPIKE = "latency_spike"
    ERROR_BURST = "error_burst"


# Faults that hit a single service instead of the monitored host
SERVICE_FAULTS = (FaultType.LATENCY_SPIKE, FaultType.ERROR_BURST)


@dataclass(frozen=True)
class IndicatorProfile:
    """Normal behaviour of one monitored indicator"""

    name: str
    layer: LayerType
    base: float
    noise: float = 0.05  # relative standard deviation
    upper: float | None = None


DEFAULT_INDICATORS = (
    IndicatorProfile("cpu_usage_percent", LayerType.OS, 30.0, upper=99.9),
    IndicatorProfile("memory_usage_percent", LayerType.OS, 40.0, noise=0.02, upper=99.9),
    IndicatorProfile("disk_read_mbps", LayerType.OS, 12.0, noise=0.1),
    IndicatorProfile("network_rx_mbps", LayerType.NETWORK, 45.0, noise=0.1),
    IndicatorProfile("network_tx_mbps", LayerType.NETWORK, 38.0, noise=0.1),
    IndicatorProfile("active_connections", LayerType.MIDDLEWARE, 200.0),
    IndicatorProfile("queue_depth", LayerType.MIDDLEWARE, 20.0, noise=0.15),
    IndicatorProfile("heap_used_mb", LayerType.JVM, 512.0, noise=0.03),
    IndicatorProfile("gc_time_ms", LayerType.JVM, 15.0, noise=0.1),
    IndicatorProfile("request_rate_per_sec", LayerType.APPLICATION, 400.0),
    IndicatorProfile("response_time_ms", LayerType.APPLICATION, 35.0),
    IndicatorProfile("error_rate_percent", LayerType.APPLICATION, 0.5, noise=0.2, upper=50.0),
)

DEFAULT_SERVICES = ("api-gateway", "order-service", "payment-service")

# Multiplier ranges applied to host indicators while a fault is active
FAULT_EFFECTS: dict[FaultType, dict[str, tuple[float, float]]] = {
    FaultType.CPU_SPIKE: {
        "cpu_usage_percent": (2.5, 3.5),
        "response_time_ms": (1.3, 1.6),
    },
    FaultType.MEMORY_LEAK: {
        "memory_usage_percent": (1.5, 2.2),
        "heap_used_mb": (1.6, 2.0),
        "gc_time_ms": (2.0, 4.0),
    },
    FaultType.NETWORK_SATURATION: {
        "network_rx_mbps": (3.0, 5.0),
        "network_tx_mbps": (3.0, 5.0),
        "response_time_ms": (1.5, 2.5),
    },
    FaultType.DISK_IO_BOTTLENECK: {
        "disk_read_mbps": (3.0, 6.0),
        "queue_depth": (2.0, 4.0),
    },
    FaultType.GC_PRESSURE: {
        "gc_time_ms": (5.0, 10.0),
        "cpu_usage_percent": (1.3, 1.6),
    },
    FaultType.CONNECTION_EXHAUSTION: {
        "active_connections": (2.5, 4.0),
        "queue_depth": (3.0, 6.0),
        "error_rate_percent": (5.0, 20.0),
    },
}


@dataclass
class GeneratorConfig:
    """Configuration for the experiment generator"""

    # Timeline
    num_snapshots: int = 120
    interval_seconds: float = 5.0
    start_time: datetime = field(default_factory=lambda: datetime(2024, 1, 1, tzinfo=UTC))

    # Monitored system
    indicators: list[IndicatorProfile] | None = None
    services: list[str] | None = None
    include_derived: bool = True
    seasonal_steps: int = 24
    seasonal_amplitude: float = 0.1

    # Service calls
    call_probability: float = 0.3
    base_call_seconds: float = 8.0

    # Fault settings
    fault_probability: float = 0.02  # chance of a fault per snapshot
    fault_duration_steps: tuple[int, int] = (3, 10)
    enabled_faults: list[FaultType] | None = None

    # None = different data on every run
    seed: int | None = None

    def __post_init__(self):
        if self.indicators is None:
            self.indicators = list(DEFAULT_INDICATORS)
        if self.services is None:
            self.services = list(DEFAULT_SERVICES)
        if self.enabled_faults is None:
            self.enabled_faults = list(FaultType)

        if self.num_snapshots <= 0:
            raise ConfigurationError("num_snapshots must be positive")
        if self.interval_seconds <= 0:
            raise ConfigurationError("interval_seconds must be positive")
        for name in ("fault_probability", "call_probability"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ConfigurationError(f"{name} must be between 0 and 1")
        low, high = self.fault_duration_steps
        if low < 1 or high < low:
            raise ConfigurationError(f"Invalid fault_duration_steps: {self.fault_duration_steps}")
