"""
Tests for generator models (FaultType, GeneratorConfig).
"""

import pytest

from src.core.errors import ConfigurationError
from src.experiments.models import LayerType
from src.generator.config import DEV_CONFIG, SERVICE_FOCUS_CONFIG
from src.generator.models import (
    DEFAULT_INDICATORS,
    FAULT_EFFECTS,
    SERVICE_FAULTS,
    FaultType,
    GeneratorConfig,
)


class TestFaultType:
    """Tests for FaultType enum."""

    def test_all_fault_types_exist(self):
        """Verify all expected fault types are defined."""
        expected_types = {
            "cpu_spike",
            "memory_leak",
            "network_saturation",
            "disk_io_bottleneck",
            "gc_pressure",
            "connection_exhaustion",
            "latency_spike",
            "error_burst",
        }
        assert {fault.value for fault in FaultType} == expected_types

    def test_every_host_fault_has_effects(self, all_fault_types):
        """Verify host faults change at least one default indicator."""
        names = {p.name for p in DEFAULT_INDICATORS}
        for fault in all_fault_types:
            if fault in SERVICE_FAULTS:
                assert fault not in FAULT_EFFECTS
                continue
            assert FAULT_EFFECTS[fault]
            assert set(FAULT_EFFECTS[fault]) <= names


class TestGeneratorConfig:
    """Tests for GeneratorConfig dataclass."""

    def test_default_config(self):
        """Test default configuration values."""
        config = GeneratorConfig()

        assert config.num_snapshots == 120
        assert config.interval_seconds == 5.0
        assert config.fault_probability == 0.02
        assert config.enabled_faults == list(FaultType)
        assert config.services == ["api-gateway", "order-service", "payment-service"]
        assert config.seed is None

    def test_default_indicators_cover_every_layer(self):
        """Test the default indicators span all monitored layers."""
        layers = {p.layer for p in GeneratorConfig().indicators}

        assert layers == set(LayerType) - {LayerType.NO_LAYER}

    def test_custom_config(self):
        """Test configuration with custom values."""
        config = GeneratorConfig(
            num_snapshots=10,
            services=["billing"],
            enabled_faults=[FaultType.MEMORY_LEAK],
            seed=3,
        )

        assert config.num_snapshots == 10
        assert config.services == ["billing"]
        assert config.enabled_faults == [FaultType.MEMORY_LEAK]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"num_snapshots": 0},
            {"interval_seconds": 0},
            {"fault_probability": 1.5},
            {"call_probability": -0.1},
            {"fault_duration_steps": (0, 3)},
            {"fault_duration_steps": (5, 2)},
        ],
    )
    def test_invalid_config(self, kwargs):
        """Test invalid values are rejected."""
        with pytest.raises(ConfigurationError):
            GeneratorConfig(**kwargs)

    def test_presets(self):
        """Test predefined scenarios."""
        assert DEV_CONFIG.seed == 42
        assert set(SERVICE_FOCUS_CONFIG.enabled_faults) == set(SERVICE_FAULTS)
