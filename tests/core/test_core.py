"""
Tests for core logging setup and the error taxonomy.
"""

import logging

import pytest
import structlog

from src.core.errors import ConfigurationError, DataIntegrityError, DetectorError, TrainingFailure
from src.core.logger import resolve_log_level, setup_logging
from src.detector.schema import AlgorithmType


class TestResolveLogLevel:
    """Tests for resolve_log_level."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("DEBUG", logging.DEBUG),
            ("info", logging.INFO),
            ("Warning", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("critical", logging.CRITICAL),
        ],
    )
    def test_known_levels(self, name, expected):
        """Test level names are matched case-insensitively."""
        assert resolve_log_level(name) == expected

    def test_fallback(self):
        """Test unknown or missing names use the default."""
        assert resolve_log_level(None) == logging.INFO
        assert resolve_log_level("") == logging.INFO
        assert resolve_log_level("VERBOSE", default=logging.DEBUG) == logging.DEBUG


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_configures_structlog(self):
        """Test structlog is configured with the stdlib logger factory."""
        setup_logging(level=logging.WARNING, colors=False)

        config = structlog.get_config()
        assert config["wrapper_class"] is structlog.stdlib.BoundLogger
        assert isinstance(config["processors"][-1], structlog.dev.ConsoleRenderer)

    def test_no_shared_module_logger(self):
        """Test the logger module only configures; modules bind their own loggers."""
        from src.core import logger as logger_module

        assert not hasattr(logger_module, "log")


class TestErrors:
    """Tests for the error taxonomy."""

    def test_hierarchy(self):
        """Test every error is a DetectorError and keeps its builtin base."""
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(DataIntegrityError, ValueError)
        assert issubclass(TrainingFailure, RuntimeError)
        for error in (ConfigurationError, DataIntegrityError, TrainingFailure):
            assert issubclass(error, DetectorError)

    def test_training_failure(self):
        """Test TrainingFailure carries its context."""
        failure = TrainingFailure(AlgorithmType.STL_ZSCORE, "cpu", "too short")

        assert failure.algorithm_type is AlgorithmType.STL_ZSCORE
        assert failure.series_name == "cpu"
        assert failure.reason == "too short"
        assert str(failure) == "Training failed for stl_zscore on cpu: too short"

    def test_training_failure_without_series(self):
        """Test snapshot-level failures name no series."""
        failure = TrainingFailure(AlgorithmType.REMOTE_CALL_CHECKER, None, "cancelled")

        assert "on snapshots" in str(failure)
