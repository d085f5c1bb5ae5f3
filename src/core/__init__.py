"""
Core utilities shared across the application.
"""

from .errors import ConfigurationError, DataIntegrityError, DetectorError, TrainingFailure
from .logger import resolve_log_level, setup_logging

__all__ = [
    "ConfigurationError",
    "DataIntegrityError",
    "DetectorError",
    "TrainingFailure",
    "resolve_log_level",
    "setup_logging",
]
