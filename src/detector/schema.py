"""
Names shared by every component of the training engine.
"""

from enum import Enum

from src.experiments.models import DataType

# Reserved configuration slots written back after training
WEIGHT = "weight"  # reputation score
SCORE = "score"  # metric score

RESERVED_KEYS = frozenset({WEIGHT, SCORE})


class AlgorithmType(Enum):
    """Detection algorithm families"""

    REMOTE_CALL_CHECKER = "remote_call_checker"
    STATIC_THRESHOLD = "static_threshold"
    HISTORICAL_CHECKER = "historical_checker"
    STL_ZSCORE = "stl_zscore"


__all__ = ["AlgorithmType", "DataType", "RESERVED_KEYS", "SCORE", "WEIGHT"]
