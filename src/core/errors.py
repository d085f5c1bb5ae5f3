"""
Error taxonomy shared by the experiment model and the training engine.
"""


class DetectorError(Exception):
    """Base class for all detector errors"""


class ConfigurationError(DetectorError, ValueError):
    """A configuration cannot be turned into a valid algorithm instance"""


class DataIntegrityError(DetectorError, ValueError):
    """Experiment data is malformed or inconsistent"""


class TrainingFailure(DetectorError, RuntimeError):
    """No usable configuration could be trained for an (algorithm, series) pair"""

    def __init__(self, algorithm_type, series_name: str | None, reason: str):
        self.algorithm_type = algorithm_type
        self.series_name = series_name
        self.reason = reason
        tag = getattr(algorithm_type, "value", algorithm_type)
        super().__init__(f"Training failed for {tag} on {series_name or 'snapshots'}: {reason}")
