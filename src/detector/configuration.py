"""
Algorithm configurations: named parameters instantiating one algorithm variant.
"""

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from src.core.errors import ConfigurationError

from .schema import RESERVED_KEYS, SCORE, WEIGHT, AlgorithmType

_MISSING = object()


class AlgorithmConfiguration:
    """String-encoded parameters of one algorithm variant

    Values are stored as strings, as they come from configuration files. The
    typed getters raise ConfigurationError when a parameter is missing or
    cannot be parsed, which is how a bad candidate is detected.
    """

    def __init__(self, algorithm_type: AlgorithmType, items: Mapping[str, Any] | None = None):
        self.algorithm_type = algorithm_type
        self._items: dict[str, str] = {}
        for key, value in (items or {}).items():
            self.add_item(key, value)

    def add_item(self, key: str, value: Any) -> None:
        self._items[key] = str(value)

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def has_item(self, key: str) -> bool:
        return key in self._items

    def items(self) -> dict[str, str]:
        return dict(self._items)

    def parameters(self) -> dict[str, str]:
        """Parameters without the reserved training result slots"""
        return {k: v for k, v in self._items.items() if k not in RESERVED_KEYS}

    def _get(self, key: str, default: Any, parse):
        raw = self._items.get(key)
        if raw is None:
            if default is _MISSING:
                raise ConfigurationError(
                    f"Missing parameter '{key}' for {self.algorithm_type.value}"
                )
            return default
        try:
            return parse(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for '{key}' in {self.algorithm_type.value}: {raw!r}"
            ) from e

    def get_str(self, key: str, default: Any = _MISSING) -> str:
        return self._get(key, default, str)

    def get_float(self, key: str, default: Any = _MISSING) -> float:
        return self._get(key, default, float)

    def get_int(self, key: str, default: Any = _MISSING) -> int:
        return self._get(key, default, int)

    @property
    def weight(self) -> float | None:
        return self.get_float(WEIGHT, None)

    @property
    def score(self) -> float | None:
        return self.get_float(SCORE, None)

    def copy(self) -> "AlgorithmConfiguration":
        """Independent deep copy"""
        return copy.deepcopy(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, AlgorithmConfiguration):
            return NotImplemented
        return self.algorithm_type == other.algorithm_type and self._items == other._items

    def __repr__(self) -> str:
        return f"AlgorithmConfiguration({self.algorithm_type.value}, {self._items})"


def parse_configurations(
    raw: Mapping[str, Iterable[Mapping[str, Any]]],
) -> dict[AlgorithmType, list[AlgorithmConfiguration]]:
    """Turn an already-parsed mapping (algorithm tag -> list of parameter dicts)
    into candidate configurations, preserving candidate order

    Raises:
        ConfigurationError: If an algorithm tag is unknown
    """
    configurations = {}
    for tag, candidates in raw.items():
        try:
            alg_type = tag if isinstance(tag, AlgorithmType) else AlgorithmType(tag)
        except ValueError as e:
            available = ", ".join(t.value for t in AlgorithmType)
            raise ConfigurationError(
                f"Unknown algorithm '{tag}'. Available algorithms: {available}"
            ) from e
        configurations[alg_type] = [AlgorithmConfiguration(alg_type, params) for params in candidates]
    return configurations
