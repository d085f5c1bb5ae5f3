"""
Data series: the indicator / layer / category combination an algorithm is
trained against.

A series is either a single indicator or the combination of two indicators
(sum, difference, product, fraction) read in the same data category.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from itertools import combinations

from src.core.errors import ConfigurationError

from .models import DataCategory, Indicator, LayerType, Observation


class SeriesOperation(Enum):
    """How the indicators of a series are combined"""

    NONE = "none"
    SUM = "+"
    DIFFERENCE = "-"
    PRODUCT = "*"
    FRACTION = "/"


@dataclass(frozen=True)
class DataSeries:
    """Numeric projection of one or two indicators"""

    indicators: tuple[Indicator, ...]
    category: DataCategory = DataCategory.PLAIN
    operation: SeriesOperation = SeriesOperation.NONE

    def __post_init__(self):
        if self.operation is SeriesOperation.NONE and len(self.indicators) != 1:
            raise ConfigurationError("A simple data series needs exactly one indicator")
        if self.operation is not SeriesOperation.NONE and len(self.indicators) != 2:
            raise ConfigurationError("A combined data series needs exactly two indicators")

    @classmethod
    def of(cls, indicator: Indicator, category: DataCategory = DataCategory.PLAIN) -> "DataSeries":
        return cls((indicator,), category)

    @property
    def name(self) -> str:
        if self.operation is SeriesOperation.NONE:
            return self.indicators[0].name
        left, right = self.indicators
        return f"({left.name}{self.operation.value}{right.name})"

    @property
    def layer(self) -> LayerType:
        layers = {indicator.layer for indicator in self.indicators}
        return layers.pop() if len(layers) == 1 else LayerType.NO_LAYER

    @property
    def is_simple(self) -> bool:
        return self.operation is SeriesOperation.NONE

    def value_at(self, observation: Observation) -> float:
        """Project an observation on this series (NaN when a value is missing)"""
        values = [observation.get_numeric(ind, self.category) for ind in self.indicators]
        if self.operation is SeriesOperation.NONE:
            return values[0]

        left, right = values
        if self.operation is SeriesOperation.SUM:
            return left + right
        if self.operation is SeriesOperation.DIFFERENCE:
            return left - right
        if self.operation is SeriesOperation.PRODUCT:
            return left * right
        if right == 0 or math.isnan(right):
            return math.nan
        return left / right

    def __str__(self) -> str:
        return f"{self.name}#{self.layer.value}#{self.category.value}"


def build_data_series(
    indicators: Iterable[Indicator],
    categories: Iterable[DataCategory] = (DataCategory.PLAIN,),
    layers: Iterable[LayerType] | None = None,
    combine: bool = False,
) -> list[DataSeries]:
    """Enumerate the data series available for a set of indicators

    Args:
        indicators: Numeric indicators of the experiments
        categories: Data categories to read
        layers: Restrict to indicators of these layers (None = all layers)
        combine: Also build sum/difference series of every indicator pair
            belonging to the same layer

    Returns:
        Data series in a stable order (indicator order, then category)
    """
    allowed = set(layers) if layers is not None else None
    selected = [ind for ind in indicators if allowed is None or ind.layer in allowed]
    categories = list(categories)

    series = [DataSeries.of(ind, cat) for ind in selected for cat in categories]
    if combine:
        for left, right in combinations(selected, 2):
            if left.layer != right.layer:
                continue
            for cat in categories:
                series.append(DataSeries((left, right), cat, SeriesOperation.SUM))
                series.append(DataSeries((left, right), cat, SeriesOperation.DIFFERENCE))
    return series
