"""
STL residual projection of a data series.

Decomposes the series of one experiment into Trend + Seasonal + Residual
using STL and standardises the residual, so that detection methods can score
each snapshot by its residual z-score.
"""

import numpy as np
import pandas as pd
import structlog
from statsmodels.tsa.seasonal import STL

from src.core.errors import DataIntegrityError

logger = structlog.get_logger(__name__)


def residual_zscores(
    series: pd.Series,
    seasonal_period: int,
    trend_period: int | None = None,
    robust: bool = True,
) -> pd.Series:
    """Compute the standardised STL residual of a series

    Args:
        series: Values indexed by timestamp, sorted ascending
        seasonal_period: Number of samples per seasonal cycle
        trend_period: Trend smoother length (None lets STL choose)
        robust: Use the robust STL fit (less sensitive to the injected faults)

    Returns:
        Series of residual z-scores aligned with the input index

    Raises:
        DataIntegrityError: If the series is too short or has no valid values
    """
    if seasonal_period < 2:
        raise DataIntegrityError(f"Seasonal period must be >= 2, got {seasonal_period}")

    ts = series.astype(float)
    if ts.isna().all():
        raise DataIntegrityError("Series has no valid values")

    # STL cannot handle gaps
    ts = ts.interpolate(limit_direction="both")

    if len(ts) < 2 * seasonal_period:
        raise DataIntegrityError(
            f"Insufficient points for STL: {len(ts)} < {2 * seasonal_period} "
            f"(need at least 2x seasonal_period)"
        )

    # STL requires odd smoother lengths
    seasonal = seasonal_period if seasonal_period % 2 == 1 else seasonal_period + 1
    seasonal = max(seasonal, 3)
    trend = trend_period
    if trend is not None and trend % 2 == 0:
        trend += 1

    try:
        stl = STL(
            ts.to_numpy(),
            period=seasonal_period,
            seasonal=seasonal,
            trend=trend,
            robust=robust,
        ).fit()
    except ValueError as e:
        raise DataIntegrityError(f"STL decomposition failed: {e}") from e

    resid = np.asarray(stl.resid, dtype=float)
    std = float(resid.std())
    if std == 0.0 or np.isnan(std):
        zscores = np.zeros_like(resid)
    else:
        zscores = (resid - float(resid.mean())) / std

    logger.debug(
        "STL residual projection computed",
        n_points=len(ts),
        seasonal_period=seasonal_period,
        residual_std=round(std, 4),
    )

    return pd.Series(zscores, index=series.index)
