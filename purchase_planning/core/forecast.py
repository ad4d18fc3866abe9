# purchase_planning/core/forecast.py
from typing import List, Optional, Sequence

from .normalization import normalize_weights
from .records import ForecastMethod, ForecastWeights
from ..utils.math_utils import exponential_smoothing, least_squares_line, mean

MOVING_AVERAGE_MONTHS = 6
SMOOTHING_ALPHA = 0.5

def forecast_avg6m(series: Sequence[float], horizon: int) -> List[float]:
    """Forecast with the mean of the last six months.

    Args:
        series: Monthly totals in chronological order
        horizon: Number of future months

    Returns:
        ``horizon`` copies of the mean (0.0 for an empty series)
    """
    window = list(series)[-MOVING_AVERAGE_MONTHS:]
    return [mean(window)] * horizon

def forecast_trend(series: Sequence[float], horizon: int) -> List[float]:
    """Forecast by extending the least-squares line through the series.

    The series is indexed t = 1..n and step k of the horizon is placed at
    t = n + k. Fewer than two points fall back to the moving average.
    Values are not clamped and may be negative.
    """
    n = len(series)
    if n < 2:
        return forecast_avg6m(series, horizon)

    intercept, slope = least_squares_line(series)
    return [intercept + slope * (n + k) for k in range(1, horizon + 1)]

def forecast_exp(
    series: Sequence[float],
    horizon: int,
    alpha: float = SMOOTHING_ALPHA
) -> List[float]:
    """Forecast with the last exponentially smoothed value.

    The first month seeds the smoothing; the final smoothed value is
    repeated across the horizon.
    """
    if not series:
        return [0.0] * horizon

    smoothed = exponential_smoothing(list(series), alpha)
    return [smoothed[-1]] * horizon

def forecast_weighted(
    series: Sequence[float],
    horizon: int,
    w_avg: float = 0.2,
    w_trend: float = 0.3,
    w_exp: float = 0.5
) -> List[float]:
    """Blend the moving average, trend and smoothing forecasts.

    Weights are normalized first, so only their proportions matter.
    """
    p1, p2, p3 = normalize_weights([w_avg, w_trend, w_exp])
    a = forecast_avg6m(series, horizon)
    b = forecast_trend(series, horizon)
    c = forecast_exp(series, horizon)
    return [p1 * a[i] + p2 * b[i] + p3 * c[i] for i in range(horizon)]

def forecast(
    method: ForecastMethod,
    series: Sequence[float],
    horizon: int,
    weights: Optional[ForecastWeights] = None
) -> List[float]:
    """Run the forecaster selected by ``method``.

    Args:
        method: Forecast method or its name (``'avg6'``, ``'trend'``...)
        series: Monthly totals in chronological order
        horizon: Number of future months
        weights: Blend weights, only used by the weighted method

    Returns:
        List with one value per future month
    """
    if isinstance(method, str):
        try:
            method = ForecastMethod(method.strip().lower())
        except ValueError:
            return [0.0] * horizon

    if method == ForecastMethod.AVG6:
        return forecast_avg6m(series, horizon)
    if method == ForecastMethod.TREND:
        return forecast_trend(series, horizon)
    if method == ForecastMethod.EXP:
        return forecast_exp(series, horizon)
    if method == ForecastMethod.WEIGHTED:
        weights = weights or ForecastWeights()
        return forecast_weighted(series, horizon, *weights.as_tuple())
    return [0.0] * horizon

def forecast_next(
    method: ForecastMethod,
    series: Sequence[float],
    weights: Optional[ForecastWeights] = None
) -> float:
    """Forecast the month right after the series, clamped at zero."""
    values = forecast(method, series, 1, weights)
    return max(0.0, values[0] if values else 0.0)
