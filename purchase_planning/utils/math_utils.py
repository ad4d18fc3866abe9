# purchase_planning/utils/math_utils.py
import math
import re
from typing import List, Sequence, Tuple

import numpy as np

_WHITESPACE_RE = re.compile(r'\s+')

def parse_money(value) -> float:
    """Parse a locale formatted money amount.

    Handles ``12,345.67``, ``12 345,67``, ``1234,5`` and plain numbers.
    A single comma with no dot is read as the decimal separator; in every
    other case commas are thousands separators. A leading ``$`` is ignored.

    Args:
        value: Raw amount (string, number or None)

    Returns:
        Finite float, 0.0 when the value cannot be parsed
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0

    s = _WHITESPACE_RE.sub('', str(value)).lstrip('$')
    has_dot = '.' in s
    comma_count = s.count(',')

    if comma_count == 1 and not has_dot:
        s = s.replace(',', '.')
    else:
        s = s.replace(',', '')

    try:
        number = float(s)
    except ValueError:
        return 0.0

    return number if math.isfinite(number) else 0.0

def round_money(value: float, places: int = 2) -> float:
    """Round an amount for storage."""
    return round(float(value), places)

def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)

def least_squares_line(values: Sequence[float]) -> Tuple[float, float]:
    """Fit y = a + b*t by ordinary least squares with t = 1..n.

    Args:
        values: Series of at least two observations

    Returns:
        Tuple with intercept and slope
    """
    n = len(values)
    t = np.arange(1, n + 1, dtype=float)
    y = np.asarray(values, dtype=float)

    sum_t = float(t.sum())
    sum_y = float(y.sum())
    sum_tt = float(np.dot(t, t))
    sum_ty = float(np.dot(t, y))

    denominator = n * sum_tt - sum_t * sum_t
    if denominator == 0:
        denominator = 1.0

    slope = (n * sum_ty - sum_t * sum_y) / denominator
    intercept = (sum_y - slope * sum_t) / n

    return (intercept, slope)

def exponential_smoothing(series: Sequence[float], alpha: float = 0.5) -> List[float]:
    """Exponentially smoothed series.

    The first month seeds the level; each later month moves it by
    ``level = alpha * value + (1 - alpha) * level``.

    Args:
        series: Monthly values in chronological order
        alpha: Weight of the newest value, clipped to [0, 1]

    Returns:
        One smoothed level per month (empty for an empty series)
    """
    alpha = min(max(float(alpha), 0.0), 1.0)
    levels: List[float] = []

    for value in series:
        level = value if not levels else alpha * value + (1 - alpha) * levels[-1]
        levels.append(level)

    return levels
