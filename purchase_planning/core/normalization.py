# purchase_planning/core/normalization.py
import math
from typing import List, Sequence

from .records import ForecastWeights

DEFAULT_FACTOR = 1.70

# Factors above this are taken as "times 100" entries (170 means 1.70).
FACTOR_SCALE_THRESHOLD = 10.0

def normalize_factor(raw, default: float = DEFAULT_FACTOR) -> float:
    """Normalize a supplier markup factor (sale price / cost).

    A legacy data-entry convenience lets users type 170 for 1.70, so any
    value above ``FACTOR_SCALE_THRESHOLD`` is divided by 100. Missing,
    non-numeric, non-finite, zero or negative values fall back to
    ``default``.

    Args:
        raw: Raw factor as stored or typed
        default: Fallback factor, already normalized

    Returns:
        Positive factor
    """
    value = default if raw is None else raw
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default

    if not math.isfinite(value) or value <= 0:
        return default

    return value / 100.0 if value > FACTOR_SCALE_THRESHOLD else value

def normalize_weights(weights: Sequence[float]) -> List[float]:
    """Rescale non-negative weights so they add up to 1.

    Negative or non-numeric weights count as 0. When every weight is 0 the
    denominator falls back to 1, so the result is all zeros.
    """
    safe = []
    for w in weights:
        try:
            w = float(w)
        except (TypeError, ValueError):
            w = 0.0
        safe.append(max(0.0, w) if math.isfinite(w) else 0.0)

    total = sum(safe) or 1.0
    return [w / total for w in safe]

def normalize_forecast_weights(weights: ForecastWeights) -> ForecastWeights:
    """Return the normalized copy of a ForecastWeights triple."""
    p1, p2, p3 = normalize_weights(weights.as_tuple())
    return ForecastWeights(avg=p1, trend=p2, exp=p3)
