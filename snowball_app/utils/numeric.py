"""Numeric helpers shared by the engines."""

import math
from typing import Optional

import numpy as np


def round_half_up(value: float, digits: int = 2) -> float:
    """
    Round to a number of decimals with halves rounded up.

    Matches the dashboard's Math.round(x * 100) / 100 presentation
    instead of Python's banker's rounding.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_optional(value: Optional[float], digits: int = 2) -> Optional[float]:
    """Round a value that may be unavailable."""
    return None if value is None else round_half_up(value, digits)


def is_finite(value: Optional[float]) -> bool:
    """True for a real finite number."""
    return value is not None and not math.isnan(value) and not math.isinf(value)


def percentile(sorted_values, p: float) -> np.ndarray:
    """
    Nearest-rank percentile of values already sorted along the first axis.

    Uses index floor(n * p), clamped to the last element so p=1.0 is valid.
    A matrix of sorted columns gives one percentile per column.

    Raises:
        ValueError: If there are no values or p is outside [0, 1]
    """
    values = np.asarray(sorted_values, dtype=float)
    if values.size == 0:
        raise ValueError("percentile of empty sequence")
    if p < 0 or p > 1:
        raise ValueError(f"percentile must be within [0, 1], got {p}")
    count = values.shape[0]
    return values[min(int(math.floor(count * p)), count - 1)]
