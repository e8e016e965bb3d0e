"""SMA (Simple Moving Average) and EMA (Exponential Moving Average) calculations"""

from collections.abc import Sequence
from typing import Optional


def calculate_sma(values: Sequence[float], period: int) -> Optional[float]:
    """
    Calculate the Simple Moving Average of the last 'period' values

    Args:
        values: Values in chronological order
        period: Averaging window

    Returns:
        SMA value or None if insufficient data
    """
    if period <= 0 or len(values) < period:
        return None

    recent = values[-period:]
    return sum(recent) / period


def calculate_ema_series(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate the EMA for every point after the seed window

    The first element is the SMA of the first 'period' values; each later
    element applies ema = (value - ema) * 2 / (period + 1) + ema.

    Args:
        values: Values in chronological order
        period: EMA period

    Returns:
        EMA values aligned to values[period - 1:], empty if insufficient data
    """
    if period <= 0 or len(values) < period:
        return []

    multiplier = 2 / (period + 1)
    ema = sum(values[:period]) / period
    series = [ema]

    for value in values[period:]:
        ema = (value - ema) * multiplier + ema
        series.append(ema)

    return series


def calculate_ema(values: Sequence[float], period: int) -> Optional[float]:
    """
    Calculate the latest Exponential Moving Average

    Args:
        values: Values in chronological order
        period: EMA period

    Returns:
        EMA value or None if insufficient data
    """
    series = calculate_ema_series(values, period)
    return series[-1] if series else None
