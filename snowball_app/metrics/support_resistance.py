"""Support and resistance levels from recent highs and lows"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from ..data.models import PriceBar


@dataclass(frozen=True)
class SupportResistance:
    """Support (lowest low) and resistance (highest high) of a window"""
    support: float
    resistance: float


def calculate_support_resistance(bars: Sequence[PriceBar], lookback: int = 20) -> Optional[SupportResistance]:
    """
    Find support and resistance over the last 'lookback' bars

    Uses every bar when fewer than 'lookback' are available.

    Args:
        bars: Price bars in chronological order
        lookback: Window size (default 20)

    Returns:
        SupportResistance or None for an empty series
    """
    if not bars:
        return None

    window = bars[-lookback:]
    return SupportResistance(
        support=min(bar.low for bar in window),
        resistance=max(bar.high for bar in window),
    )


def calculate_prior_support_resistance(bars: Sequence[PriceBar], lookback: int = 20) -> Optional[SupportResistance]:
    """
    Support and resistance of the window ending just before the latest bar

    Returns:
        SupportResistance or None when there is no earlier bar
    """
    return calculate_support_resistance(bars[:-1], lookback)
