"""MACD (Moving Average Convergence Divergence) calculation"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from .moving_average import calculate_ema, calculate_ema_series


@dataclass(frozen=True)
class MACDResult:
    """MACD line, signal line and histogram; None when unavailable"""
    macd: Optional[float]
    signal: Optional[float]
    histogram: Optional[float]


def calculate_macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal_period: int = 9,
    signal_mode: str = "approximate",
    signal_factor: float = 0.9,
    legacy_zero_sentinel: bool = False,
) -> MACDResult:
    """
    Calculate MACD = EMA(fast) - EMA(slow) for the latest close

    Signal modes:
        approximate: signal = signal_factor * MACD (dashboard-compatible)
        ema: signal = EMA(signal_period) of the MACD series

    With legacy_zero_sentinel an unfilled EMA counts as 0, so a series
    shorter than 'slow' reports MACD = EMA(fast).

    Args:
        closes: Closing prices in chronological order
        fast: Fast EMA period
        slow: Slow EMA period
        signal_period: Signal EMA period (ema mode only)
        signal_mode: "approximate" or "ema"
        signal_factor: Signal multiplier (approximate mode only)
        legacy_zero_sentinel: Treat unavailable values as 0

    Returns:
        MACDResult
    """
    if signal_mode not in ("approximate", "ema"):
        raise ValueError(f"Unknown MACD signal mode: {signal_mode}")

    ema_fast = calculate_ema(closes, fast)
    ema_slow = calculate_ema(closes, slow)

    if legacy_zero_sentinel:
        macd = (ema_fast or 0.0) - (ema_slow or 0.0)
    elif ema_fast is None or ema_slow is None:
        return MACDResult(macd=None, signal=None, histogram=None)
    else:
        macd = ema_fast - ema_slow

    if signal_mode == "approximate":
        signal = macd * signal_factor
    else:
        signal = _signal_line(closes, fast, slow, signal_period)
        if signal is None:
            if not legacy_zero_sentinel:
                return MACDResult(macd=macd, signal=None, histogram=None)
            signal = 0.0

    return MACDResult(macd=macd, signal=signal, histogram=macd - signal)


def _signal_line(closes: Sequence[float], fast: int, slow: int, signal_period: int) -> Optional[float]:
    """EMA of the MACD series, None until slow + signal_period - 1 closes exist"""
    fast_series = calculate_ema_series(closes, fast)
    slow_series = calculate_ema_series(closes, slow)
    if not slow_series:
        return None

    # fast_series starts at index fast - 1, slow_series at slow - 1
    offset = slow - fast
    macd_series = [f - s for f, s in zip(fast_series[offset:], slow_series)]
    return calculate_ema(macd_series, signal_period)
