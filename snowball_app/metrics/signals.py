"""Categorical signal classification from indicator values"""

from typing import Optional

from ..models.features import MACDCross, PriceVsSR, RSILevel, TrendPattern


def classify_trend(ma_short: Optional[float], ma_mid: Optional[float],
                   ma_long: Optional[float]) -> TrendPattern:
    """
    Classify moving average alignment

    Bullish when short > mid > long, bearish when short < mid < long,
    consolidating otherwise or when any average is unavailable.
    """
    if ma_short is None or ma_mid is None or ma_long is None:
        return TrendPattern.CONSOLIDATING
    if ma_short > ma_mid > ma_long:
        return TrendPattern.BULLISH_ALIGNED
    if ma_short < ma_mid < ma_long:
        return TrendPattern.BEARISH_ALIGNED
    return TrendPattern.CONSOLIDATING


def classify_rsi(rsi: float, overbought: float = 70.0, oversold: float = 30.0) -> RSILevel:
    """Classify RSI; both thresholds are inclusive"""
    if rsi >= overbought:
        return RSILevel.OVERBOUGHT
    if rsi <= oversold:
        return RSILevel.OVERSOLD
    return RSILevel.NEUTRAL


def classify_macd_cross(macd: Optional[float], signal: Optional[float],
                        histogram: Optional[float]) -> MACDCross:
    """Classify MACD relative to its signal line"""
    if macd is None or signal is None or histogram is None:
        return MACDCross.CHOPPY
    if macd > signal and histogram > 0:
        return MACDCross.GOLDEN_CROSS
    if macd < signal and histogram < 0:
        return MACDCross.DEATH_CROSS
    return MACDCross.CHOPPY


def classify_price_vs_sr(
    price: float,
    previous_close: float,
    support: Optional[float],
    resistance: Optional[float],
    threshold: float = 0.02,
) -> PriceVsSR:
    """
    Classify a close against support and resistance

    A break is edge-triggered: the close must clear the level by
    'threshold' and the previous close must still have been on the other
    side of the level.

    Args:
        price: Latest close
        previous_close: Close before the latest
        support: Support level, None when unavailable
        resistance: Resistance level, None when unavailable
        threshold: Fractional breakout margin (default 2%)
    """
    if resistance is not None and price > resistance * (1 + threshold) and previous_close < resistance:
        return PriceVsSR.BROKE_RESISTANCE
    if support is not None and price < support * (1 - threshold) and previous_close > support:
        return PriceVsSR.BROKE_SUPPORT
    return PriceVsSR.BETWEEN
