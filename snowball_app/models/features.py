"""Data models for technical feature snapshots"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional


class TrendPattern(str, Enum):
    """Moving average alignment"""
    BULLISH_ALIGNED = "bullish-aligned"
    BEARISH_ALIGNED = "bearish-aligned"
    CONSOLIDATING = "consolidating"


class RSILevel(str, Enum):
    """RSI zone"""
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


class MACDCross(str, Enum):
    """MACD line position relative to its signal line"""
    GOLDEN_CROSS = "golden-cross"
    DEATH_CROSS = "death-cross"
    CHOPPY = "choppy"


class PriceVsSR(str, Enum):
    """Latest close relative to support and resistance"""
    BROKE_RESISTANCE = "broke-resistance"
    BROKE_SUPPORT = "broke-support"
    BETWEEN = "between"


@dataclass(frozen=True)
class TechnicalFeatures:
    """Technical indicator snapshot for the most recent bar

    Numeric indicators are rounded to 2 decimals; None marks an indicator
    whose lookback window is not yet filled. current_price is the raw
    latest close.
    """
    trend_pattern: TrendPattern
    rsi: float
    rsi_level: RSILevel
    macd: Optional[float]
    macd_signal: Optional[float]
    macd_histogram: Optional[float]
    macd_cross: MACDCross
    ma5: Optional[float]
    ma20: Optional[float]
    ma60: Optional[float]
    support: float
    resistance: float
    price_vs_sr: PriceVsSR
    current_price: float
    as_of: Optional[date] = None

    def has_full_history(self) -> bool:
        """Check whether every moving average and MACD value is available"""
        return all(
            value is not None
            for value in (self.ma5, self.ma20, self.ma60,
                          self.macd, self.macd_signal, self.macd_histogram)
        )

    def to_dict(self) -> dict[str, Any]:
        """Flat dictionary with enum members replaced by their values"""
        return {
            "as_of": self.as_of.isoformat() if self.as_of else None,
            "trend_pattern": self.trend_pattern.value,
            "rsi": self.rsi,
            "rsi_level": self.rsi_level.value,
            "macd": self.macd,
            "macd_signal": self.macd_signal,
            "macd_histogram": self.macd_histogram,
            "macd_cross": self.macd_cross.value,
            "ma5": self.ma5,
            "ma20": self.ma20,
            "ma60": self.ma60,
            "support": self.support,
            "resistance": self.resistance,
            "price_vs_sr": self.price_vs_sr.value,
            "current_price": self.current_price,
        }


def technical_features_to_json(features: TechnicalFeatures) -> dict[str, Any]:
    """
    Project features into the document consumed by the narrative generator

    Categorical signals go under "technical", raw indicators under
    "indicators".
    """
    return {
        "technical": {
            "trend_pattern": features.trend_pattern.value,
            "rsi_level": features.rsi_level.value,
            "macd_signal": features.macd_cross.value,
            "price_vs_support_resistance": features.price_vs_sr.value,
        },
        "indicators": {
            "ma5": features.ma5,
            "ma20": features.ma20,
            "ma60": features.ma60,
            "rsi": features.rsi,
            "macd": features.macd,
            "macd_signal_line": features.macd_signal,
            "macd_histogram": features.macd_histogram,
            "support": features.support,
            "resistance": features.resistance,
        },
        "current_price": features.current_price,
    }
