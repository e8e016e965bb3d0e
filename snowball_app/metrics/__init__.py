"""Technical indicator and signal calculations"""

from .calculator import FeatureCalculator, compute_features
from .macd import MACDResult, calculate_macd
from .moving_average import calculate_ema, calculate_ema_series, calculate_sma
from .rsi import calculate_rsi
from .signals import classify_macd_cross, classify_price_vs_sr, classify_rsi, classify_trend
from .support_resistance import SupportResistance, calculate_support_resistance

__all__ = [
    "FeatureCalculator",
    "MACDResult",
    "SupportResistance",
    "compute_features",
    "calculate_sma",
    "calculate_ema",
    "calculate_ema_series",
    "calculate_rsi",
    "calculate_macd",
    "calculate_support_resistance",
    "classify_trend",
    "classify_rsi",
    "classify_macd_cross",
    "classify_price_vs_sr",
]
