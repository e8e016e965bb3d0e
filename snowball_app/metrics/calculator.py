"""Feature calculator coordinating all indicator and signal calculations"""

from collections.abc import Sequence
from typing import Optional

import structlog

from ..config.defaults import DefaultConfig, get_default_config
from ..data.models import PriceBar
from ..errors import EmptyInputError, MetricsCalculationError
from ..models.features import TechnicalFeatures
from ..utils.numeric import is_finite, round_half_up, round_optional
from .macd import calculate_macd
from .moving_average import calculate_sma
from .rsi import calculate_rsi
from .signals import classify_macd_cross, classify_price_vs_sr, classify_rsi, classify_trend
from .support_resistance import calculate_prior_support_resistance, calculate_support_resistance

logger = structlog.get_logger(__name__)


class FeatureCalculator:
    """
    Computes a TechnicalFeatures snapshot for the most recent bar of a series

    The calculator holds only configuration, so one instance can be shared
    between threads.
    """

    def __init__(self, config: Optional[DefaultConfig] = None):
        self.config = config or get_default_config()

    def compute_features(self, series: Sequence[PriceBar]) -> TechnicalFeatures:
        """
        Calculate all indicators and signals for the latest bar

        Indicators whose lookback window is not filled degrade instead of
        failing: moving averages and MACD become None (or 0 with the
        legacy_zero_sentinel flag) and RSI becomes 50.

        Args:
            series: Price bars in chronological order

        Returns:
            TechnicalFeatures for series[-1]

        Raises:
            EmptyInputError: If the series is empty
            MetricsCalculationError: If an indicator is not finite
        """
        if not series:
            raise EmptyInputError()

        indicators = self.config.indicators
        signals = self.config.signals

        try:
            closes = [bar.close for bar in series]
            current_price = closes[-1]
            previous_close = closes[-2] if len(closes) > 1 else current_price

            ma_short = calculate_sma(closes, indicators.ma_short)
            ma_mid = calculate_sma(closes, indicators.ma_mid)
            ma_long = calculate_sma(closes, indicators.ma_long)
            if indicators.legacy_zero_sentinel:
                ma_short, ma_mid, ma_long = (ma_short or 0.0), (ma_mid or 0.0), (ma_long or 0.0)

            rsi = calculate_rsi(closes, indicators.rsi_period)

            macd = calculate_macd(
                closes,
                fast=indicators.macd_fast,
                slow=indicators.macd_slow,
                signal_period=indicators.macd_signal_period,
                signal_mode=indicators.macd_signal_mode,
                signal_factor=indicators.macd_signal_factor,
                legacy_zero_sentinel=indicators.legacy_zero_sentinel,
            )

            levels = calculate_support_resistance(series, signals.sr_lookback)
            breakout_levels = levels
            if signals.breakout_reference == "prior":
                prior_levels = calculate_prior_support_resistance(series, signals.sr_lookback)
                if prior_levels is not None:
                    levels = breakout_levels = prior_levels
                else:
                    breakout_levels = None
        except (TypeError, AttributeError, ValueError) as e:
            raise MetricsCalculationError(
                f"Indicator calculation failed: {e}",
                metric_name="features",
                calculation_input={"bar_count": len(series)}
            ) from e

        self._validate_values({
            "current_price": current_price,
            "ma_short": ma_short,
            "ma_mid": ma_mid,
            "ma_long": ma_long,
            "rsi": rsi,
            "macd": macd.macd,
            "macd_signal": macd.signal,
            "support": levels.support,
            "resistance": levels.resistance,
        })

        features = TechnicalFeatures(
            trend_pattern=classify_trend(ma_short, ma_mid, ma_long),
            rsi=round_half_up(rsi),
            rsi_level=classify_rsi(rsi, signals.rsi_overbought, signals.rsi_oversold),
            macd=round_optional(macd.macd),
            macd_signal=round_optional(macd.signal),
            macd_histogram=round_optional(macd.histogram),
            macd_cross=classify_macd_cross(macd.macd, macd.signal, macd.histogram),
            ma5=round_optional(ma_short),
            ma20=round_optional(ma_mid),
            ma60=round_optional(ma_long),
            support=round_half_up(levels.support),
            resistance=round_half_up(levels.resistance),
            price_vs_sr=classify_price_vs_sr(
                current_price,
                previous_close,
                breakout_levels.support if breakout_levels else None,
                breakout_levels.resistance if breakout_levels else None,
                threshold=signals.breakout_threshold,
            ),
            current_price=current_price,
            as_of=series[-1].date,
        )

        logger.debug(
            "Computed technical features",
            bar_count=len(series),
            trend_pattern=features.trend_pattern.value,
            rsi=features.rsi,
            macd_cross=features.macd_cross.value,
            price_vs_sr=features.price_vs_sr.value
        )
        return features

    def get_warmup_period(self) -> int:
        """Minimum number of bars needed for every indicator to be available"""
        indicators = self.config.indicators
        macd_bars = indicators.macd_slow
        if indicators.macd_signal_mode == "ema":
            macd_bars += indicators.macd_signal_period - 1
        return max(indicators.ma_long, indicators.rsi_period + 1, macd_bars,
                   self.config.signals.sr_lookback)

    def is_warmed_up(self, series: Sequence[PriceBar]) -> bool:
        """Check whether the series is long enough for full-history features"""
        return len(series) >= self.get_warmup_period()

    def _validate_values(self, values: dict[str, Optional[float]]) -> None:
        """Reject non-finite indicator values."""
        for name, value in values.items():
            if value is None:
                continue
            if not is_finite(value):
                raise MetricsCalculationError(f"Invalid {name} value: {value}", metric_name=name)


def compute_features(series: Sequence[PriceBar], config: Optional[DefaultConfig] = None) -> TechnicalFeatures:
    """Compute TechnicalFeatures for the latest bar with the given or default config"""
    return FeatureCalculator(config).compute_features(series)
