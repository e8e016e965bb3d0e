"""Tests for the feature calculator"""

from dataclasses import replace
from datetime import date, timedelta

import numpy as np
import pytest
from snowball_app.config.defaults import get_default_config
from snowball_app.data.models import PriceBar
from snowball_app.errors import EmptyInputError, MetricsCalculationError
from snowball_app.metrics.calculator import FeatureCalculator, compute_features
from snowball_app.models.features import (
    MACDCross,
    PriceVsSR,
    RSILevel,
    TrendPattern,
    technical_features_to_json,
)


def breakout_series(current_close, previous_close=99.0):
    """20 range-bound bars followed by one closing at current_close"""
    start = date(2024, 3, 1)
    bars = [
        PriceBar(date=start + timedelta(days=i), open=99.0, high=100.0, low=98.0,
                 close=99.0, volume=1000.0)
        for i in range(19)
    ]
    bars.append(PriceBar(date=start + timedelta(days=19), open=99.0, high=100.0, low=98.0,
                         close=previous_close, volume=1000.0))
    bars.append(PriceBar(date=start + timedelta(days=20), open=previous_close,
                         high=max(current_close, previous_close), low=min(current_close, previous_close),
                         close=current_close, volume=1000.0))
    return bars


class TestFeatureCalculator:
    """Test full feature snapshots"""

    def test_empty_series(self):
        with pytest.raises(EmptyInputError):
            compute_features([])

    def test_flat_series(self, flat_daily_bars):
        """Test a constant series of 70 bars"""
        features = compute_features(flat_daily_bars)

        assert features.ma5 == 100.0
        assert features.ma20 == 100.0
        assert features.ma60 == 100.0
        assert features.rsi == 100.0
        assert features.rsi_level == RSILevel.OVERBOUGHT
        assert features.trend_pattern == TrendPattern.CONSOLIDATING
        assert features.support == 100.0
        assert features.resistance == 100.0
        assert features.price_vs_sr == PriceVsSR.BETWEEN
        assert features.macd == 0.0
        assert features.macd_cross == MACDCross.CHOPPY
        assert features.current_price == 100.0
        assert features.as_of == flat_daily_bars[-1].date
        assert features.has_full_history()

    def test_single_bar(self, bar_factory):
        """Test one bar degrades every windowed indicator"""
        features = compute_features(bar_factory([42.5]))

        assert features.ma5 is None
        assert features.ma20 is None
        assert features.ma60 is None
        assert features.macd is None
        assert features.macd_signal is None
        assert features.rsi == 50.0
        assert features.rsi_level == RSILevel.NEUTRAL
        assert features.trend_pattern == TrendPattern.CONSOLIDATING
        assert features.macd_cross == MACDCross.CHOPPY
        assert features.price_vs_sr == PriceVsSR.BETWEEN
        assert features.support == 42.5
        assert features.resistance == 42.5
        assert not features.has_full_history()

    def test_legacy_zero_sentinel(self, bar_factory):
        """Test legacy mode reports unavailable averages as zero"""
        config = get_default_config()
        config = replace(config, indicators=replace(config.indicators, legacy_zero_sentinel=True))
        features = FeatureCalculator(config).compute_features(bar_factory([10.0] * 10))

        assert features.ma5 == 10.0
        assert features.ma20 == 0.0
        assert features.ma60 == 0.0

    def test_bullish_trend(self, bar_factory):
        """Test a steadily rising series is bullish with a golden cross"""
        features = compute_features(bar_factory([100.0 + i for i in range(70)]))

        assert features.trend_pattern == TrendPattern.BULLISH_ALIGNED
        assert features.macd_cross == MACDCross.GOLDEN_CROSS
        assert features.rsi_level == RSILevel.OVERBOUGHT

    def test_bearish_trend(self, bar_factory):
        features = compute_features(bar_factory([200.0 - i for i in range(70)]))

        assert features.trend_pattern == TrendPattern.BEARISH_ALIGNED
        assert features.macd_cross == MACDCross.DEATH_CROSS
        assert features.rsi_level == RSILevel.OVERSOLD

    def test_values_rounded(self, bar_factory):
        """Test indicators are rounded to 2 decimals while current_price is raw"""
        closes = [100.0 + i / 3 for i in range(70)]
        features = compute_features(bar_factory(closes))

        assert features.ma5 == round(features.ma5, 2)
        assert features.rsi == round(features.rsi, 2)
        assert features.current_price == closes[-1]


def prior_reference_config():
    config = get_default_config()
    return replace(config, signals=replace(config.signals, breakout_reference="prior"))


def rising_bars(count=30, step=0.03):
    """Bars gaining 'step' per day with a narrow intrabar range"""
    start = date(2024, 3, 1)
    bars = []
    close = 100.0
    for i in range(count):
        bars.append(PriceBar(date=start + timedelta(days=i), open=close, high=close * 1.001,
                             low=close * 0.999, close=close, volume=1000.0))
        close *= 1 + step
    return bars


class TestBreakoutDetection:
    """Test support/resistance breakouts through the calculator"""

    def test_default_reference_reports_current_window(self):
        """Test levels that include the latest bar cannot be cleared by its close"""
        features = compute_features(breakout_series(103.0))

        assert features.price_vs_sr == PriceVsSR.BETWEEN
        assert features.resistance == 103.0
        assert features.support == 98.0

    def test_rising_series_default_between(self):
        features = compute_features(rising_bars())

        assert features.price_vs_sr == PriceVsSR.BETWEEN
        assert features.current_price <= features.resistance

    def test_rising_series_prior_reference(self):
        """Test the prior reference reports the level its breakout cleared"""
        features = FeatureCalculator(prior_reference_config()).compute_features(rising_bars())

        assert features.price_vs_sr == PriceVsSR.BROKE_RESISTANCE
        assert features.current_price > features.resistance * 1.02

    def test_resistance_breakout(self):
        features = FeatureCalculator(prior_reference_config()).compute_features(breakout_series(103.0))

        assert features.price_vs_sr == PriceVsSR.BROKE_RESISTANCE
        assert features.resistance == 100.0
        assert features.support == 98.0

    def test_previous_close_at_resistance(self):
        calculator = FeatureCalculator(prior_reference_config())
        features = calculator.compute_features(breakout_series(103.0, previous_close=100.0))
        assert features.price_vs_sr == PriceVsSR.BETWEEN

    def test_move_inside_threshold(self):
        calculator = FeatureCalculator(prior_reference_config())
        assert calculator.compute_features(breakout_series(101.5)).price_vs_sr == PriceVsSR.BETWEEN

    def test_support_breakdown(self):
        calculator = FeatureCalculator(prior_reference_config())
        assert calculator.compute_features(breakout_series(95.0)).price_vs_sr == PriceVsSR.BROKE_SUPPORT

    def test_prior_reference_single_bar(self, bar_factory):
        """Test one bar has no prior levels and falls back to its own range"""
        features = FeatureCalculator(prior_reference_config()).compute_features(bar_factory([42.5]))

        assert features.price_vs_sr == PriceVsSR.BETWEEN
        assert features.resistance == 42.5


class TestMovingAverageBounds:
    """Test averages stay inside the range of the closes they cover"""

    @pytest.mark.parametrize("seed,length", [(1, 60), (7, 61), (42, 90), (2024, 250)])
    def test_random_walk_bounds(self, bar_factory, seed, length):
        rng = np.random.default_rng(seed)
        closes = (100.0 * np.cumprod(1 + rng.normal(0.0, 0.02, size=length))).round(2).tolist()
        features = compute_features(bar_factory(closes))

        for value, window in ((features.ma5, 5), (features.ma20, 20), (features.ma60, 60)):
            assert value is not None
            # reported averages are rounded to 2 decimals
            assert min(closes[-window:]) - 0.005 <= value <= max(closes[-window:]) + 0.005


class TestCalculatorErrors:
    """Test error wrapping"""

    def test_malformed_bar_wrapped(self):
        """Test a bar without a close is reported as a calculation failure"""
        with pytest.raises(MetricsCalculationError):
            compute_features([object()])

    def test_non_finite_close_rejected(self, bar_factory):
        with pytest.raises(MetricsCalculationError):
            compute_features(bar_factory([100.0] * 5 + [float("nan")]))


class TestWarmup:
    """Test warm-up period reporting"""

    def test_default_warmup(self):
        assert FeatureCalculator().get_warmup_period() == 60

    def test_ema_signal_warmup(self):
        config = get_default_config()
        config = replace(config, indicators=replace(config.indicators, ma_long=20, macd_signal_mode="ema"))
        assert FeatureCalculator(config).get_warmup_period() == 34

    def test_is_warmed_up(self, bar_factory):
        calculator = FeatureCalculator()
        assert not calculator.is_warmed_up(bar_factory([1.0] * 59))
        assert calculator.is_warmed_up(bar_factory([1.0] * 60))


class TestNarrativeDocument:
    """Test the JSON projection of features"""

    def test_document_shape(self, flat_daily_bars):
        document = technical_features_to_json(compute_features(flat_daily_bars))

        assert document["technical"] == {
            "trend_pattern": "consolidating",
            "rsi_level": "overbought",
            "macd_signal": "choppy",
            "price_vs_support_resistance": "between",
        }
        assert document["indicators"]["ma20"] == 100.0
        assert document["indicators"]["rsi"] == 100.0
        assert document["current_price"] == 100.0
