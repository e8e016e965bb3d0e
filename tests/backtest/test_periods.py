"""Tests for weekly resampling"""

from datetime import date

import pytest
from snowball_app.backtest.periods import period_returns, resample_weekly


class TestResampleWeekly:
    """Test ISO week aggregation"""

    def test_daily_bars_collapse_to_weeks(self, bar_factory):
        """Test two calendar weeks of daily bars become two weekly bars"""
        # 2024-01-01 is a Monday
        bars = bar_factory([float(i) for i in range(1, 15)], spread=0.5)
        weeks = resample_weekly(bars)

        assert len(weeks) == 2
        first = weeks[0]
        assert first.date == date(2024, 1, 7)
        assert first.open == 1.0
        assert first.close == 7.0
        assert first.high == 7.5
        assert first.low == 0.5
        assert first.volume == 7000.0
        assert weeks[1].date == date(2024, 1, 14)
        assert weeks[1].close == 14.0

    def test_weekly_bars_pass_through(self, flat_weekly_bars):
        weeks = resample_weekly(flat_weekly_bars)
        assert weeks == flat_weekly_bars

    def test_partial_last_week(self, bar_factory):
        """Test an unfinished week is dated on its last available bar"""
        bars = bar_factory([1.0] * 9)
        weeks = resample_weekly(bars)
        assert [w.date for w in weeks] == [date(2024, 1, 7), date(2024, 1, 9)]

    def test_year_boundary_uses_iso_weeks(self, bar_factory):
        """Test Dec 30 2024 (Monday) and Jan 2 2025 share ISO week 1"""
        bars = bar_factory([1.0, 2.0, 3.0, 4.0], start=date(2024, 12, 30))
        weeks = resample_weekly(bars)
        assert len(weeks) == 1
        assert weeks[0].close == 4.0

    def test_empty_series(self):
        assert resample_weekly([]) == []


class TestPeriodReturns:
    """Test simple returns"""

    def test_returns(self):
        assert period_returns([100.0, 110.0, 99.0]) == pytest.approx([0.1, -0.1])

    def test_single_close(self):
        assert period_returns([100.0]) == []
