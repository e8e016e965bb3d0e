"""Tests for bootstrap forecasts and fixed-rate projections"""

from datetime import date, timedelta

import numpy as np
import pytest
from snowball_app.backtest.forecast import (
    BootstrapResampler,
    historical_returns,
    horizon_periods,
    run_fixed_rate_projection,
    run_forecast_distribution,
    run_forecast_simulation,
)
from snowball_app.config.defaults import get_default_config
from snowball_app.data.models import Frequency, InvestmentPlan, InvestmentStage
from snowball_app.errors import InsufficientHistoryError, InvalidPlanError


@pytest.fixture
def long_plan():
    """Monthly plan covering the whole forecast window"""
    return InvestmentPlan(stages=(
        InvestmentStage(date(2023, 1, 1), date(2035, 12, 31), 1000.0, Frequency.MONTHLY),
    ), initial_lump_sum=10000.0)


class TestBootstrapResampler:
    """Test return sampling"""

    def test_empty_returns_rejected(self):
        with pytest.raises(InsufficientHistoryError):
            BootstrapResampler([], np.random.default_rng(1))

    def test_samples_come_from_history(self):
        resampler = BootstrapResampler([0.01, -0.02, 0.03], np.random.default_rng(1))
        assert set(resampler.sample_returns(200).tolist()) <= {0.01, -0.02, 0.03}

    def test_sample_path_compounds(self):
        resampler = BootstrapResampler([0.1], np.random.default_rng(1))
        assert resampler.sample_path(100.0, 2).tolist() == pytest.approx([110.0, 121.0])

    def test_sample_paths_matrix(self):
        resampler = BootstrapResampler([0.01, -0.02, 0.03], np.random.default_rng(4))
        paths = resampler.sample_paths(100.0, 10, 25)

        assert paths.shape == (25, 10)
        assert (paths > 0).all()

    def test_same_generator_seed_same_paths(self):
        first = BootstrapResampler([0.01, -0.02, 0.03], np.random.default_rng(9)).sample_paths(100.0, 5, 3)
        second = BootstrapResampler([0.01, -0.02, 0.03], np.random.default_rng(9)).sample_paths(100.0, 5, 3)
        assert first.tolist() == second.tolist()


class TestHistoricalReturns:
    """Test return extraction"""

    def test_weekly_returns(self, bar_factory):
        bars = bar_factory([100.0, 110.0, 99.0], step_days=7)
        assert historical_returns(bars) == pytest.approx([0.1, -0.1])

    def test_single_week_falls_back_to_bars(self, bar_factory):
        bars = bar_factory([100.0, 105.0, 110.25])
        assert historical_returns(bars) == pytest.approx([0.05, 0.05])


class TestHorizon:
    """Test horizon validation"""

    def test_one_year(self):
        assert horizon_periods(1, get_default_config()) == 52

    @pytest.mark.parametrize("horizon", [0, -1, 0.001, 51, "10", True, float("nan"), float("inf")])
    def test_invalid_horizon(self, horizon):
        with pytest.raises(InvalidPlanError):
            horizon_periods(horizon, get_default_config())


class TestForecastSimulation:
    """Test single-path forecasts"""

    def test_path_length_and_dates(self, trending_weekly_bars, long_plan):
        result = run_forecast_simulation(trending_weekly_bars, long_plan, 1, seed=42)

        assert result.mode == "forecast"
        assert len(result) == 52
        assert result.points[0].date == trending_weekly_bars[-1].date + timedelta(weeks=1)
        assert result.seed == 42

    def test_same_seed_reproducible(self, trending_weekly_bars, long_plan):
        first = run_forecast_simulation(trending_weekly_bars, long_plan, 2, seed=7)
        second = run_forecast_simulation(trending_weekly_bars, long_plan, 2, seed=7)
        assert first.dumps_json() == second.dumps_json()

    def test_explicit_generator_reproducible(self, trending_weekly_bars, long_plan):
        first = run_forecast_simulation(trending_weekly_bars, long_plan, 2, rng=np.random.default_rng(3))
        second = run_forecast_simulation(trending_weekly_bars, long_plan, 2, rng=np.random.default_rng(3))
        assert first.points == second.points

    def test_seed_generated_when_missing(self, trending_weekly_bars, long_plan):
        result = run_forecast_simulation(trending_weekly_bars, long_plan, 1)
        assert isinstance(result.seed, int)

        replay = run_forecast_simulation(trending_weekly_bars, long_plan, 1, seed=result.seed)
        assert replay.points == result.points

    def test_flat_history_is_deterministic(self, flat_weekly_bars, long_plan):
        """Test zero historical returns keep the price constant"""
        result = run_forecast_simulation(flat_weekly_bars, long_plan, 1, seed=1)

        assert all(p.reference_price == 100.0 for p in result.points)
        assert result.final_point.portfolio_value == pytest.approx(
            result.final_point.cumulative_contribution / 1.002
        )

    def test_contributions_follow_plan(self, trending_weekly_bars, long_plan):
        result = run_forecast_simulation(trending_weekly_bars, long_plan, 1, seed=5)

        assert result.points[0].contribution == 11000.0
        monthly = [p for p in result.points[1:] if p.contribution > 0]
        assert all(p.contribution == 1000.0 for p in monthly)

    def test_plan_start_filters_periods(self, trending_weekly_bars):
        plan = InvestmentPlan(stages=(
            InvestmentStage(date(2024, 6, 1), date(2030, 12, 31), 100.0, Frequency.WEEKLY),
        ))
        result = run_forecast_simulation(trending_weekly_bars, plan, 1, seed=5)

        assert result.points[0].date >= date(2024, 6, 1)
        assert result.points[0].contribution == 100.0

    def test_plan_after_horizon_rejected(self, trending_weekly_bars):
        plan = InvestmentPlan(stages=(
            InvestmentStage(date(2040, 1, 1), date(2041, 1, 1), 100.0, Frequency.MONTHLY),
        ))
        with pytest.raises(InvalidPlanError):
            run_forecast_simulation(trending_weekly_bars, plan, 1, seed=5)

    def test_single_bar_rejected(self, bar_factory, long_plan):
        with pytest.raises(InsufficientHistoryError):
            run_forecast_simulation(bar_factory([100.0]), long_plan, 1, seed=5)


class TestForecastDistribution:
    """Test Monte-Carlo percentile bands"""

    def test_bands_ordered(self, trending_weekly_bars, long_plan):
        distribution = run_forecast_distribution(trending_weekly_bars, long_plan, 1, runs=50, seed=11)

        assert len(distribution.bands) == 52
        for band in distribution.bands:
            values = [band.percentiles[label] for label in ("p10", "p25", "p50", "p75", "p90")]
            assert values == sorted(values)

        summary = distribution.summary
        assert summary.runs == 50
        assert summary.conservative <= summary.median <= summary.optimistic
        assert summary.median == distribution.bands[-1].percentiles["p50"]
        assert summary.total_contribution == distribution.bands[-1].cumulative_contribution

    def test_reproducible(self, trending_weekly_bars, long_plan):
        first = run_forecast_distribution(trending_weekly_bars, long_plan, 1, runs=20, seed=2)
        second = run_forecast_distribution(trending_weekly_bars, long_plan, 1, runs=20, seed=2)
        assert first.dumps_json() == second.dumps_json()

    def test_flat_history_collapses_bands(self, flat_weekly_bars, long_plan):
        distribution = run_forecast_distribution(flat_weekly_bars, long_plan, 1, runs=10, seed=2)
        final = distribution.bands[-1].percentiles
        assert final["p10"] == final["p90"]

    def test_flat_history_matches_single_path(self, flat_weekly_bars, long_plan):
        """Test bands and single paths buy shares the same way"""
        distribution = run_forecast_distribution(flat_weekly_bars, long_plan, 1, runs=5, seed=3)
        single = run_forecast_simulation(flat_weekly_bars, long_plan, 1, seed=3)

        for band, point in zip(distribution.bands, single.points):
            assert band.percentiles["p50"] == pytest.approx(point.portfolio_value)
            assert band.cumulative_contribution == point.cumulative_contribution

    def test_bands_serialize_as_floats(self, trending_weekly_bars, long_plan):
        distribution = run_forecast_distribution(trending_weekly_bars, long_plan, 1, runs=5, seed=8)
        assert all(type(value) is float for value in distribution.bands[0].percentiles.values())

    def test_invalid_runs(self, trending_weekly_bars, long_plan):
        with pytest.raises(InvalidPlanError):
            run_forecast_distribution(trending_weekly_bars, long_plan, 1, runs=0, seed=2)


class TestFixedRateProjection:
    """Test constant-return projections"""

    def test_zero_return(self, long_plan):
        result = run_fixed_rate_projection(long_plan, 1, 0.0)

        assert result.mode == "fixed_rate"
        assert len(result) == 52
        assert result.points[0].date == long_plan.start_date
        assert all(p.reference_price == pytest.approx(100.0) for p in result.points)

    def test_weekly_compounding(self, long_plan):
        result = run_fixed_rate_projection(long_plan, 1, 0.10)
        assert result.final_point.reference_price == pytest.approx(100.0 * 1.1 ** (51 / 52))

    def test_custom_start(self, long_plan):
        result = run_fixed_rate_projection(long_plan, 1, 0.05, start_price=50.0,
                                           start_date=date(2024, 1, 1))
        assert result.points[0].date == date(2024, 1, 1)
        assert result.points[0].reference_price == 50.0

    def test_invalid_return(self, long_plan):
        with pytest.raises(InvalidPlanError):
            run_fixed_rate_projection(long_plan, 1, -1.0)

    def test_invalid_start_price(self, long_plan):
        with pytest.raises(InvalidPlanError):
            run_fixed_rate_projection(long_plan, 1, 0.05, start_price=0.0)

    def test_invalid_return_not_finite(self, long_plan):
        with pytest.raises(InvalidPlanError):
            run_fixed_rate_projection(long_plan, 1, float("nan"))

    def test_lump_sum_has_no_risk(self, lump_sum_plan):
        """Test a constant-return path reports a zero Sharpe ratio"""
        result = run_fixed_rate_projection(lump_sum_plan, 10, 0.07)

        assert result.summary.sharpe_ratio == 0.0
        assert result.summary.max_drawdown == 0.0
        assert result.summary.cagr > 0

    def test_doubling_years(self, long_plan):
        assert run_fixed_rate_projection(long_plan, 1, 0.08).summary.doubling_years == pytest.approx(9.0)
        assert run_fixed_rate_projection(long_plan, 1, 0.0).summary.doubling_years is None

    def test_net_value_below_market_value(self, long_plan):
        result = run_fixed_rate_projection(long_plan, 1, 0.05)
        summary = result.summary

        assert summary.final_net_value == pytest.approx(summary.final_value * (1 - 0.001425 - 0.003))
