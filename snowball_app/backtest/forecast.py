"""
Stochastic forward projection of an investment plan.

Future prices are built by bootstrap resampling: historical weekly returns
are drawn with replacement and compounded onto the last known close. This
keeps the empirical frequency of extreme weeks, which a fitted normal
distribution would understate over long horizons.
"""

import math
import secrets
from collections.abc import Sequence
from dataclasses import replace
from datetime import date
from typing import Optional

import numpy as np
import structlog

from ..config.defaults import DefaultConfig, get_default_config
from ..data.models import InvestmentPlan, PriceBar
from ..data.plan_normalizer import validate_plan
from ..errors import InsufficientHistoryError, InvalidPlanError, SimulationError
from ..models.simulation import (
    ForecastBandPoint,
    ForecastDistribution,
    ForecastDistributionSummary,
    SimulationResult,
)
from ..utils.numeric import percentile
from ..utils.time import add_weeks
from .historical import require_history
from .periods import period_returns, resample_weekly
from .portfolio import purchase_shares, simulate_path
from .schedule import ContributionScheduler
from .stats import rule_of_72

logger = structlog.get_logger(__name__)


class BootstrapResampler:
    """Draws synthetic price paths from an empirical return sample"""

    def __init__(self, returns: Sequence[float], rng: np.random.Generator):
        if len(returns) == 0:
            raise InsufficientHistoryError("No historical returns to resample",
                                           required_count=1, available_count=0)
        self.returns = np.asarray(returns, dtype=float)
        self.rng = rng

    def sample_returns(self, periods: int, runs: Optional[int] = None) -> np.ndarray:
        """Draw returns with replacement, shaped (periods,) or (runs, periods)"""
        size = periods if runs is None else (runs, periods)
        return self.rng.choice(self.returns, size=size, replace=True)

    def sample_path(self, start_price: float, periods: int) -> np.ndarray:
        """Compound sampled returns onto start_price; start_price is not included"""
        return start_price * np.cumprod(1.0 + self.sample_returns(periods))

    def sample_paths(self, start_price: float, periods: int, runs: int) -> np.ndarray:
        """Matrix of 'runs' independent paths, one per row"""
        return start_price * np.cumprod(1.0 + self.sample_returns(periods, runs), axis=1)


def historical_returns(series: Sequence[PriceBar]) -> list[float]:
    """
    Weekly returns of a series

    Falls back to bar-to-bar returns when the whole series sits inside a
    single week.

    Raises:
        SimulationError: If a close is not positive
    """
    weekly = [bar.close for bar in resample_weekly(series)]
    closes = weekly if len(weekly) >= 2 else [bar.close for bar in series]
    if any(close <= 0 for close in closes):
        raise SimulationError("Cannot derive returns from non-positive closes", mode="forecast")
    return period_returns(closes)


def horizon_periods(horizon_years: float, config: DefaultConfig) -> int:
    """
    Number of weekly periods in a horizon

    Raises:
        InvalidPlanError: If the horizon is not a positive finite number or
            exceeds the maximum
    """
    if (isinstance(horizon_years, bool) or not isinstance(horizon_years, (int, float))
            or not math.isfinite(horizon_years)):
        raise InvalidPlanError(f"Invalid horizon: {horizon_years!r}",
                               field="horizon_years", value=horizon_years)
    if horizon_years > config.forecast.max_horizon_years:
        raise InvalidPlanError(
            f"Horizon exceeds {config.forecast.max_horizon_years} years",
            field="horizon_years", value=horizon_years,
        )
    periods = round(horizon_years * config.backtest.periods_per_year)
    if periods < 1:
        raise InvalidPlanError("Horizon must cover at least one week",
                               field="horizon_years", value=horizon_years)
    return periods


def _resolve_rng(seed: Optional[int],
                 rng: Optional[np.random.Generator]) -> tuple[np.random.Generator, Optional[int]]:
    """Use the caller's generator, else seed a new one and report the seed."""
    if rng is not None:
        return rng, seed
    if seed is None:
        seed = secrets.randbits(32)
    return np.random.default_rng(seed), seed


def run_forecast_simulation(
    series: Sequence[PriceBar],
    plan: InvestmentPlan,
    horizon_years: float,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    config: Optional[DefaultConfig] = None,
) -> SimulationResult:
    """
    Simulate a plan on one bootstrap-resampled future path

    The path has round(horizon_years * 52) weekly periods starting one week
    after the last bar; periods before the plan's start date are dropped.

    Args:
        series: Price bars in chronological order
        plan: Investment plan with future-dated stages
        horizon_years: Projection length in years
        seed: Seed for a fresh generator; identical seeds give identical results
        rng: Explicit generator, takes precedence over seed
        config: Engine configuration, defaults when omitted

    Returns:
        SimulationResult in 'forecast' mode, recording the seed used

    Raises:
        InsufficientHistoryError: If the series has fewer than 2 points
        InvalidPlanError: If the plan or horizon is invalid
    """
    config = config or get_default_config()
    require_history(series, config)
    validate_plan(plan)
    periods = horizon_periods(horizon_years, config)

    generator, seed = _resolve_rng(seed, rng)
    resampler = BootstrapResampler(historical_returns(series), generator)

    all_dates = [add_weeks(series[-1].date, k) for k in range(1, periods + 1)]
    prices = resampler.sample_path(series[-1].close, periods).tolist()
    kept = [(day, price) for day, price in zip(all_dates, prices) if day >= plan.start_date]
    if not kept:
        raise InvalidPlanError("Plan starts after the forecast horizon",
                               field="stages[0].start_date", value=plan.start_date)

    dates = [day for day, _ in kept]
    result = simulate_path(
        "forecast",
        dates,
        [price for _, price in kept],
        ContributionScheduler(plan).schedule(dates),
        config.backtest,
        seed=seed,
    )

    logger.debug(
        "Forecast simulation complete",
        periods=len(result),
        seed=seed,
        final_value=result.summary.final_value
    )
    return result


def run_forecast_distribution(
    series: Sequence[PriceBar],
    plan: InvestmentPlan,
    horizon_years: float,
    runs: Optional[int] = None,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    config: Optional[DefaultConfig] = None,
) -> ForecastDistribution:
    """
    Run many bootstrap paths and report percentile bands per period

    All runs draw from one generator, so a seed reproduces the whole
    distribution.

    Args:
        series: Price bars in chronological order
        plan: Investment plan with future-dated stages
        horizon_years: Projection length in years
        runs: Number of paths, config.forecast.monte_carlo_runs when omitted
        seed: Seed for a fresh generator
        rng: Explicit generator, takes precedence over seed
        config: Engine configuration, defaults when omitted

    Returns:
        ForecastDistribution
    """
    config = config or get_default_config()
    require_history(series, config)
    validate_plan(plan)
    periods = horizon_periods(horizon_years, config)
    runs = runs if runs is not None else config.forecast.monte_carlo_runs
    if isinstance(runs, bool) or not isinstance(runs, int) or runs < 1:
        raise InvalidPlanError("Runs must be a positive integer", field="runs", value=runs)

    generator, seed = _resolve_rng(seed, rng)
    resampler = BootstrapResampler(historical_returns(series), generator)

    all_dates = [add_weeks(series[-1].date, k) for k in range(1, periods + 1)]
    keep = [i for i, day in enumerate(all_dates) if day >= plan.start_date]
    if not keep:
        raise InvalidPlanError("Plan starts after the forecast horizon",
                               field="stages[0].start_date", value=plan.start_date)
    dates = [all_dates[i] for i in keep]
    contributions = ContributionScheduler(plan).schedule(dates)

    # One row per run, one column per kept period
    paths = resampler.sample_paths(series[-1].close, periods, runs)[:, keep]
    values = purchase_shares(paths, contributions, config.backtest.slippage_rate) * paths
    values.sort(axis=0)
    cumulative = np.cumsum(contributions).tolist()

    columns = {_label(p): percentile(values, p).tolist() for p in config.forecast.percentiles}
    bands = tuple(
        ForecastBandPoint(
            date=day,
            cumulative_contribution=invested,
            percentiles={label: column[t] for label, column in columns.items()},
        )
        for t, (day, invested) in enumerate(zip(dates, cumulative))
    )

    final_values = values[:, -1]
    summary = ForecastDistributionSummary(
        horizon_years=horizon_years,
        runs=runs,
        total_contribution=cumulative[-1],
        conservative=float(percentile(final_values, 0.10)),
        median=float(percentile(final_values, 0.50)),
        optimistic=float(percentile(final_values, 0.90)),
    )

    logger.debug(
        "Forecast distribution complete",
        runs=runs,
        periods=len(bands),
        seed=seed,
        median=summary.median
    )
    return ForecastDistribution(bands=bands, summary=summary, seed=seed)


def run_fixed_rate_projection(
    plan: InvestmentPlan,
    horizon_years: float,
    annual_return: float,
    start_price: float = 100.0,
    start_date: Optional[date] = None,
    config: Optional[DefaultConfig] = None,
) -> SimulationResult:
    """
    Project a plan with a constant annual return

    The reference price grows by (1 + annual_return) ** (1 / 52) - 1 per
    week from start_price; the first period is start_date itself
    (the plan's start date by default).

    Returns:
        SimulationResult in 'fixed_rate' mode; its summary carries the
        rule-of-72 doubling time of annual_return
    """
    config = config or get_default_config()
    validate_plan(plan)
    periods = horizon_periods(horizon_years, config)
    if not math.isfinite(annual_return) or annual_return <= -1:
        raise InvalidPlanError("Annual return must be a finite rate above -100%",
                               field="annual_return", value=annual_return)
    if start_price <= 0:
        raise InvalidPlanError("Start price must be positive", field="start_price", value=start_price)

    start = start_date or plan.start_date
    weekly_rate = (1.0 + annual_return) ** (1.0 / config.backtest.periods_per_year) - 1.0
    dates = [add_weeks(start, k) for k in range(periods)]
    prices = [start_price * (1.0 + weekly_rate) ** k for k in range(periods)]

    result = simulate_path(
        "fixed_rate",
        dates,
        prices,
        ContributionScheduler(plan).schedule(dates),
        config.backtest,
    )
    return replace(result, summary=replace(result.summary, doubling_years=rule_of_72(annual_return)))


def _label(p: float) -> str:
    return f"p{round(p * 100)}"
