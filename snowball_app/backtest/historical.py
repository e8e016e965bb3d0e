"""Historical replay of an investment plan against actual prices"""

from collections.abc import Sequence
from typing import Optional

import structlog

from ..config.defaults import DefaultConfig, get_default_config
from ..data.models import InvestmentPlan, PriceBar
from ..data.plan_normalizer import validate_plan
from ..errors import InsufficientHistoryError
from ..metrics.rsi import calculate_rsi_series
from ..models.simulation import SimulationResult
from .periods import resample_weekly
from .portfolio import simulate_path
from .schedule import ContributionScheduler, apply_dip_buying

logger = structlog.get_logger(__name__)


def require_history(series: Sequence[PriceBar], config: DefaultConfig) -> None:
    """
    Raises:
        InsufficientHistoryError: If the series is shorter than the simulation minimum
    """
    required = config.data.min_simulation_points
    if len(series) < required:
        raise InsufficientHistoryError(
            f"At least {required} price points are required, got {len(series)}",
            required_count=required,
            available_count=len(series),
        )


def run_historical_backtest(
    series: Sequence[PriceBar],
    plan: InvestmentPlan,
    config: Optional[DefaultConfig] = None,
) -> SimulationResult:
    """
    Replay a plan against historical prices at weekly granularity

    Periods start at the first week on or after the plan's start date and
    run to the end of the series; holdings keep being valued after the last
    stage ends. With the "rsi" dip-buy strategy, contributions made while
    the weekly RSI is below the threshold are multiplied.

    Args:
        series: Price bars in chronological order
        plan: Investment plan
        config: Engine configuration, defaults when omitted

    Returns:
        SimulationResult in 'historical' mode

    Raises:
        InsufficientHistoryError: If the series has fewer than 2 points or
            no weekly period falls on or after the plan start
        InvalidPlanError: If the plan is malformed
    """
    config = config or get_default_config()
    require_history(series, config)
    validate_plan(plan)

    weekly = resample_weekly(series)
    first = next((i for i, bar in enumerate(weekly) if bar.date >= plan.start_date), len(weekly))
    periods = weekly[first:]
    if not periods:
        raise InsufficientHistoryError(
            f"No price history on or after plan start {plan.start_date.isoformat()}",
            required_count=1,
            available_count=0,
        )

    dates = [bar.date for bar in periods]
    contributions = ContributionScheduler(plan).schedule(dates)

    backtest = config.backtest
    if backtest.dip_buy_strategy == "rsi":
        # RSI warms up on the weeks before the plan starts
        rsi_values = calculate_rsi_series([bar.close for bar in weekly], config.indicators.rsi_period)
        contributions = apply_dip_buying(contributions, rsi_values[first:],
                                         backtest.dip_buy_rsi_threshold, backtest.dip_buy_multiplier)

    result = simulate_path(
        "historical",
        dates,
        [bar.close for bar in periods],
        contributions,
        backtest,
    )

    logger.debug(
        "Historical backtest complete",
        periods=len(result),
        total_contribution=result.summary.total_contribution,
        final_value=result.summary.final_value
    )
    return result
