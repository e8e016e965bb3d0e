"""Performance statistics for simulated equity curves"""

import math
from collections.abc import Sequence
from typing import Optional

import numpy as np

from ..config.defaults import BacktestParams
from ..models.simulation import SimulationPoint, SimulationSummary
from ..utils.time import years_between

# Standard deviations below this are treated as a riskless path
STD_TOLERANCE = 1e-12


def max_drawdown(values: Sequence[float]) -> float:
    """Largest peak-to-trough decline as a fraction of the peak"""
    curve = np.asarray(values, dtype=float)
    if curve.size == 0:
        return 0.0
    peaks = np.maximum.accumulate(np.maximum(curve, 0.0))
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(peaks > 0, (peaks - curve) / peaks, 0.0)
    return float(drawdowns.max())


def cagr(final_value: float, total_contribution: float, years: float) -> float:
    """Compound annual growth of final value over total contribution"""
    if years <= 0 or total_contribution <= 0:
        return 0.0
    if final_value <= 0:
        return -1.0
    return (final_value / total_contribution) ** (1.0 / years) - 1.0


def rule_of_72(annual_return: float) -> Optional[float]:
    """Approximate years for money to double, None when it never does"""
    if annual_return <= 0:
        return None
    return 72.0 / (annual_return * 100.0)


def contribution_adjusted_returns(points: Sequence[SimulationPoint]) -> list[float]:
    """Period returns with the period's new cash removed from the gain"""
    returns = []
    for previous, current in zip(points, points[1:]):
        if previous.portfolio_value > 0:
            gain = current.portfolio_value - previous.portfolio_value - current.contribution
            returns.append(gain / previous.portfolio_value)
    return returns


def sharpe_ratio(returns: Sequence[float], periods_per_year: int, risk_free_rate: float) -> float:
    """
    Annualized Sharpe ratio of per-period returns

    Uses the population standard deviation. Paths whose returns do not
    vary (a fixed-rate projection) have no risk and report 0.
    """
    sample = np.asarray(returns, dtype=float)
    if sample.size == 0:
        return 0.0
    std = float(sample.std(ddof=0))
    if math.isclose(std, 0.0, abs_tol=STD_TOLERANCE):
        return 0.0
    excess = float(sample.mean()) - risk_free_rate / periods_per_year
    return excess / std * math.sqrt(periods_per_year)


def summarize(points: Sequence[SimulationPoint], params: BacktestParams) -> SimulationSummary:
    """Build a SimulationSummary from a non-empty equity curve"""
    first = points[0]
    last = points[-1]
    total = last.cumulative_contribution
    years = years_between(first.date, last.date)

    return SimulationSummary(
        start_date=first.date,
        end_date=last.date,
        periods=len(points),
        total_contribution=total,
        final_value=last.portfolio_value,
        total_return=(last.portfolio_value - total) / total if total > 0 else 0.0,
        cagr=cagr(last.portfolio_value, total, years),
        max_drawdown=max_drawdown([p.portfolio_value for p in points]),
        sharpe_ratio=sharpe_ratio(
            contribution_adjusted_returns(points),
            params.periods_per_year,
            params.risk_free_rate,
        ),
        total_shares=last.shares,
        final_net_value=last.net_value,
    )
