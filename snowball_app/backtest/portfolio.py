"""Share accumulation with slippage-adjusted purchases"""

from collections.abc import Sequence
from datetime import date
from typing import Optional

import numpy as np

from ..config.defaults import BacktestParams
from ..errors import SimulationError
from ..models.simulation import SimulationPoint, SimulationResult
from .stats import summarize


def purchase_shares(prices: np.ndarray, contributions: Sequence[float],
                    slippage_rate: float) -> np.ndarray:
    """
    Shares held after each period's purchase

    Each positive contribution buys fractional shares at
    price * (1 + slippage_rate). 'prices' is one path or a matrix with one
    path per row; contributions run along the last axis.
    """
    amounts = np.asarray(contributions, dtype=float)
    cost = np.asarray(prices, dtype=float) * (1.0 + slippage_rate)
    bought = np.divide(amounts, cost, out=np.zeros(np.broadcast(amounts, cost).shape),
                       where=amounts > 0)
    return np.cumsum(bought, axis=-1)


def _first_invalid(values: np.ndarray, positive: bool = False) -> Optional[int]:
    invalid = ~np.isfinite(values)
    if positive:
        invalid |= values <= 0
    indices = np.flatnonzero(invalid)
    return int(indices[0]) if indices.size else None


def simulate_path(
    mode: str,
    dates: Sequence[date],
    prices: Sequence[float],
    contributions: Sequence[float],
    params: BacktestParams,
    seed: Optional[int] = None,
) -> SimulationResult:
    """
    Apply a contribution schedule to a price path

    Args:
        mode: Result mode label
        dates: Period dates
        prices: Period closing prices
        contributions: Cash invested per period
        params: Slippage, selling cost and performance parameters
        seed: Resampling seed recorded on the result

    Returns:
        SimulationResult with one point per period

    Raises:
        SimulationError: If a price is not a positive number or the path
            produces a non-finite value
    """
    price_path = np.asarray(prices, dtype=float)
    bad = _first_invalid(price_path, positive=True)
    if bad is not None:
        raise SimulationError(f"Invalid price at {dates[bad]}: {prices[bad]}",
                              mode=mode, period_index=bad)

    amounts = np.asarray(contributions, dtype=float)
    shares = purchase_shares(price_path, amounts, params.slippage_rate)
    values = shares * price_path
    bad = _first_invalid(values)
    if bad is not None:
        raise SimulationError(f"Invalid portfolio value at {dates[bad]}: {values[bad]}",
                              mode=mode, period_index=bad)

    cumulative = np.cumsum(np.where(amounts > 0, amounts, 0.0))
    net_values = values * (1.0 - params.commission_rate - params.tax_rate)

    points = [
        SimulationPoint(
            date=day,
            portfolio_value=value,
            cumulative_contribution=invested,
            reference_price=price,
            shares=held,
            contribution=amount,
            net_value=net,
        )
        for day, value, invested, price, held, amount, net in zip(
            dates, values.tolist(), cumulative.tolist(), price_path.tolist(),
            shares.tolist(), amounts.tolist(), net_values.tolist(),
        )
    ]

    return SimulationResult(
        mode=mode,
        points=tuple(points),
        summary=summarize(points, params),
        seed=seed,
    )
