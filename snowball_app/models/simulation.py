"""Data models for backtest and forecast results"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

import orjson


@dataclass(frozen=True)
class SimulationPoint:
    """Portfolio state at the close of one weekly period"""
    date: date
    portfolio_value: float
    cumulative_contribution: float
    reference_price: float
    shares: float = 0.0
    contribution: float = 0.0       # Cash invested in this period
    net_value: float = 0.0          # Portfolio value after selling costs

    @property
    def unrealized_gain(self) -> float:
        return self.portfolio_value - self.cumulative_contribution

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "portfolio_value": self.portfolio_value,
            "cumulative_contribution": self.cumulative_contribution,
            "reference_price": self.reference_price,
            "shares": self.shares,
            "contribution": self.contribution,
            "net_value": self.net_value,
        }


@dataclass(frozen=True)
class SimulationSummary:
    """Performance statistics of a simulated equity curve

    Returns and drawdown are fractions (0.05 == 5%).
    """
    start_date: date
    end_date: date
    periods: int
    total_contribution: float
    final_value: float
    total_return: float
    cagr: float
    max_drawdown: float
    sharpe_ratio: float
    total_shares: float
    final_net_value: float = 0.0
    doubling_years: Optional[float] = None     # Rule of 72, fixed-rate mode only

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "periods": self.periods,
            "total_contribution": self.total_contribution,
            "final_value": self.final_value,
            "total_return": self.total_return,
            "cagr": self.cagr,
            "max_drawdown": self.max_drawdown,
            "sharpe_ratio": self.sharpe_ratio,
            "total_shares": self.total_shares,
            "final_net_value": self.final_net_value,
            "doubling_years": self.doubling_years,
        }


@dataclass(frozen=True)
class SimulationResult:
    """Ordered weekly equity curve produced by one simulation run"""
    mode: str                       # 'historical', 'forecast' or 'fixed_rate'
    points: tuple[SimulationPoint, ...]
    summary: SimulationSummary
    seed: Optional[int] = None      # Resampling seed, forecast mode only

    def __len__(self) -> int:
        return len(self.points)

    @property
    def final_point(self) -> SimulationPoint:
        return self.points[-1]

    def to_chart_series(self) -> dict[str, list]:
        """Parallel series for an equity chart with a secondary price axis"""
        return {
            "dates": [p.date.isoformat() for p in self.points],
            "portfolio_value": [p.portfolio_value for p in self.points],
            "cumulative_contribution": [p.cumulative_contribution for p in self.points],
            "reference_price": [p.reference_price for p in self.points],
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "seed": self.seed,
            "points": [p.to_dict() for p in self.points],
            "summary": self.summary.to_dict(),
        }

    def dumps_json(self) -> bytes:
        """Serialize to JSON bytes"""
        return orjson.dumps(self.to_dict())


@dataclass(frozen=True)
class ForecastBandPoint:
    """Percentile spread of simulated portfolio values for one period"""
    date: date
    cumulative_contribution: float
    percentiles: dict[str, float] = field(default_factory=dict)   # e.g. {"p10": ..., "p50": ...}

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "cumulative_contribution": self.cumulative_contribution,
            **self.percentiles,
        }


@dataclass(frozen=True)
class ForecastDistributionSummary:
    """Final-value outcomes across all Monte-Carlo runs"""
    horizon_years: float
    runs: int
    total_contribution: float
    conservative: float     # P10
    median: float           # P50
    optimistic: float       # P90

    def _return(self, value: float) -> float:
        if self.total_contribution <= 0:
            return 0.0
        return (value - self.total_contribution) / self.total_contribution

    @property
    def conservative_return(self) -> float:
        return self._return(self.conservative)

    @property
    def median_return(self) -> float:
        return self._return(self.median)

    @property
    def optimistic_return(self) -> float:
        return self._return(self.optimistic)

    def to_dict(self) -> dict[str, Any]:
        return {
            "horizon_years": self.horizon_years,
            "runs": self.runs,
            "total_contribution": self.total_contribution,
            "conservative": self.conservative,
            "median": self.median,
            "optimistic": self.optimistic,
            "conservative_return": self.conservative_return,
            "median_return": self.median_return,
            "optimistic_return": self.optimistic_return,
        }


@dataclass(frozen=True)
class ForecastDistribution:
    """Monte-Carlo percentile bands of bootstrap forecasts"""
    bands: tuple[ForecastBandPoint, ...]
    summary: ForecastDistributionSummary
    seed: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "seed": self.seed,
            "bands": [b.to_dict() for b in self.bands],
            "summary": self.summary.to_dict(),
        }

    def dumps_json(self) -> bytes:
        """Serialize to JSON bytes"""
        return orjson.dumps(self.to_dict())
