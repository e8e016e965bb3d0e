"""Backtest and forecast simulation of staged investment plans"""

from .forecast import (
    BootstrapResampler,
    run_fixed_rate_projection,
    run_forecast_distribution,
    run_forecast_simulation,
)
from .historical import run_historical_backtest
from .periods import resample_weekly
from .schedule import ContributionScheduler

__all__ = [
    "BootstrapResampler",
    "ContributionScheduler",
    "resample_weekly",
    "run_historical_backtest",
    "run_forecast_simulation",
    "run_forecast_distribution",
    "run_fixed_rate_projection",
]
