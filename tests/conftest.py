"""Pytest configuration and shared fixtures."""

import pytest
from datetime import date, timedelta
from typing import Any, Dict, List

from snowball_app.data.models import Frequency, InvestmentPlan, InvestmentStage, PriceBar


def build_bars(closes: List[float], start: date = date(2024, 1, 1), step_days: int = 1,
               spread: float = 0.0, volume: float = 1000.0) -> List[PriceBar]:
    """Build bars with open == close and high/low 'spread' away from the close."""
    return [
        PriceBar(
            date=start + timedelta(days=i * step_days),
            open=close,
            high=close + spread,
            low=close - spread,
            close=close,
            volume=volume,
        )
        for i, close in enumerate(closes)
    ]


@pytest.fixture
def bar_factory():
    """Factory building PriceBar lists from close prices."""
    return build_bars


@pytest.fixture
def flat_daily_bars() -> List[PriceBar]:
    """70 daily bars with a constant close of 100.00."""
    return build_bars([100.0] * 70)


@pytest.fixture
def flat_weekly_bars() -> List[PriceBar]:
    """52 weekly bars (Fridays) with a constant close of 100.00."""
    return build_bars([100.0] * 52, start=date(2024, 1, 5), step_days=7)


@pytest.fixture
def trending_weekly_bars() -> List[PriceBar]:
    """156 weekly bars with alternating gains and smaller losses."""
    closes = []
    price = 100.0
    for i in range(156):
        price *= 1.03 if i % 3 else 0.98
        closes.append(round(price, 2))
    return build_bars(closes, start=date(2021, 1, 1), step_days=7, spread=0.5)


@pytest.fixture
def lump_sum_plan() -> InvestmentPlan:
    """Single once-only stage investing 100,000 at the start of 2024."""
    return InvestmentPlan(stages=(
        InvestmentStage(
            start_date=date(2024, 1, 1),
            end_date=date(2024, 12, 31),
            periodic_contribution=100000.0,
            frequency=Frequency.ONCE,
        ),
    ))


@pytest.fixture
def sample_plan_data() -> Dict[str, Any]:
    """Raw plan as submitted by the dashboard form."""
    return {
        "initialLumpSum": 50000,
        "stages": [
            {
                "startDate": "2024-01-01",
                "endDate": "2024-06-30",
                "periodicContribution": 5000,
                "frequency": "monthly",
            },
            {
                "startDate": "2024-07-01",
                "endDate": "2024-12-31",
                "periodicContribution": 1000,
                "frequency": "weekly",
            },
        ],
    }


@pytest.fixture
def sample_price_records() -> List[Dict[str, Any]]:
    """Provider history records with ISO dates."""
    return [
        {"date": "2024-01-02", "open": 100.0, "high": 102.0, "low": 99.0, "close": 101.0, "volume": 1200},
        {"date": "2024-01-03", "open": 101.0, "high": 103.5, "low": 100.5, "close": 103.0, "volume": 1500},
        {"date": "2024-01-04", "open": 103.0, "high": 104.0, "low": 101.0, "close": 102.0, "volume": 900},
    ]
