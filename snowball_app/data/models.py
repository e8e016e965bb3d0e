"""
Canonical data models for price history and investment plans.

This module defines immutable data structures that the feature and
simulation engines consume. Price bars are supplied by an external quote
provider; plans come from a UI form after normalization.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class PriceBar:
    """One trading-period OHLCV observation."""
    date: date          # Trading date
    open: float         # Opening price
    high: float         # High price
    low: float          # Low price
    close: float        # Closing price
    volume: float       # Traded volume


class Frequency(str, Enum):
    """Contribution frequency of an investment stage."""
    ONCE = "once"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class InvestmentStage:
    """A date range with a fixed periodic contribution."""
    start_date: date
    end_date: date
    periodic_contribution: float
    frequency: Frequency = Frequency.MONTHLY

    def contains(self, day: date) -> bool:
        """Check whether a date falls inside the stage (inclusive)."""
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class InvestmentPlan:
    """Ordered, non-overlapping contribution stages plus an optional lump sum."""
    stages: tuple[InvestmentStage, ...] = field(default_factory=tuple)
    initial_lump_sum: float = 0.0

    @property
    def start_date(self) -> Optional[date]:
        """First stage start date, None for a plan without stages."""
        return self.stages[0].start_date if self.stages else None

    @property
    def end_date(self) -> Optional[date]:
        """Last stage end date, None for a plan without stages."""
        return self.stages[-1].end_date if self.stages else None

    def stage_for(self, day: date) -> Optional[InvestmentStage]:
        """Active stage on a date, None between or outside stages."""
        for stage in self.stages:
            if stage.contains(day):
                return stage
        return None
