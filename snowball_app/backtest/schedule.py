"""
Contribution scheduling for staged investment plans.

A contribution lands on the first simulated period of every interval of
the active stage's frequency; nothing is prorated at stage boundaries.
Intervals are calendar months, quarters and years for the monthly,
quarterly and yearly frequencies, every period for weekly, every second
period (counted from the stage's first period) for biweekly, and only the
stage's first period for once.
"""

from collections.abc import Sequence
from datetime import date
from typing import Any, Optional

from ..data.models import Frequency, InvestmentPlan, InvestmentStage
from ..utils.time import month_key, quarter_key


class ContributionScheduler:
    """Maps simulated period dates to contribution amounts"""

    def __init__(self, plan: InvestmentPlan):
        self.plan = plan

    def schedule(self, period_dates: Sequence[date]) -> list[float]:
        """
        Contribution amount for every period

        The plan's initial lump sum is added to the first period.

        Args:
            period_dates: Simulated period dates in chronological order

        Returns:
            Amounts aligned with period_dates
        """
        amounts = [0.0] * len(period_dates)
        last_keys: dict[int, Any] = {}
        first_index: dict[int, int] = {}

        for i, day in enumerate(period_dates):
            stage_index = self._stage_index(day)
            if stage_index is None:
                continue

            stage = self.plan.stages[stage_index]
            first_index.setdefault(stage_index, i)
            key = self._interval_key(stage, day, i - first_index[stage_index])

            if last_keys.get(stage_index, _UNSET) != key:
                last_keys[stage_index] = key
                amounts[i] += stage.periodic_contribution

        if amounts:
            amounts[0] += self.plan.initial_lump_sum

        return amounts

    def _stage_index(self, day: date) -> Optional[int]:
        for index, stage in enumerate(self.plan.stages):
            if stage.contains(day):
                return index
        return None

    @staticmethod
    def _interval_key(stage: InvestmentStage, day: date, offset: int) -> Any:
        frequency = stage.frequency
        if frequency == Frequency.ONCE:
            return "once"
        if frequency == Frequency.WEEKLY:
            return offset
        if frequency == Frequency.BIWEEKLY:
            return offset // 2
        if frequency == Frequency.MONTHLY:
            return month_key(day)
        if frequency == Frequency.QUARTERLY:
            return quarter_key(day)
        if frequency == Frequency.YEARLY:
            return day.year
        raise ValueError(f"Unknown frequency: {frequency}")


_UNSET = object()


def apply_dip_buying(amounts: Sequence[float], rsi_values: Sequence[float],
                     threshold: float, multiplier: float) -> list[float]:
    """Scale every contribution made while RSI is below the threshold"""
    return [
        amount * multiplier if amount > 0 and rsi < threshold else amount
        for amount, rsi in zip(amounts, rsi_values)
    ]
