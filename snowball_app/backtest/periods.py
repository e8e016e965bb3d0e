"""Weekly resampling of daily price history"""

from collections.abc import Sequence

from ..data.models import PriceBar
from ..utils.time import week_key


def resample_weekly(series: Sequence[PriceBar]) -> list[PriceBar]:
    """
    Collapse bars into one bar per ISO week

    The weekly bar is dated on the last bar of the week and closes at its
    close; open is the first open, high/low the extremes and volume the sum.
    Series that are already weekly or coarser pass through unchanged.

    Args:
        series: Price bars in chronological order

    Returns:
        Weekly bars in chronological order
    """
    weeks: list[PriceBar] = []
    current: list[PriceBar] = []

    for bar in series:
        if current and week_key(bar.date) != week_key(current[-1].date):
            weeks.append(_merge(current))
            current = []
        current.append(bar)

    if current:
        weeks.append(_merge(current))

    return weeks


def _merge(bars: list[PriceBar]) -> PriceBar:
    if len(bars) == 1:
        return bars[0]
    return PriceBar(
        date=bars[-1].date,
        open=bars[0].open,
        high=max(bar.high for bar in bars),
        low=min(bar.low for bar in bars),
        close=bars[-1].close,
        volume=sum(bar.volume for bar in bars),
    )


def period_returns(closes: Sequence[float]) -> list[float]:
    """Simple returns between consecutive closes"""
    return [closes[i] / closes[i - 1] - 1.0 for i in range(1, len(closes))]
