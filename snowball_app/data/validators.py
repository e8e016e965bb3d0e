"""
Data validation for price series.

Checks the bar invariants the engines assume: consistent OHLC values,
finite positive prices, non-negative volume and strictly increasing dates.
"""

import math
from collections.abc import Sequence
from typing import Any, Optional

from ..errors import MalformedDataError, TemporalDataError
from .models import PriceBar


class SeriesValidator:
    """Validates price bars against quality rules."""

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """
        Initialize validator with configuration.

        Args:
            config: Validation configuration dict
        """
        self.config = config or {}
        self.allow_zero_volume = self.config.get("allow_zero_volume", True)

    def validate_bar(self, bar: PriceBar) -> None:
        """
        Validate a single bar.

        Raises:
            MalformedDataError: If the bar violates an invariant
        """
        prices = {"open": bar.open, "high": bar.high, "low": bar.low, "close": bar.close}
        for name, price in prices.items():
            if not isinstance(price, (int, float)) or isinstance(price, bool):
                raise MalformedDataError(f"Invalid {name} price type: {type(price)}",
                                         raw_data=str(bar))
            if math.isnan(price) or math.isinf(price):
                raise MalformedDataError(f"Invalid {name} price value: {price}",
                                         raw_data=str(bar))
            if price <= 0:
                raise MalformedDataError(f"Non-positive {name} price: {price}",
                                         raw_data=str(bar))

        if bar.high < max(bar.open, bar.close):
            raise MalformedDataError("High price less than open/close", raw_data=str(bar))
        if bar.low > min(bar.open, bar.close):
            raise MalformedDataError("Low price greater than open/close", raw_data=str(bar))

        if not isinstance(bar.volume, (int, float)) or isinstance(bar.volume, bool):
            raise MalformedDataError(f"Invalid volume type: {type(bar.volume)}", raw_data=str(bar))
        if math.isnan(bar.volume) or math.isinf(bar.volume):
            raise MalformedDataError(f"Invalid volume value: {bar.volume}", raw_data=str(bar))
        if bar.volume < 0:
            raise MalformedDataError(f"Negative volume: {bar.volume}", raw_data=str(bar))
        if bar.volume == 0 and not self.allow_zero_volume:
            raise MalformedDataError("Zero volume bar", raw_data=str(bar))

    def validate_series(self, series: Sequence[PriceBar]) -> None:
        """
        Validate every bar and the date ordering of a series.

        Raises:
            MalformedDataError: If any bar violates an invariant
            TemporalDataError: If dates are not strictly increasing
        """
        previous: Optional[PriceBar] = None
        for bar in series:
            self.validate_bar(bar)
            if previous is not None and bar.date <= previous.date:
                raise TemporalDataError(
                    f"Bar dates must be strictly increasing: {bar.date} after {previous.date}",
                    date=bar.date,
                    previous_date=previous.date
                )
            previous = bar


def validate_series(series: Sequence[PriceBar]) -> None:
    """Validate a series with the default rules."""
    SeriesValidator().validate_series(series)
