"""
Data quality error classifications for price series and investment plans.

These exceptions describe problems with caller-supplied input. They are
deterministic for a given input, never retried, and are surfaced to the
caller as an "insufficient data" or validation state.
"""

from typing import Any, Dict, Optional


class DataQualityError(Exception):
    """Base class for input problems that the caller can handle gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class EmptyInputError(DataQualityError):
    """No price data was supplied to the feature engine."""

    def __init__(self, message: str = "No price history available for analysis",
                 data_type: Optional[str] = "price_series", **kwargs):
        super().__init__(message, **kwargs)
        self.data_type = data_type


class InsufficientHistoryError(DataQualityError):
    """Not enough price points to derive returns or run a simulation."""

    def __init__(self, message: str, required_count: Optional[int] = None,
                 available_count: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.required_count = required_count
        self.available_count = available_count


class MalformedDataError(DataQualityError):
    """Data exists but is in an incorrect format or violates bar invariants."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class TemporalDataError(DataQualityError):
    """Bars are not strictly increasing by date."""

    def __init__(self, message: str, date: Optional[Any] = None,
                 previous_date: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.date = date
        self.previous_date = previous_date


class InvalidPlanError(DataQualityError):
    """Investment plan is malformed; a user-correctable validation error."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
