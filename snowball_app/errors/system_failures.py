"""
System failure error classifications.

These exceptions mean a computation produced an unusable result or the
engine was configured incorrectly. They are not recoverable by retrying
with the same input.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class MetricsCalculationError(SystemFailureError):
    """Indicator calculation produced a non-finite or impossible value."""

    def __init__(self, message: str, metric_name: Optional[str] = None,
                 calculation_input: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.metric_name = metric_name
        self.calculation_input = calculation_input


class SimulationError(SystemFailureError):
    """Backtest or forecast produced a non-finite portfolio trajectory."""

    def __init__(self, message: str, mode: Optional[str] = None,
                 period_index: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.mode = mode
        self.period_index = period_index


class ConfigurationError(SystemFailureError):
    """Configuration overrides failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
