"""
Error classification system for the analytics core.

Data quality errors are scoped to a single computation and are always
surfaced to the caller; system failures mark results that must not be used.
"""

from .data_quality import (
    DataQualityError,
    EmptyInputError,
    InsufficientHistoryError,
    InvalidPlanError,
    MalformedDataError,
    TemporalDataError,
)
from .system_failures import (
    ConfigurationError,
    MetricsCalculationError,
    SimulationError,
    SystemFailureError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "EmptyInputError",
    "InsufficientHistoryError",
    "InvalidPlanError",
    "MalformedDataError",
    "TemporalDataError",
    # System Failures
    "SystemFailureError",
    "ConfigurationError",
    "MetricsCalculationError",
    "SimulationError",
]
