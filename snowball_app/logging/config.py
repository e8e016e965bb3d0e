"""
Centralized logging configuration for the analytics core.

This module provides standardized logging configuration using structlog
for all components. The engines log through structlog so that callers
embedding the core can render events as console text or JSON.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_simulation_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound to the simulation subsystem.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for backtest and forecast runs
    """
    return get_logger(name).bind(subsystem="simulation")


def log_feature_snapshot(
    logger: FilteringBoundLogger,
    symbol: str,
    features: Any,
    bar_count: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a computed feature snapshot with standardized format.

    Args:
        logger: Structlog logger instance
        symbol: Symbol the features were computed for
        features: TechnicalFeatures snapshot
        bar_count: Number of bars in the input series
        context: Additional context data
    """
    bound_logger = logger.bind(
        symbol=symbol,
        bar_count=bar_count,
        trend_pattern=features.trend_pattern.value,
        rsi_level=features.rsi_level.value,
        macd_cross=features.macd_cross.value,
        price_vs_sr=features.price_vs_sr.value,
        current_price=features.current_price
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Technical features computed")


def log_simulation_run(
    logger: FilteringBoundLogger,
    symbol: str,
    mode: str,
    periods: int,
    total_contribution: float,
    final_value: float,
    seed: Optional[int] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a completed simulation with standardized format.

    Args:
        logger: Structlog logger instance
        symbol: Symbol the plan was simulated against
        mode: Simulation mode
        periods: Number of simulated periods
        total_contribution: Cash deployed over the run
        final_value: Portfolio value at the last period
        seed: Resampling seed, if any
        context: Additional context data
    """
    bound_logger = logger.bind(
        symbol=symbol,
        mode=mode,
        periods=periods,
        total_contribution=round(total_contribution, 2),
        final_value=round(final_value, 2),
        seed=seed
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Simulation completed")
