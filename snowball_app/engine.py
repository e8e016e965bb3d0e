"""
Main analytics engine coordinator.

Resolves per-symbol configuration, parses and validates provider input,
runs the feature and simulation engines and logs every request.

Market Data → Parsing/Validation → Features | Backtest | Forecast
"""

import threading
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

import numpy as np
import structlog

from .backtest.forecast import (
    run_fixed_rate_projection,
    run_forecast_distribution,
    run_forecast_simulation,
)
from .backtest.historical import run_historical_backtest
from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .data.models import InvestmentPlan, PriceBar
from .data.parsers import parse_price_series
from .data.plan_normalizer import PlanNormalizer
from .data.validators import SeriesValidator
from .errors import (
    ConfigurationError,
    DataQualityError,
    MetricsCalculationError,
    SimulationError,
    SystemFailureError,
)
from .logging.config import get_simulation_logger, log_feature_snapshot, log_simulation_run
from .metrics.calculator import FeatureCalculator
from .models.features import TechnicalFeatures, technical_features_to_json
from .models.simulation import ForecastDistribution, SimulationResult

logger = structlog.get_logger(__name__)
simulation_logger = get_simulation_logger(__name__)

SeriesInput = Union[str, bytes, Mapping[str, Any], Sequence[PriceBar], Sequence[dict[str, Any]]]
PlanInput = Union[InvestmentPlan, dict[str, Any]]


@dataclass(frozen=True)
class BatchOutcome:
    """Result of one symbol in a batch feature computation"""
    symbol: str
    features: Optional[TechnicalFeatures] = None
    error: Optional[Exception] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.features is not None


class SnowballEngine:
    """
    Main coordinator for technical analysis and plan simulation.

    The engine keeps no per-request state, so one instance can serve
    concurrent callers.
    """

    def __init__(self, config_dir: Optional[str] = None) -> None:
        """Initialize the engine with an optional configuration directory."""
        self.logger = logger
        self.simulation_logger = simulation_logger

        self.config_loader = ConfigLoader.create(config_dir)
        self.plan_normalizer = PlanNormalizer()
        self.validator = SeriesValidator()

        self.logger.info("Snowball engine initialized", config_dir=str(self.config_loader.config_dir))

    def get_config(self, symbol: str, overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
        """Resolve defaults, symbol overrides and per-call overrides."""
        try:
            return self.config_loader.build_config(symbol, overrides)
        except ConfigurationError as e:
            self.logger.error("Configuration validation failed", symbol=symbol, errors=str(e))
            raise

    def analyze(
        self,
        symbol: str,
        series: SeriesInput,
        overrides: Optional[dict[str, Any]] = None,
    ) -> TechnicalFeatures:
        """
        Compute technical features for the latest bar of a symbol's history.

        Raises:
            EmptyInputError: If the history is empty
            MalformedDataError, TemporalDataError: If validation is on and fails
            MetricsCalculationError: If the calculation fails
        """
        config = self.get_config(symbol, overrides)

        try:
            bars = self._prepare_series(series, config)
            features = FeatureCalculator(config).compute_features(bars)
        except DataQualityError as e:
            self.logger.warning("Feature computation rejected input", symbol=symbol,
                                error_type=type(e).__name__, error=str(e))
            raise
        except SystemFailureError as e:
            self.logger.error("Feature computation failed", symbol=symbol,
                              error_type=type(e).__name__, error=str(e))
            raise
        except Exception as e:
            self.logger.error("Unexpected error computing features", symbol=symbol, error=str(e))
            raise MetricsCalculationError(
                f"Unexpected error computing features: {e}",
                metric_name="unknown",
                context={"symbol": symbol}
            ) from e

        log_feature_snapshot(self.logger, symbol, features, len(bars))
        return features

    def analyze_for_narrative(
        self,
        symbol: str,
        series: SeriesInput,
        overrides: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Compute features and return the narrative generator's JSON document."""
        return technical_features_to_json(self.analyze(symbol, series, overrides))

    def analyze_batch(
        self,
        series_by_symbol: Mapping[str, SeriesInput],
        overrides: Optional[dict[str, Any]] = None,
        max_workers: int = 4,
        cancel_event: Optional[threading.Event] = None,
    ) -> dict[str, BatchOutcome]:
        """
        Compute features for many symbols in parallel.

        Failures are captured per symbol. Setting cancel_event stops
        symbols that have not started yet; running computations finish.
        """
        def run(symbol: str, series: SeriesInput) -> BatchOutcome:
            if cancel_event is not None and cancel_event.is_set():
                return BatchOutcome(symbol=symbol, cancelled=True)
            try:
                return BatchOutcome(symbol=symbol, features=self.analyze(symbol, series, overrides))
            except (DataQualityError, SystemFailureError) as e:
                return BatchOutcome(symbol=symbol, error=e)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                symbol: executor.submit(run, symbol, series)
                for symbol, series in series_by_symbol.items()
            }
            outcomes = {symbol: future.result() for symbol, future in futures.items()}

        self.logger.info(
            "Batch feature computation finished",
            symbols=len(outcomes),
            succeeded=sum(1 for o in outcomes.values() if o.ok),
            failed=sum(1 for o in outcomes.values() if o.error is not None),
            cancelled=sum(1 for o in outcomes.values() if o.cancelled)
        )
        return outcomes

    def backtest(
        self,
        symbol: str,
        series: SeriesInput,
        plan: PlanInput,
        overrides: Optional[dict[str, Any]] = None,
    ) -> SimulationResult:
        """Replay a plan against the symbol's historical prices."""
        config = self.get_config(symbol, overrides)
        result = self._simulate(
            symbol, "historical",
            lambda: run_historical_backtest(
                self._prepare_series(series, config), self._prepare_plan(plan), config
            ),
        )
        self._log_result(symbol, result)
        return result

    def forecast(
        self,
        symbol: str,
        series: SeriesInput,
        plan: PlanInput,
        horizon_years: Optional[float] = None,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> SimulationResult:
        """Simulate a plan on one bootstrap-resampled future path."""
        config = self.get_config(symbol, overrides)
        horizon = horizon_years if horizon_years is not None else config.forecast.default_horizon_years
        result = self._simulate(
            symbol, "forecast",
            lambda: run_forecast_simulation(
                self._prepare_series(series, config), self._prepare_plan(plan), horizon,
                seed=seed, rng=rng, config=config,
            ),
        )
        self._log_result(symbol, result)
        return result

    def forecast_distribution(
        self,
        symbol: str,
        series: SeriesInput,
        plan: PlanInput,
        horizon_years: Optional[float] = None,
        runs: Optional[int] = None,
        seed: Optional[int] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> ForecastDistribution:
        """Run Monte-Carlo bootstrap paths and return percentile bands."""
        config = self.get_config(symbol, overrides)
        horizon = horizon_years if horizon_years is not None else config.forecast.default_horizon_years
        distribution = self._simulate(
            symbol, "forecast_distribution",
            lambda: run_forecast_distribution(
                self._prepare_series(series, config), self._prepare_plan(plan), horizon,
                runs=runs, seed=seed, config=config,
            ),
        )
        self.simulation_logger.info(
            "Forecast distribution completed",
            symbol=symbol,
            runs=distribution.summary.runs,
            seed=distribution.seed,
            median=round(distribution.summary.median, 2)
        )
        return distribution

    def project(
        self,
        plan: PlanInput,
        horizon_years: float,
        annual_return: float,
        start_price: float = 100.0,
        start_date: Optional[date] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> SimulationResult:
        """Project a plan with a constant annual return."""
        config = self.get_config("*", overrides)
        result = self._simulate(
            "*", "fixed_rate",
            lambda: run_fixed_rate_projection(
                self._prepare_plan(plan), horizon_years, annual_return,
                start_price=start_price, start_date=start_date, config=config,
            ),
        )
        self._log_result("*", result)
        return result

    def _simulate(self, symbol: str, mode: str, run):
        """Run a simulation callable with standard error logging."""
        try:
            return run()
        except DataQualityError as e:
            self.simulation_logger.warning("Simulation rejected input", symbol=symbol, mode=mode,
                                           error_type=type(e).__name__, error=str(e))
            raise
        except SystemFailureError as e:
            self.simulation_logger.error("Simulation failed", symbol=symbol, mode=mode,
                                         error_type=type(e).__name__, error=str(e))
            raise
        except Exception as e:
            self.simulation_logger.error("Unexpected simulation error", symbol=symbol, mode=mode,
                                         error=str(e))
            raise SimulationError(f"Unexpected simulation error: {e}", mode=mode,
                                  context={"symbol": symbol}) from e

    def _log_result(self, symbol: str, result: SimulationResult) -> None:
        log_simulation_run(
            self.simulation_logger,
            symbol=symbol,
            mode=result.mode,
            periods=len(result),
            total_contribution=result.summary.total_contribution,
            final_value=result.summary.final_value,
            seed=result.seed,
        )

    def _prepare_series(self, series: SeriesInput, config: DefaultConfig) -> list[PriceBar]:
        """Parse raw provider payloads and validate bars when configured."""
        validate = config.data.validate_input
        if isinstance(series, (str, bytes, Mapping)):
            return parse_price_series(series, validate=validate)

        bars = list(series)
        if bars and not isinstance(bars[0], PriceBar):
            return parse_price_series(bars, validate=validate)

        if validate:
            self.validator.validate_series(bars)
        return bars

    def _prepare_plan(self, plan: PlanInput) -> InvestmentPlan:
        if isinstance(plan, InvestmentPlan):
            return plan
        return self.plan_normalizer.normalize_plan(plan)
