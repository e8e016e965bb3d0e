"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_indicator_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate moving average, RSI and MACD parameters."""
        errors = []

        for name in ("ma_short", "ma_mid", "ma_long", "rsi_period",
                     "macd_fast", "macd_slow", "macd_signal_period"):
            if name in params and not _is_positive_int(params[name]):
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive integer",
                    value=params[name]
                ))

        # Fast MACD leg must be shorter than the slow leg
        fast = params.get("macd_fast")
        slow = params.get("macd_slow")
        if _is_positive_int(fast) and _is_positive_int(slow) and fast >= slow:
            errors.append(ValidationError(
                field="macd_fast",
                message="Must be smaller than macd_slow",
                value=fast
            ))

        if "macd_signal_mode" in params:
            value = params["macd_signal_mode"]
            if value not in ("approximate", "ema"):
                errors.append(ValidationError(
                    field="macd_signal_mode",
                    message="Must be 'approximate' or 'ema'",
                    value=value
                ))

        if "macd_signal_factor" in params:
            value = params["macd_signal_factor"]
            if not _is_number(value) or value < 0 or value > 1:
                errors.append(ValidationError(
                    field="macd_signal_factor",
                    message="Must be a number between 0 and 1",
                    value=value
                ))

        if "legacy_zero_sentinel" in params:
            value = params["legacy_zero_sentinel"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="legacy_zero_sentinel",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_signal_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate categorical signal thresholds."""
        errors = []

        for name in ("rsi_overbought", "rsi_oversold"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0 or value > 100:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a number between 0 and 100",
                        value=value
                    ))

        overbought = params.get("rsi_overbought")
        oversold = params.get("rsi_oversold")
        if _is_number(overbought) and _is_number(oversold) and oversold >= overbought:
            errors.append(ValidationError(
                field="rsi_oversold",
                message="Must be smaller than rsi_overbought",
                value=oversold
            ))

        if "sr_lookback" in params and not _is_positive_int(params["sr_lookback"]):
            errors.append(ValidationError(
                field="sr_lookback",
                message="Must be a positive integer",
                value=params["sr_lookback"]
            ))

        if "breakout_threshold" in params:
            value = params["breakout_threshold"]
            if not _is_number(value) or value < 0 or value >= 1:
                errors.append(ValidationError(
                    field="breakout_threshold",
                    message="Must be a non-negative number below 1",
                    value=value
                ))

        if "breakout_reference" in params:
            value = params["breakout_reference"]
            if value not in ("prior", "current"):
                errors.append(ValidationError(
                    field="breakout_reference",
                    message="Must be 'prior' or 'current'",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_backtest_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate contribution and performance parameters."""
        errors = []

        for name in ("slippage_rate", "commission_rate", "tax_rate"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0 or value >= 1:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative number below 1",
                        value=value
                    ))

        if "dip_buy_strategy" in params and params["dip_buy_strategy"] not in ("none", "rsi"):
            errors.append(ValidationError(
                field="dip_buy_strategy",
                message="Must be 'none' or 'rsi'",
                value=params["dip_buy_strategy"]
            ))

        if "dip_buy_rsi_threshold" in params:
            value = params["dip_buy_rsi_threshold"]
            if not _is_number(value) or value < 0 or value > 100:
                errors.append(ValidationError(
                    field="dip_buy_rsi_threshold",
                    message="Must be a number between 0 and 100",
                    value=value
                ))

        if "dip_buy_multiplier" in params:
            value = params["dip_buy_multiplier"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="dip_buy_multiplier",
                    message="Must be a positive number",
                    value=value
                ))

        if "periods_per_year" in params and not _is_positive_int(params["periods_per_year"]):
            errors.append(ValidationError(
                field="periods_per_year",
                message="Must be a positive integer",
                value=params["periods_per_year"]
            ))

        if "risk_free_rate" in params and not _is_number(params["risk_free_rate"]):
            errors.append(ValidationError(
                field="risk_free_rate",
                message="Must be a number",
                value=params["risk_free_rate"]
            ))

        return errors

    @staticmethod
    def validate_forecast_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate bootstrap forecast parameters."""
        errors = []

        for name in ("default_horizon_years", "max_horizon_years"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive number",
                        value=value
                    ))

        if "monte_carlo_runs" in params and not _is_positive_int(params["monte_carlo_runs"]):
            errors.append(ValidationError(
                field="monte_carlo_runs",
                message="Must be a positive integer",
                value=params["monte_carlo_runs"]
            ))

        if "percentiles" in params:
            value = params["percentiles"]
            if (not isinstance(value, (list, tuple)) or not value or
                    not all(_is_number(p) and 0 <= p <= 1 for p in value)):
                errors.append(ValidationError(
                    field="percentiles",
                    message="Must be a non-empty list of numbers between 0 and 1",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_data_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate input handling parameters."""
        errors = []

        if "validate_input" in params and not isinstance(params["validate_input"], bool):
            errors.append(ValidationError(
                field="validate_input",
                message="Must be a boolean",
                value=params["validate_input"]
            ))

        if "min_simulation_points" in params:
            value = params["min_simulation_points"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 2:
                errors.append(ValidationError(
                    field="min_simulation_points",
                    message="Must be an integer of at least 2",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete configuration dictionary."""
        errors = []

        section_validators = {
            "indicators": ConfigValidator.validate_indicator_params,
            "signals": ConfigValidator.validate_signal_params,
            "backtest": ConfigValidator.validate_backtest_params,
            "forecast": ConfigValidator.validate_forecast_params,
            "data": ConfigValidator.validate_data_params,
        }

        for section, validator in section_validators.items():
            if section in config:
                section_errors = validator(config[section])
                for error in section_errors:
                    errors.append(ValidationError(
                        field=f"{section}.{error.field}",
                        message=error.message,
                        value=error.value
                    ))

        return errors
