"""Default configuration parameters for the feature and simulation engines."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class IndicatorParams:
    """Moving average, RSI and MACD parameters."""
    ma_short: int = 5
    ma_mid: int = 20
    ma_long: int = 60
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal_period: int = 9

    # "approximate" keeps signal = 0.9 * MACD; "ema" uses a true EMA of MACD
    macd_signal_mode: str = "approximate"
    macd_signal_factor: float = 0.9

    # Report 0 instead of None when a window is not filled
    legacy_zero_sentinel: bool = False


@dataclass(frozen=True)
class SignalParams:
    """Categorical signal thresholds."""
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    sr_lookback: int = 20
    breakout_threshold: float = 0.02                 # 2% past the level

    # "current": levels from the window ending at the current bar
    # "prior": levels from the bars before the current one, which are then
    # also the reported support and resistance
    breakout_reference: str = "current"


@dataclass(frozen=True)
class BacktestParams:
    """Contribution and performance parameters shared by all simulation modes."""
    slippage_rate: float = 0.002                     # Buy price markup
    periods_per_year: int = 52
    risk_free_rate: float = 0.02

    # Selling costs deducted from the net value
    commission_rate: float = 0.001425
    tax_rate: float = 0.003

    # "none" or "rsi": scale contributions while RSI is below the threshold
    dip_buy_strategy: str = "none"
    dip_buy_rsi_threshold: float = 30.0
    dip_buy_multiplier: float = 2.0


@dataclass(frozen=True)
class ForecastParams:
    """Bootstrap forecast parameters."""
    default_horizon_years: float = 10.0
    monte_carlo_runs: int = 1000
    max_horizon_years: float = 50.0
    percentiles: tuple = field(default=(0.10, 0.25, 0.50, 0.75, 0.90))


@dataclass(frozen=True)
class DataParams:
    """Input handling parameters."""
    validate_input: bool = True
    min_simulation_points: int = 2


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    indicators: IndicatorParams
    signals: SignalParams
    backtest: BacktestParams
    forecast: ForecastParams
    data: DataParams


SECTION_TYPES = {
    "indicators": IndicatorParams,
    "signals": SignalParams,
    "backtest": BacktestParams,
    "forecast": ForecastParams,
    "data": DataParams,
}


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        indicators=IndicatorParams(),
        signals=SignalParams(),
        backtest=BacktestParams(),
        forecast=ForecastParams(),
        data=DataParams(),
    )


def config_from_dict(values: dict) -> DefaultConfig:
    """Build a DefaultConfig from a nested dict, ignoring unknown keys."""
    sections = {}
    for name, section_type in SECTION_TYPES.items():
        raw = values.get(name) or {}
        known = {k: v for k, v in raw.items() if k in section_type.__dataclass_fields__}
        if "percentiles" in known:
            known["percentiles"] = tuple(known["percentiles"])
        sections[name] = section_type(**known)
    return DefaultConfig(**sections)
