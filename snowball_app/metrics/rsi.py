"""RSI (Relative Strength Index) calculation with Wilder smoothing"""

from collections.abc import Sequence

NEUTRAL_RSI = 50.0


def _rsi(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def calculate_rsi_series(closes: Sequence[float], period: int = 14) -> list[float]:
    """
    RSI at every close

    The first average gain/loss is the plain mean over the first 'period'
    changes; later changes are smoothed as avg = (avg * (period - 1) + x) / period.
    Closes before the first full window report the neutral 50.

    Args:
        closes: Closing prices in chronological order
        period: RSI period (default 14)

    Returns:
        One RSI value per close
    """
    values = [NEUTRAL_RSI] * len(closes)
    if period <= 0 or len(closes) < period + 1:
        return values

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = closes[i] - closes[i - 1]
        if change > 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period
    values[period] = _rsi(avg_gain, avg_loss)

    for i in range(period + 1, len(closes)):
        change = closes[i] - closes[i - 1]
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        values[i] = _rsi(avg_gain, avg_loss)

    return values


def calculate_rsi(closes: Sequence[float], period: int = 14) -> float:
    """
    Calculate RSI for the latest close

    Returns:
        RSI in [0, 100]; 50 with fewer than period + 1 closes,
        100 when the average loss is exactly zero
    """
    if not closes:
        return NEUTRAL_RSI
    return calculate_rsi_series(closes, period)[-1]
