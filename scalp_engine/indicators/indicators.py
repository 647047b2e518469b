"""Numeric primitives shared by every indicator.

All functions are pure and NumPy-backed. Series are returned trimmed to
their valid region: an N-period transform over M values yields M - N + 1
values, or an empty list when M < N. No NaN padding is ever produced.
"""

from typing import Sequence

import numpy as np

from scalp_engine.models.candle import Candle


# =============================================================================
# Array helpers
# =============================================================================

def _to_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def candle_arrays(
    candles: Sequence[Candle],
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Split candles into (opens, highs, lows, closes, volumes) arrays."""
    n = len(candles)
    opens = np.fromiter((c.open for c in candles), dtype=np.float64, count=n)
    highs = np.fromiter((c.high for c in candles), dtype=np.float64, count=n)
    lows = np.fromiter((c.low for c in candles), dtype=np.float64, count=n)
    closes = np.fromiter((c.close for c in candles), dtype=np.float64, count=n)
    volumes = np.fromiter((c.volume for c in candles), dtype=np.float64, count=n)
    return opens, highs, lows, closes, volumes


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` for a zero or non-finite result."""
    if denominator == 0:
        return default
    result = numerator / denominator
    if not np.isfinite(result):
        return default
    return float(result)


def latest(series: Sequence[float], default: float = 0.0) -> float:
    """Last value of a series, or ``default`` when it is empty."""
    return float(series[-1]) if len(series) > 0 else default


def previous(series: Sequence[float], default: float = 0.0) -> float:
    """Second-to-last value of a series, or ``default`` when too short."""
    return float(series[-2]) if len(series) > 1 else default


# =============================================================================
# Moving averages and rolling extremes
# =============================================================================

def sma(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of values
        period: SMA period

    Returns:
        List of SMA values, one per complete window
    """
    arr = _to_array(values)
    if period <= 0 or len(arr) < period:
        return []

    result = np.empty(len(arr) - period + 1)
    for i in range(len(result)):
        result[i] = np.mean(arr[i : i + period])

    return result.tolist()


def ema(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Exponential Moving Average.

    The first value is the SMA of the first ``period`` values; each later
    value applies the 2 / (period + 1) multiplier.

    Args:
        values: Sequence of values
        period: EMA period

    Returns:
        List of EMA values starting at index ``period - 1`` of the input
    """
    arr = _to_array(values)
    if period <= 0 or len(arr) < period:
        return []

    multiplier = 2.0 / (period + 1)
    result = np.empty(len(arr) - period + 1)
    result[0] = np.mean(arr[:period])

    for i in range(1, len(result)):
        result[i] = (arr[i + period - 1] - result[i - 1]) * multiplier + result[i - 1]

    return result.tolist()


def highest(values: Sequence[float], period: int) -> list[float]:
    """Calculate the rolling maximum over ``period`` values."""
    arr = _to_array(values)
    if period <= 0 or len(arr) < period:
        return []

    result = np.empty(len(arr) - period + 1)
    for i in range(len(result)):
        result[i] = np.max(arr[i : i + period])

    return result.tolist()


def lowest(values: Sequence[float], period: int) -> list[float]:
    """Calculate the rolling minimum over ``period`` values."""
    arr = _to_array(values)
    if period <= 0 or len(arr) < period:
        return []

    result = np.empty(len(arr) - period + 1)
    for i in range(len(result)):
        result[i] = np.min(arr[i : i + period])

    return result.tolist()


def rolling_mean(values: Sequence[float], period: int) -> list[float]:
    """Running-sum smoothing: a sliding sum divided by ``period``.

    Numerically the same as :func:`sma` but computed incrementally, which is
    how the directional-movement terms of ADX are smoothed.
    """
    arr = _to_array(values)
    if period <= 0 or len(arr) < period:
        return []

    result = np.empty(len(arr) - period + 1)
    running = float(np.sum(arr[:period]))
    result[0] = running
    for i in range(period, len(arr)):
        running = running - arr[i - period] + arr[i]
        result[i - period + 1] = running

    return (result / period).tolist()


# =============================================================================
# Range
# =============================================================================

def true_range(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
) -> list[float]:
    """
    Calculate True Range.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))
    The first bar has no previous close and uses high - low.

    Returns:
        List of True Range values (same length as input)
    """
    h = _to_array(highs)
    l = _to_array(lows)
    c = _to_array(closes)
    n = len(h)
    if n == 0:
        return []

    tr = np.empty(n)
    tr[0] = h[0] - l[0]
    if n > 1:
        prev_close = c[:-1]
        tr[1:] = np.maximum.reduce(
            [h[1:] - l[1:], np.abs(h[1:] - prev_close), np.abs(l[1:] - prev_close)]
        )

    return tr.tolist()


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> list[float]:
    """
    Calculate Average True Range (ATR).

    EMA of the true range measured from the second bar onwards, so the
    result is aligned to bars ``period .. n-1``.

    Returns:
        List of ATR values (length n - period, or empty)
    """
    tr = true_range(highs, lows, closes)
    return ema(tr[1:], period)
