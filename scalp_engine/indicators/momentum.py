"""Momentum indicators: RSI and RSI/price divergence."""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from scalp_engine.indicators.indicators import _to_array

RSI_NEUTRAL = 50.0


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def rsi(closes: Sequence[float], period: int = 14) -> list[float]:
    """
    Calculate Relative Strength Index with Wilder smoothing.

    The first average gain/loss is the simple mean of the first ``period``
    close-to-close changes; later values use
    ``avg = (avg * (period - 1) + current) / period``.

    Args:
        closes: Sequence of close prices
        period: RSI period

    Returns:
        List of RSI values aligned to bars ``period .. n-1``; empty when
        ``len(closes) <= period``
    """
    arr = _to_array(closes)
    if period <= 0 or len(arr) <= period:
        return []

    changes = np.diff(arr)
    gains = np.where(changes > 0, changes, 0.0)
    losses = np.where(changes < 0, -changes, 0.0)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))
    result = [_rsi_value(avg_gain, avg_loss)]

    for i in range(period, len(changes)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result.append(_rsi_value(avg_gain, avg_loss))

    return result


@dataclass(frozen=True)
class Divergence:
    bullish: bool = False
    bearish: bool = False


def rsi_divergence(
    closes: Sequence[float],
    rsi_values: Sequence[float],
    lookback: int = 10,
) -> Divergence:
    """Compare the two halves of the last ``lookback`` closes and RSI values.

    Bullish: price makes a lower low while RSI makes a higher low.
    Bearish: price makes a higher high while RSI makes a lower high.
    """
    if lookback < 2 or len(closes) < lookback or len(rsi_values) < lookback:
        return Divergence()

    prices = _to_array(closes[-lookback:])
    oscillator = _to_array(rsi_values[-lookback:])
    half = lookback // 2

    bullish = (
        prices[half:].min() < prices[:half].min()
        and oscillator[half:].min() > oscillator[:half].min()
    )
    bearish = (
        prices[half:].max() > prices[:half].max()
        and oscillator[half:].max() < oscillator[:half].max()
    )
    return Divergence(bullish=bool(bullish), bearish=bool(bearish))
