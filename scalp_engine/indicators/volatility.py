"""Volatility indicators: Bollinger Bands and ATR slope."""

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from scalp_engine.indicators.indicators import _to_array, atr, latest, safe_div

# Close within 2% of a band counts as the danger zone
BOLLINGER_DANGER_MARGIN = 0.02


@dataclass(frozen=True)
class BollingerResult:
    upper: list[float] = field(default_factory=list)
    middle: list[float] = field(default_factory=list)
    lower: list[float] = field(default_factory=list)
    danger: list[bool] = field(default_factory=list)

    def width(self, bars_ago: int = 0) -> float:
        """Absolute band width ``bars_ago`` bars before the latest one."""
        index = len(self.upper) - 1 - bars_ago
        if bars_ago < 0 or index < 0:
            return 0.0
        return self.upper[index] - self.lower[index]

    @property
    def bandwidth(self) -> float:
        """Latest band width as a fraction of the middle band."""
        return safe_div(self.width(), latest(self.middle))

    def is_expanding(self, lag: int, ratio: float) -> bool:
        """Width now exceeds ``ratio`` times the width ``lag`` bars earlier."""
        if len(self.upper) <= lag:
            return False
        return self.width() > self.width(lag) * ratio


def bollinger_bands(
    closes: Sequence[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerResult:
    """
    Calculate Bollinger Bands: SMA +/- ``std_dev`` population standard
    deviations over a trailing ``period``.

    Returns:
        BollingerResult with one value per complete window
    """
    arr = _to_array(closes)
    if period <= 0 or len(arr) < period:
        return BollingerResult()

    windows = np.lib.stride_tricks.sliding_window_view(arr, period)
    middle = windows.mean(axis=1)
    std = windows.std(axis=1)
    upper = middle + std_dev * std
    lower = middle - std_dev * std

    current = arr[period - 1:]
    danger = (current >= upper * (1 - BOLLINGER_DANGER_MARGIN)) | (
        current <= lower * (1 + BOLLINGER_DANGER_MARGIN)
    )

    return BollingerResult(
        upper=upper.tolist(),
        middle=middle.tolist(),
        lower=lower.tolist(),
        danger=danger.tolist(),
    )


@dataclass(frozen=True)
class ATRSlope:
    current: float = 0.0
    slope: float = 0.0
    is_expanding: bool = False
    expansion_rate: float = 0.0  # percent of the oldest ATR in the window


def atr_slope(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
    slope_lookback: int = 5,
) -> ATRSlope:
    """Measure how the ATR changed over its last ``slope_lookback`` values."""
    values = atr(highs, lows, closes, period)
    current = latest(values)
    if slope_lookback < 2 or len(values) < slope_lookback + 1:
        return ATRSlope(current=current)

    recent = values[-slope_lookback:]
    oldest, newest = recent[0], recent[-1]
    slope = newest - oldest
    return ATRSlope(
        current=current,
        slope=slope,
        is_expanding=slope > 0,
        expansion_rate=safe_div(slope, oldest) * 100,
    )
