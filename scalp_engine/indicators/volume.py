"""Volume-weighted indicators: session VWAP with bands and relative volume."""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np

from scalp_engine.indicators.indicators import _to_array, safe_div

VWAP_BAND_STD = 2.0
RVOL_SPIKE = 1.5


class VWAPPosition(str, Enum):
    ABOVE_UPPER = "ABOVE_UPPER"
    ABOVE_VWAP = "ABOVE_VWAP"
    AT_VWAP = "AT_VWAP"
    BELOW_VWAP = "BELOW_VWAP"
    BELOW_LOWER = "BELOW_LOWER"


@dataclass(frozen=True)
class VWAPResult:
    value: float = 0.0
    upper_band: float = 0.0
    lower_band: float = 0.0
    position: VWAPPosition = VWAPPosition.AT_VWAP

    def distance(self, price: float) -> float:
        """Relative distance of ``price`` from VWAP (0 when VWAP is 0)."""
        return safe_div(abs(price - self.value), self.value)

    def is_touched(self, price: float, tolerance: float) -> bool:
        return self.value > 0 and self.distance(price) < tolerance


def vwap(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
) -> VWAPResult:
    """
    Calculate VWAP over the whole supplied window.

    VWAP = sum(typical price * volume) / sum(volume), falling back to the
    last close when there is no volume. The bands sit two population
    standard deviations of typical price (measured around VWAP) away.
    """
    c = _to_array(closes)
    if len(c) == 0:
        return VWAPResult()

    typical = (_to_array(highs) + _to_array(lows) + c) / 3
    vol = _to_array(volumes)
    total_volume = float(vol.sum())
    value = safe_div(float((typical * vol).sum()), total_volume, default=float(c[-1]))

    std = float(np.sqrt(np.mean((typical - value) ** 2)))
    upper = value + VWAP_BAND_STD * std
    lower = value - VWAP_BAND_STD * std

    price = float(c[-1])
    if price > upper:
        position = VWAPPosition.ABOVE_UPPER
    elif price < lower:
        position = VWAPPosition.BELOW_LOWER
    elif price > value:
        position = VWAPPosition.ABOVE_VWAP
    elif price < value:
        position = VWAPPosition.BELOW_VWAP
    else:
        position = VWAPPosition.AT_VWAP

    return VWAPResult(value=value, upper_band=upper, lower_band=lower, position=position)


@dataclass(frozen=True)
class RVOLResult:
    current: float = 1.0
    avg_volume: float = 0.0

    @property
    def is_spike(self) -> bool:
        return self.current > RVOL_SPIKE


def rvol(volumes: Sequence[float], lookback: int = 20) -> RVOLResult:
    """
    Calculate relative volume: the last bar's volume over the mean volume of
    the ``lookback`` bars before it (the current bar is excluded).

    Returns 1.0 with fewer than ``lookback + 1`` bars or a zero average.
    """
    vol = _to_array(volumes)
    if lookback <= 0 or len(vol) < lookback + 1:
        return RVOLResult()

    avg_volume = float(vol[-lookback - 1:-1].mean())
    return RVOLResult(
        current=safe_div(float(vol[-1]), avg_volume, default=1.0),
        avg_volume=avg_volume,
    )
