"""Price levels: floor-trader pivots and support/resistance proximity."""

from dataclasses import dataclass
from enum import Enum

from scalp_engine.models.candle import Candle


@dataclass(frozen=True)
class PivotPoints:
    pivot: float = 0.0
    r1: float = 0.0
    r2: float = 0.0
    r3: float = 0.0
    s1: float = 0.0
    s2: float = 0.0
    s3: float = 0.0

    def levels(self) -> dict[str, float]:
        """All levels keyed by name, ordered from S3 up to R3."""
        return {
            "S3": self.s3,
            "S2": self.s2,
            "S1": self.s1,
            "P": self.pivot,
            "R1": self.r1,
            "R2": self.r2,
            "R3": self.r3,
        }


def pivot_points(candle: Candle | None) -> PivotPoints:
    """
    Classic floor-trader pivots from a single bar.

    P = (H + L + C) / 3, R1 = 2P - L, S1 = 2P - H, R2 = P + (H - L),
    S2 = P - (H - L), R3 = H + 2(P - L), S3 = L - 2(H - P).
    All levels are 0 when there is no bar.
    """
    if candle is None:
        return PivotPoints()

    high, low, close = candle.high, candle.low, candle.close
    pivot = (high + low + close) / 3
    return PivotPoints(
        pivot=pivot,
        r1=2 * pivot - low,
        s1=2 * pivot - high,
        r2=pivot + (high - low),
        s2=pivot - (high - low),
        r3=high + 2 * (pivot - low),
        s3=low - 2 * (high - pivot),
    )


def near_level(price: float, level: float, tolerance: float) -> bool:
    """Check if ``price`` is within ``tolerance`` (a ratio) of a positive level."""
    if level <= 0:
        return False
    return level * (1 - tolerance) <= price <= level * (1 + tolerance)


class BounceSignal(str, Enum):
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"
    NONE = "NONE"


@dataclass(frozen=True)
class LevelProximity:
    at_support: bool
    at_resistance: bool
    level: str
    bounce_signal: BounceSignal
    distance: float


def support_resistance(
    price: float,
    pivots: PivotPoints,
    rsi_value: float,
    threshold: float = 5.0,
) -> LevelProximity:
    """
    Find the pivot level nearest to ``price`` and grade a bounce from it.

    ``threshold`` is an absolute price distance. Support with RSI < 35 is a
    STRONG_BUY and < 45 a BUY; resistance with RSI > 65 is a STRONG_SELL and
    > 55 a SELL.
    """
    name, value = min(pivots.levels().items(), key=lambda item: abs(price - item[1]))
    distance = abs(price - value)

    at_support = name.startswith("S") and distance <= threshold
    at_resistance = name.startswith("R") and distance <= threshold

    signal = BounceSignal.NONE
    if at_support and rsi_value < 35:
        signal = BounceSignal.STRONG_BUY
    elif at_support and rsi_value < 45:
        signal = BounceSignal.BUY
    elif at_resistance and rsi_value > 65:
        signal = BounceSignal.STRONG_SELL
    elif at_resistance and rsi_value > 55:
        signal = BounceSignal.SELL

    return LevelProximity(
        at_support=at_support,
        at_resistance=at_resistance,
        level=name,
        bounce_signal=signal,
        distance=distance,
    )
