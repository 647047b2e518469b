"""Trend indicators: ADX with directional indicators, SuperTrend, EWO, MACD,
Ichimoku cloud and Heikin-Ashi candles.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Sequence

import numpy as np

from scalp_engine.indicators.indicators import (
    _to_array,
    atr,
    ema,
    highest,
    latest,
    lowest,
    previous,
    rolling_mean,
    true_range,
)


class CrossSignal(str, Enum):
    """Signal emitted on the bar where a line crosses its reference."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class TrendDirection(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class TrendStrength(str, Enum):
    VERY_STRONG = "VERY_STRONG"
    STRONG = "STRONG"
    MODERATE = "MODERATE"
    WEAK = "WEAK"
    NO_TREND = "NO_TREND"


# =============================================================================
# ADX / DMI
# =============================================================================

DI_DIRECTION_MARGIN = 5.0

# (threshold, bucket) pairs, checked from the top down
_STRENGTH_BUCKETS = (
    (50.0, TrendStrength.VERY_STRONG),
    (40.0, TrendStrength.STRONG),
    (25.0, TrendStrength.MODERATE),
    (15.0, TrendStrength.WEAK),
)


def trend_strength(adx_value: float) -> TrendStrength:
    """Bucket an ADX reading into a trend strength."""
    for threshold, bucket in _STRENGTH_BUCKETS:
        if adx_value >= threshold:
            return bucket
    return TrendStrength.NO_TREND


def trend_direction(plus_di: float, minus_di: float) -> TrendDirection:
    """Direction from +DI/-DI, requiring a margin of 5 points."""
    if plus_di > minus_di + DI_DIRECTION_MARGIN:
        return TrendDirection.BULLISH
    if minus_di > plus_di + DI_DIRECTION_MARGIN:
        return TrendDirection.BEARISH
    return TrendDirection.NEUTRAL


@dataclass(frozen=True)
class ADXResult:
    """ADX series plus the directional indicators of the latest bar."""

    adx: list[float] = field(default_factory=list)
    plus_di: list[float] = field(default_factory=list)
    minus_di: list[float] = field(default_factory=list)

    @property
    def current(self) -> float:
        return latest(self.adx)

    @property
    def previous(self) -> float:
        """Previous ADX value; the current one when there is no history."""
        return previous(self.adx, default=self.current)

    @property
    def rising(self) -> bool:
        return self.current > self.previous

    @property
    def falling(self) -> bool:
        return self.current < self.previous

    @property
    def direction(self) -> TrendDirection:
        return trend_direction(latest(self.plus_di), latest(self.minus_di))

    @property
    def strength(self) -> TrendStrength:
        return trend_strength(self.current)

    @property
    def description(self) -> str:
        if not self.plus_di:
            return "Insufficient data"
        value = f"ADX at {self.current:.0f}"
        if self.strength == TrendStrength.NO_TREND:
            return f"{value} - No clear trend, avoid trading"
        if self.direction == TrendDirection.NEUTRAL:
            return f"{value} - {self.strength.value} but directionless"
        return f"{value} - {self.strength.value} {self.direction.value.lower()} trend"


def _percent_ratio(numerator: np.ndarray, denominator: np.ndarray) -> np.ndarray:
    """100 * numerator / denominator with 0 wherever the denominator is 0."""
    out = np.zeros_like(numerator)
    np.divide(numerator, denominator, out=out, where=denominator != 0)
    return out * 100.0


def adx(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> ADXResult:
    """
    Calculate ADX with +DI/-DI.

    True range and directional movement start at the second bar and are
    smoothed with a running-sum mean (not an EMA). ADX is the running-sum
    mean of DX, so it needs ``2 * period`` bars.

    Returns:
        ADXResult; DI series align to bars ``period .. n-1`` and the ADX
        series to bars ``2 * period - 1 .. n-1``
    """
    h = _to_array(highs)
    l = _to_array(lows)
    if period <= 0 or len(h) < period + 1:
        return ADXResult()

    tr = _to_array(true_range(highs, lows, closes)[1:])
    up_move = h[1:] - h[:-1]
    down_move = l[:-1] - l[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)

    smoothed_tr = _to_array(rolling_mean(tr, period))
    plus_di = _percent_ratio(_to_array(rolling_mean(plus_dm, period)), smoothed_tr)
    minus_di = _percent_ratio(_to_array(rolling_mean(minus_dm, period)), smoothed_tr)

    dx = _percent_ratio(np.abs(plus_di - minus_di), plus_di + minus_di)

    return ADXResult(
        adx=rolling_mean(dx, period),
        plus_di=plus_di.tolist(),
        minus_di=minus_di.tolist(),
    )


# =============================================================================
# SuperTrend
# =============================================================================

@dataclass(frozen=True)
class SuperTrendResult:
    """Trend is +1 (green) or -1 (red) per bar."""

    trend: list[int] = field(default_factory=list)
    signal: list[CrossSignal] = field(default_factory=list)
    upper_band: list[float] = field(default_factory=list)
    lower_band: list[float] = field(default_factory=list)

    @property
    def current(self) -> int:
        return self.trend[-1] if self.trend else 0

    @property
    def current_signal(self) -> CrossSignal:
        return self.signal[-1] if self.signal else CrossSignal.HOLD

    def held(self, direction: int, bars: int) -> bool:
        """True when the last ``bars`` bars all share ``direction``."""
        if bars <= 0 or len(self.trend) < bars:
            return False
        return all(t == direction for t in self.trend[-bars:])


def supertrend(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 7,
    multiplier: float = 2.5,
) -> SuperTrendResult:
    """
    Calculate SuperTrend.

    Bands are ``hl2 +/- multiplier * ATR``. The upper band only moves down
    unless the previous close broke above it; the lower band only moves up
    unless the previous close broke below it. The trend flips up when the
    close exceeds the upper band and down when it falls below the lower
    band, otherwise it carries. Bars before ATR is available use ATR 0.

    Returns:
        SuperTrendResult with one entry per input bar
    """
    h = _to_array(highs)
    l = _to_array(lows)
    c = _to_array(closes)
    n = len(c)
    if n == 0:
        return SuperTrendResult()

    atr_values = atr(highs, lows, closes, period)
    aligned_atr = np.zeros(n)
    if atr_values:
        aligned_atr[n - len(atr_values):] = atr_values

    hl2 = (h + l) / 2
    basic_upper = hl2 + multiplier * aligned_atr
    basic_lower = hl2 - multiplier * aligned_atr

    trend: list[int] = []
    signal: list[CrossSignal] = []
    upper: list[float] = []
    lower: list[float] = []

    prev_trend = 1
    for i in range(n):
        if i == 0:
            final_upper = float(basic_upper[0])
            final_lower = float(basic_lower[0])
        else:
            prev_upper, prev_lower, prev_close = upper[-1], lower[-1], c[i - 1]
            final_upper = (
                float(basic_upper[i])
                if basic_upper[i] < prev_upper or prev_close > prev_upper
                else prev_upper
            )
            final_lower = (
                float(basic_lower[i])
                if basic_lower[i] > prev_lower or prev_close < prev_lower
                else prev_lower
            )

        upper.append(final_upper)
        lower.append(final_lower)

        if c[i] > final_upper:
            signal.append(CrossSignal.BUY if prev_trend == -1 else CrossSignal.HOLD)
            prev_trend = 1
        elif c[i] < final_lower:
            signal.append(CrossSignal.SELL if prev_trend == 1 else CrossSignal.HOLD)
            prev_trend = -1
        else:
            signal.append(CrossSignal.HOLD)
        trend.append(prev_trend)

    return SuperTrendResult(trend=trend, signal=signal, upper_band=upper, lower_band=lower)


# =============================================================================
# Elliott Wave Oscillator / MACD
# =============================================================================

def _zero_cross_signals(values: Sequence[float]) -> list[CrossSignal]:
    signals = [CrossSignal.HOLD] if len(values) else []
    for i in range(1, len(values)):
        if values[i] > 0 and values[i - 1] <= 0:
            signals.append(CrossSignal.BUY)
        elif values[i] < 0 and values[i - 1] >= 0:
            signals.append(CrossSignal.SELL)
        else:
            signals.append(CrossSignal.HOLD)
    return signals


@dataclass(frozen=True)
class EWOResult:
    values: list[float] = field(default_factory=list)
    signal: list[CrossSignal] = field(default_factory=list)

    @property
    def current(self) -> float:
        return latest(self.values)

    @property
    def previous(self) -> float:
        return previous(self.values)

    @property
    def rising(self) -> bool:
        return self.current > self.previous

    @property
    def falling(self) -> bool:
        return self.current < self.previous


def ewo(closes: Sequence[float], short_period: int = 5, long_period: int = 35) -> EWOResult:
    """
    Calculate the Elliott Wave Oscillator: EMA(short) - EMA(long) of close.

    Both EMAs are right-aligned, so the series starts once ``long_period``
    bars exist. BUY/SELL fire only on the bar where the oscillator crosses
    zero.
    """
    short_ema = ema(closes, short_period)
    long_ema = ema(closes, long_period)
    size = min(len(short_ema), len(long_ema))
    if size == 0:
        return EWOResult()

    values = (_to_array(short_ema[-size:]) - _to_array(long_ema[-size:])).tolist()
    return EWOResult(values=values, signal=_zero_cross_signals(values))


@dataclass(frozen=True)
class MACDResult:
    macd: list[float] = field(default_factory=list)
    signal: list[float] = field(default_factory=list)
    histogram: list[float] = field(default_factory=list)
    crossover: list[CrossSignal] = field(default_factory=list)


def macd(
    closes: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult:
    """Calculate MACD line, signal line, histogram and signal-line crossovers."""
    fast = ema(closes, fast_period)
    slow = ema(closes, slow_period)
    size = min(len(fast), len(slow))
    if size == 0:
        return MACDResult()

    macd_line = _to_array(fast[-size:]) - _to_array(slow[-size:])
    signal_line = _to_array(ema(macd_line, signal_period))
    if len(signal_line) == 0:
        return MACDResult(macd=macd_line.tolist())

    aligned = macd_line[-len(signal_line):]
    histogram = aligned - signal_line

    crossover = [CrossSignal.HOLD]
    for i in range(1, len(signal_line)):
        if aligned[i - 1] <= signal_line[i - 1] and aligned[i] > signal_line[i]:
            crossover.append(CrossSignal.BUY)
        elif aligned[i - 1] >= signal_line[i - 1] and aligned[i] < signal_line[i]:
            crossover.append(CrossSignal.SELL)
        else:
            crossover.append(CrossSignal.HOLD)

    return MACDResult(
        macd=macd_line.tolist(),
        signal=signal_line.tolist(),
        histogram=histogram.tolist(),
        crossover=crossover,
    )


# =============================================================================
# Ichimoku cloud
# =============================================================================

@dataclass(frozen=True)
class IchimokuResult:
    """Ichimoku lines plus the position of the last close against the cloud.

    The cloud is built from the current spans without the usual forward
    projection; ``available`` is False until ``senkou_b_period`` bars exist.
    """

    tenkan: list[float] = field(default_factory=list)
    kijun: list[float] = field(default_factory=list)
    span_a: list[float] = field(default_factory=list)
    span_b: list[float] = field(default_factory=list)
    chikou: list[float] = field(default_factory=list)
    cloud_top: float = 0.0
    cloud_bottom: float = 0.0
    price: float = 0.0
    signal: TrendDirection = TrendDirection.NEUTRAL

    @property
    def available(self) -> bool:
        return bool(self.span_b)

    @property
    def above_cloud(self) -> bool:
        return self.available and self.price > self.cloud_top

    @property
    def below_cloud(self) -> bool:
        return self.available and self.price < self.cloud_bottom

    @property
    def inside_cloud(self) -> bool:
        return self.available and self.cloud_bottom <= self.price <= self.cloud_top


def _midpoints(highs: Sequence[float], lows: Sequence[float], period: int) -> np.ndarray:
    return (_to_array(highest(highs, period)) + _to_array(lowest(lows, period))) / 2


def ichimoku(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    tenkan_period: int = 9,
    kijun_period: int = 26,
    senkou_b_period: int = 52,
) -> IchimokuResult:
    """
    Calculate the Ichimoku cloud.

    Tenkan, kijun and span B are (highest high + lowest low) / 2 over their
    periods; span A is (tenkan + kijun) / 2; chikou is the close shifted
    back by the kijun period.
    """
    if len(closes) == 0:
        return IchimokuResult()

    tenkan = _midpoints(highs, lows, tenkan_period)
    kijun = _midpoints(highs, lows, kijun_period)
    span_b = _midpoints(highs, lows, senkou_b_period)

    size = min(len(tenkan), len(kijun))
    span_a = (tenkan[len(tenkan) - size:] + kijun[len(kijun) - size:]) / 2 if size else np.empty(0)
    chikou = list(closes[: max(len(closes) - kijun_period, 0)])

    price = float(closes[-1])
    result = IchimokuResult(
        tenkan=tenkan.tolist(),
        kijun=kijun.tolist(),
        span_a=span_a.tolist(),
        span_b=span_b.tolist(),
        chikou=[float(v) for v in chikou],
        price=price,
    )
    if not result.available:
        return result

    current_a = latest(result.span_a)
    current_b = latest(result.span_b)
    cloud_top = max(current_a, current_b)
    cloud_bottom = min(current_a, current_b)
    current_tenkan = latest(result.tenkan)
    current_kijun = latest(result.kijun)

    signal = TrendDirection.NEUTRAL
    if price > cloud_top and current_tenkan > current_kijun:
        signal = TrendDirection.BULLISH
    elif price < cloud_bottom and current_tenkan < current_kijun:
        signal = TrendDirection.BEARISH

    return replace(result, cloud_top=cloud_top, cloud_bottom=cloud_bottom, signal=signal)


# =============================================================================
# Heikin-Ashi
# =============================================================================

class HeikinAshiSignal(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class HeikinAshiCandle:
    open: float
    high: float
    low: float
    close: float

    @property
    def is_green(self) -> bool:
        return self.close > self.open

    @property
    def is_red(self) -> bool:
        return self.close < self.open


def heikin_ashi(
    opens: Sequence[float],
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
) -> tuple[HeikinAshiSignal, list[HeikinAshiCandle]]:
    """
    Calculate Heikin-Ashi candles.

    Returns:
        Tuple of (signal, candles). The signal is UP/DOWN when the last two
        HA candles share a colour; fewer than 2 bars gives NEUTRAL and no
        candles.
    """
    if len(closes) < 2:
        return HeikinAshiSignal.NEUTRAL, []

    candles: list[HeikinAshiCandle] = []
    for i in range(len(closes)):
        ha_close = (opens[i] + highs[i] + lows[i] + closes[i]) / 4
        if i == 0:
            ha_open = (opens[i] + closes[i]) / 2
        else:
            ha_open = (candles[-1].open + candles[-1].close) / 2
        candles.append(
            HeikinAshiCandle(
                open=ha_open,
                high=max(highs[i], ha_open, ha_close),
                low=min(lows[i], ha_open, ha_close),
                close=ha_close,
            )
        )

    last, prev = candles[-1], candles[-2]
    if last.is_green and prev.is_green:
        return HeikinAshiSignal.UP, candles
    if last.is_red and prev.is_red:
        return HeikinAshiSignal.DOWN, candles
    return HeikinAshiSignal.NEUTRAL, candles
