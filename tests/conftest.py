"""Shared candle factories for the engine tests."""

from datetime import datetime, timezone

import pytest

from scalp_engine.models import Candle, Timeframe

NOW = datetime(2025, 1, 6, 15, 0, tzinfo=timezone.utc)

# Index of the single counter-move bar inside a trend series. It sits after
# the SuperTrend warm-up and keeps RSI off its 100/0 ceiling.
PULLBACK_AT = 20


def make_candle(
    timestamp: datetime = NOW,
    open: float = 100.0,
    high: float = 100.1,
    low: float = 99.9,
    close: float = 100.0,
    volume: float = 100.0,
) -> Candle:
    """Helper to create a candle."""
    return Candle(
        timestamp=timestamp,
        open=open,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def _start(n: int, timeframe: Timeframe, end: datetime) -> datetime:
    """Open time of the first of ``n`` bars whose last bar closes at ``end``."""
    return end - timeframe.duration * n


def trend_candles(
    n: int,
    timeframe: Timeframe = Timeframe.M1,
    direction: int = 1,
    start: float = 100.0,
    step: float = 0.1,
    volume: float = 100.0,
    end: datetime = NOW,
) -> list[Candle]:
    """
    Steady trend: each close moves ``step`` in ``direction``.

    Bars lean with the trend (short wick ahead, longer wick behind) so the
    opposite directional movement is always zero and ADX sits at 100. One
    small counter-move bar at PULLBACK_AT never undercuts (or overshoots)
    the previous extreme.
    """
    first = _start(n, timeframe, end)
    lead, trail = 0.05, 0.07
    candles = []
    for i in range(n):
        timestamp = first + timeframe.duration * i
        if i == PULLBACK_AT and i > 0:
            prev = candles[-1].close
            if direction == 1:
                candle = make_candle(
                    timestamp, open=prev + 0.03, high=prev + lead,
                    low=prev - 0.06, close=prev - 0.02, volume=volume,
                )
            else:
                candle = make_candle(
                    timestamp, open=prev - 0.03, high=prev + 0.06,
                    low=prev - lead, close=prev + 0.02, volume=volume,
                )
        else:
            close = start + direction * step * i
            if direction == 1:
                candle = make_candle(
                    timestamp, open=close - 0.05, high=close + lead,
                    low=close - trail, close=close, volume=volume,
                )
            else:
                candle = make_candle(
                    timestamp, open=close + 0.05, high=close + trail,
                    low=close - lead, close=close, volume=volume,
                )
        candles.append(candle)
    return candles


def flat_candles(
    n: int,
    timeframe: Timeframe = Timeframe.M1,
    price: float = 100.0,
    spread: float = 0.1,
    volume: float = 100.0,
    end: datetime = NOW,
) -> list[Candle]:
    """Zero-drift bars with open == close and a symmetric range."""
    first = _start(n, timeframe, end)
    return [
        make_candle(
            first + timeframe.duration * i,
            open=price, high=price + spread, low=price - spread,
            close=price, volume=volume,
        )
        for i in range(n)
    ]


def breakout_bar(prev: Candle, direction: int = 1, move: float = 1.5, volume: float = 300.0) -> Candle:
    """Wide, full-bodied 1m bar continuing the trend from ``prev`` on heavy volume."""
    timestamp = prev.timestamp + Timeframe.M1.duration
    if direction == 1:
        close = prev.close + move
        return make_candle(
            timestamp, open=prev.close, high=close + 0.05,
            low=prev.close - 0.05, close=close, volume=volume,
        )
    close = prev.close - move
    return make_candle(
        timestamp, open=prev.close, high=prev.close + 0.05,
        low=close - 0.05, close=close, volume=volume,
    )


def squeeze_windows(direction: int = 1, end: datetime = NOW):
    """(1m, 2m, 5m) windows that line up a squeeze alert in ``direction`` at ``end``."""
    base_1m = trend_candles(59, Timeframe.M1, direction, end=end - Timeframe.M1.duration)
    candles_1m = base_1m + [breakout_bar(base_1m[-1], direction)]
    candles_2m = trend_candles(60, Timeframe.M2, direction, end=end)
    candles_5m = trend_candles(60, Timeframe.M5, direction, end=end)
    # Heavier participation over the last 10 bars of the 5m trend
    candles_5m = candles_5m[:-10] + [c.model_copy(update={"volume": c.volume * 2}) for c in candles_5m[-10:]]
    return candles_1m, candles_2m, candles_5m


def trap_candles(count: int = 30, end: datetime = NOW) -> list[Candle]:
    """Flat 1m bars followed by an up-wick sweep of R1 on 3x volume."""
    base = flat_candles(count, end=end - Timeframe.M1.duration)
    trap = make_candle(
        base[-1].timestamp + Timeframe.M1.duration,
        open=99.95, high=100.1, low=99.7, close=99.75, volume=300.0,
    )
    return base + [trap]


def down_trap_candles(count: int = 30, end: datetime = NOW) -> list[Candle]:
    """Flat 1m bars followed by a down-wick sweep of S1 on 3x volume."""
    base = flat_candles(count, end=end - Timeframe.M1.duration)
    trap = make_candle(
        base[-1].timestamp + Timeframe.M1.duration,
        open=100.05, high=100.3, low=99.9, close=100.25, volume=300.0,
    )
    return base + [trap]


def oscillating_candles(n: int = 30, band: float = 0.02, end: datetime = NOW) -> list[Candle]:
    """1m closes alternating just above and below 100."""
    first = _start(n, Timeframe.M1, end)
    candles = []
    for i in range(n):
        close = 100.0 + band if i % 2 == 0 else 100.0 - band
        candles.append(
            make_candle(
                first + Timeframe.M1.duration * i,
                open=close, high=close + 0.01, low=close - 0.01, close=close,
            )
        )
    return candles


def fade_bar(prev: Candle) -> Candle:
    """Red bar with a lower high, closing further below VWAP."""
    return make_candle(
        prev.timestamp + Timeframe.M1.duration,
        open=99.74, high=99.8, low=99.6, close=99.65, volume=100.0,
    )


def rally_bar(prev: Candle) -> Candle:
    """Green bar with a higher low, closing further above VWAP."""
    return make_candle(
        prev.timestamp + Timeframe.M1.duration,
        open=100.26, high=100.4, low=100.2, close=100.35, volume=100.0,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def bull_windows():
    return squeeze_windows(direction=1)


@pytest.fixture
def bear_windows():
    return squeeze_windows(direction=-1)
