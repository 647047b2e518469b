"""Trap mode: 1-minute liquidity-sweep wick detection and fade confirmation.

A trap candle spikes volume and range into a key level and leaves a long
rejected wick. While a trap is live the squeeze path is suppressed and the
engine only looks for a fade back through VWAP.
"""

import logging
from typing import Sequence

from scalp_engine.indicators import bollinger_bands, near_level, pivot_points, rsi, safe_div
from scalp_engine.indicators.momentum import RSI_NEUTRAL
from scalp_engine.models import (
    Candle,
    Direction,
    EngineConfig,
    FadeConfirmation,
    TrapModeState,
    TrapType,
)

logger = logging.getLogger(__name__)

FADE_REASON = "Liquidity trap + VWAP reject"


def candle_index_of(candle: Candle) -> int:
    """Monotonic bar index of a 1m candle: whole minutes since the epoch."""
    return candle.minute_index


def key_levels(candles_1m: Sequence[Candle], config: EngineConfig) -> list[float]:
    """Pivot levels of the bar before the current one plus the Bollinger
    upper/lower of the last ``baseline + 1`` bars.
    """
    pivots = pivot_points(candles_1m[-2] if len(candles_1m) >= 2 else None)
    closes = [c.close for c in candles_1m[-(config.trap_baseline_bars + 1):]]
    bands = bollinger_bands(closes, config.bollinger_period, config.bollinger_std)

    levels = [pivots.r1, pivots.r2, pivots.r3, pivots.s1, pivots.s2, pivots.s3]
    if bands.upper:
        levels.extend([bands.upper[-1], bands.lower[-1]])
    return levels


def detect_trap(
    candles_1m: Sequence[Candle],
    candle_index: int,
    previous: TrapModeState | None = None,
    config: EngineConfig | None = None,
) -> TrapModeState:
    """
    Detect a liquidity-sweep wick on the latest 1m candle.

    A live previous trap is carried forward unchanged until
    ``candle_index`` reaches its expiry. Otherwise a new trap requires,
    against the 20 bars before the current one: volume >= 2x average,
    range >= 1.6x average, high or low within 0.1% of a key level, and a
    wick of >= 30% of the range opposite to a red (UP_WICK) or green
    (DOWN_WICK) close.

    Args:
        candles_1m: Closed 1m candles, oldest first
        candle_index: Index of the current 1m bar
        previous: Trap state from the previous cycle
        config: Engine thresholds

    Returns:
        TrapModeState for this cycle
    """
    config = config or EngineConfig()

    if previous is not None and previous.is_live(candle_index):
        return previous

    baseline_bars = config.trap_baseline_bars
    if len(candles_1m) < baseline_bars + 1:
        return TrapModeState.inactive()

    current = candles_1m[-1]
    baseline = candles_1m[-(baseline_bars + 1):-1]
    avg_volume = sum(c.volume for c in baseline) / baseline_bars
    avg_range = sum(c.range_size for c in baseline) / baseline_bars

    volume_spike = safe_div(current.volume, avg_volume) >= config.trap_volume_multiplier
    range_spike = current.range_size >= avg_range * config.trap_range_multiplier
    if not (volume_spike and range_spike):
        return TrapModeState.inactive()

    tolerance = config.trap_level_tolerance
    tags_level = any(
        near_level(current.high, level, tolerance) or near_level(current.low, level, tolerance)
        for level in key_levels(candles_1m, config)
    )
    if not tags_level:
        return TrapModeState.inactive()

    upper_wick_pct = safe_div(current.upper_wick, current.range_size)
    lower_wick_pct = safe_div(current.lower_wick, current.range_size)

    trap_type = None
    if upper_wick_pct >= config.trap_wick_ratio and current.is_bearish:
        trap_type = TrapType.UP_WICK
    elif lower_wick_pct >= config.trap_wick_ratio and current.is_bullish:
        trap_type = TrapType.DOWN_WICK

    if trap_type is None:
        return TrapModeState.inactive()

    logger.info(
        f"{trap_type.value} trap detected @ {current.timestamp}: "
        f"high={current.high} low={current.low} volume={current.volume}"
    )
    return TrapModeState(
        active=True,
        type=trap_type,
        expires_at_candle_index=candle_index + config.trap_duration_candles,
        wick_high=current.high,
        wick_low=current.low,
        trap_candle=current,
    )


def check_fade(
    candles_1m: Sequence[Candle],
    trap: TrapModeState,
    vwap_value: float,
    config: EngineConfig | None = None,
) -> FadeConfirmation:
    """
    Confirm a fade of an active trap on the last two 1m bars.

    UP_WICK fades SHORT on two closes below VWAP, a lower high, RSI < 50 and
    a red close. DOWN_WICK fades LONG on two closes above VWAP, a higher
    low, RSI >= 50 and a green close.
    """
    config = config or EngineConfig()

    if not trap.active or trap.trap_candle is None or len(candles_1m) < 2:
        return FadeConfirmation()

    current, prev = candles_1m[-1], candles_1m[-2]
    rsi_values = rsi([c.close for c in candles_1m], config.rsi_period)
    rsi_value = rsi_values[-1] if rsi_values else RSI_NEUTRAL

    if trap.type == TrapType.UP_WICK:
        if (
            current.close < vwap_value
            and prev.close < vwap_value
            and current.high < prev.high
            and rsi_value < 50
            and current.is_bearish
        ):
            return FadeConfirmation(confirmed=True, direction=Direction.SHORT, reason=FADE_REASON)

    elif trap.type == TrapType.DOWN_WICK:
        if (
            current.close > vwap_value
            and prev.close > vwap_value
            and current.low > prev.low
            and rsi_value >= 50
            and current.is_bullish
        ):
            return FadeConfirmation(confirmed=True, direction=Direction.LONG, reason=FADE_REASON)

    return FadeConfirmation()
