"""Trigger: 1-minute entry timing with hysteresis.

Nine conditions must all hold on the side that the Director and the
Validator agree on. There is no partial credit here; the confidence
scorer grades the same conditions afterwards.
"""

import logging
from typing import Sequence

from scalp_engine.indicators import IndicatorCalculator
from scalp_engine.indicators.calculator import IndicatorSnapshot
from scalp_engine.models import (
    Candle,
    Direction,
    DirectorResult,
    DirectorState,
    EngineConfig,
    TrapModeState,
    TriggerConditions,
    TriggerResult,
    ValidatorResult,
)

logger = logging.getLogger(__name__)


def _closes_held(closes: Sequence[float], level: float, bars: int, above: bool) -> bool:
    """Last ``bars`` closes all strictly above (or below) ``level``."""
    if bars <= 0 or len(closes) < bars:
        return False
    recent = closes[-bars:]
    if above:
        return all(c > level for c in recent)
    return all(c < level for c in recent)


def _conditions(
    snapshot: IndicatorSnapshot,
    closes: Sequence[float],
    direction: Direction,
    director: DirectorResult,
    config: EngineConfig,
) -> TriggerConditions:
    long = direction == Direction.LONG
    price = snapshot.close
    vwap_value = snapshot.vwap.value
    adx = snapshot.adx
    ewo = snapshot.ewo
    rsi_value = snapshot.rsi_current
    pivots = snapshot.pivots
    bands = snapshot.bollinger

    expanding = bands.is_expanding(config.bollinger_expansion_lag, config.bollinger_expansion_ratio)
    middle = bands.middle[-1] if bands.middle else 0.0

    if long:
        rsi_ok = snapshot.rsi_rising and rsi_value >= config.rsi_long_threshold
        ewo_ok = ewo.current > 0 and ewo.rising
        pivot_ok = price > pivots.r1 or (price > pivots.s1 and price > vwap_value)
        boll_ok = expanding and price > middle
    else:
        rsi_ok = snapshot.rsi_falling and rsi_value <= config.rsi_short_threshold
        ewo_ok = ewo.current < 0 and not ewo.rising
        pivot_ok = price < pivots.s1 or (price < pivots.r1 and price < vwap_value)
        boll_ok = expanding and price < middle

    return TriggerConditions(
        vwap_hysteresis=_closes_held(closes, vwap_value, config.hysteresis_candles, above=long),
        st_hysteresis=snapshot.supertrend.held(1 if long else -1, config.hysteresis_candles),
        rvol=snapshot.rvol.current >= config.rvol_threshold,
        adx=adx.current >= config.adx_trend_threshold and adx.current >= adx.previous,
        rsi=rsi_ok,
        ewo=ewo_ok,
        not_in_cloud=not director.inside_cloud,
        pivot_confirm=pivot_ok,
        boll_confirm=boll_ok,
    )


def evaluate_trigger(
    candles_1m: Sequence[Candle],
    director: DirectorResult,
    validator: ValidatorResult,
    trap: TrapModeState,
    config: EngineConfig | None = None,
) -> TriggerResult:
    """
    Evaluate 1-minute entry conditions.

    Args:
        candles_1m: Closed 1m candles, oldest first
        director: Director result of this cycle
        validator: Validator result of this cycle
        trap: Trap state of this cycle; an active trap blocks the trigger
        config: Engine thresholds

    Returns:
        TriggerResult. ``conditions`` holds the side the Director leans to,
        whether or not the trigger is valid.
    """
    config = config or EngineConfig()

    if len(candles_1m) < config.trigger_min_bars or trap.active:
        return TriggerResult.invalid()

    snapshot = IndicatorCalculator(config).calculate(candles_1m)
    closes = [c.close for c in candles_1m]

    long_conditions = _conditions(snapshot, closes, Direction.LONG, director, config)
    short_conditions = _conditions(snapshot, closes, Direction.SHORT, director, config)

    metrics = {
        "rvol": snapshot.rvol.current,
        "adx": snapshot.adx.current,
        "adx_rising": snapshot.adx.rising,
    }

    if director.state == DirectorState.BULL and validator.long_valid and long_conditions.all_met:
        return TriggerResult(
            valid=True, direction=Direction.LONG, conditions=long_conditions, **metrics
        )

    if director.state == DirectorState.BEAR and validator.short_valid and short_conditions.all_met:
        return TriggerResult(
            valid=True, direction=Direction.SHORT, conditions=short_conditions, **metrics
        )

    conditions = long_conditions if director.state == DirectorState.BULL else short_conditions
    logger.debug(f"Trigger not met: {conditions.model_dump()}")
    return TriggerResult(valid=False, direction=None, conditions=conditions, **metrics)
