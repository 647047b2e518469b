"""Validator: 2-minute confirmation gate.

Each side is valid only when all five of its conditions hold. The state
is BULL/BEAR only when the valid side agrees with the Director.
"""

import logging
from typing import Sequence

from scalp_engine.indicators import ADXResult, IndicatorCalculator, adx, candle_arrays
from scalp_engine.models import (
    Candle,
    DirectorResult,
    DirectorState,
    EngineConfig,
    ValidatorConditions,
    ValidatorResult,
    ValidatorState,
)

logger = logging.getLogger(__name__)


def _adx_source(
    candles_2m: Sequence[Candle],
    candles_1m: Sequence[Candle],
    config: EngineConfig,
) -> ADXResult:
    """ADX of the 2m window, or of the 1m window when 2m yields no value."""
    for candles in (candles_2m, candles_1m):
        if not candles:
            continue
        _, highs, lows, closes, _ = candle_arrays(candles)
        result = adx(highs, lows, closes, config.adx_period)
        if result.adx:
            return result
    return ADXResult()


def calculate_validator(
    candles_2m: Sequence[Candle],
    candles_1m: Sequence[Candle],
    director: DirectorResult,
    config: EngineConfig | None = None,
) -> ValidatorResult:
    """
    Evaluate the 2-minute long and short condition sets.

    Args:
        candles_2m: Closed 2m candles, oldest first
        candles_1m: Closed 1m candles, used as the ADX fallback
        director: Director result of this cycle
        config: Engine thresholds

    Returns:
        ValidatorResult with both condition sets; never cached
    """
    config = config or EngineConfig()

    if len(candles_2m) < config.validator_min_bars:
        return ValidatorResult.neutral()

    snapshot = IndicatorCalculator(config).calculate(candles_2m)
    price = snapshot.close
    vwap_value = snapshot.vwap.value
    st = snapshot.supertrend
    rsi_value = snapshot.rsi_current
    ewo = snapshot.ewo

    trend = _adx_source(candles_2m, candles_1m, config)
    adx_ok = bool(trend.adx) and (
        trend.current >= config.adx_trend_threshold or trend.rising
    )

    long_conditions = ValidatorConditions(
        vwap_position=price > vwap_value,
        super_trend=st.current == 1,
        rsi=rsi_value >= config.rsi_long_threshold and snapshot.rsi_rising,
        ewo=ewo.current > 0 or ewo.rising,
        adx=adx_ok,
    )
    short_conditions = ValidatorConditions(
        vwap_position=price < vwap_value,
        super_trend=st.current == -1,
        rsi=rsi_value <= config.rsi_short_threshold and snapshot.rsi_falling,
        ewo=ewo.current < 0 or not ewo.rising,
        adx=adx_ok,
    )
    long_valid = long_conditions.all_met
    short_valid = short_conditions.all_met

    state = ValidatorState.NEUTRAL
    if long_valid and director.state == DirectorState.BULL:
        state = ValidatorState.BULL
    elif short_valid and director.state == DirectorState.BEAR:
        state = ValidatorState.BEAR

    logger.debug(f"Validator {state.value} long={long_valid} short={short_valid}")
    return ValidatorResult(
        state=state,
        long_valid=long_valid,
        short_valid=short_valid,
        long_conditions=long_conditions,
        short_conditions=short_conditions,
    )
