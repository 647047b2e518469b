"""Alert orchestrator: one alert-or-nothing decision per 1-minute bar close.

Sequence per cycle:
Director (cached) -> Validator -> Trap (cached) -> trap fade or suppress ->
Chop filter / Director CHOP -> Trigger -> Cooldown gate -> Alert.

This module is pure: all state comes in as arguments and goes back out in
the CycleResult. Nothing is kept between calls.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from scalp_engine.indicators import atr, candle_arrays, vwap
from scalp_engine.indicators.calculator import ATR_FALLBACK
from scalp_engine.models import (
    Alert,
    AlertType,
    Candle,
    CooldownState,
    Direction,
    DirectorResult,
    DirectorState,
    EngineConfig,
    EngineState,
    TrapModeState,
    ValidatorResult,
    ValidatorState,
)
from scalp_engine.pipeline.chop_filter import check_chop
from scalp_engine.pipeline.confidence import score_confidence, should_push
from scalp_engine.pipeline.cooldown import check_gate, observe_vwap_touch, record_alert
from scalp_engine.pipeline.director import calculate_director
from scalp_engine.pipeline.trap import candle_index_of, check_fade, detect_trap
from scalp_engine.pipeline.trigger import evaluate_trigger
from scalp_engine.pipeline.validator import calculate_validator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one orchestrator cycle.

    ``reason`` explains why no alert was emitted (empty when one was).
    """

    alert: Alert | None
    director: DirectorResult
    validator: ValidatorResult
    trap: TrapModeState
    cooldown: CooldownState
    reason: str = ""

    @property
    def state(self) -> EngineState:
        """State to pass into the next cycle."""
        return EngineState(director=self.director, trap=self.trap, cooldown=self.cooldown)


def _latest_atr(candles_1m: Sequence[Candle], config: EngineConfig) -> float:
    _, highs, lows, closes, _ = candle_arrays(candles_1m)
    values = atr(highs, lows, closes, config.atr_period)
    if values and values[-1] > 0:
        return values[-1]
    return ATR_FALLBACK


def run_cycle(
    candles_1m: Sequence[Candle],
    candles_2m: Sequence[Candle],
    candles_5m: Sequence[Candle],
    now: datetime,
    state: EngineState | None = None,
    *,
    symbol: str = "",
    candle_index: int | None = None,
    config: EngineConfig | None = None,
) -> CycleResult:
    """
    Run one full pipeline cycle.

    Args:
        candles_1m: Closed 1m candles, oldest first
        candles_2m: Closed 2m candles, oldest first
        candles_5m: Closed 5m candles, oldest first
        now: Current time; drives the Director lock and the cooldown
        state: State returned by the previous cycle (fresh state when None)
        symbol: Symbol stamped on the alert
        candle_index: Index of the current 1m bar; defaults to whole
            minutes since the epoch of the last 1m candle
        config: Engine thresholds

    Returns:
        CycleResult with the alert (or None) and the updated state
    """
    config = config or EngineConfig()
    state = state or EngineState()

    director = calculate_director(candles_5m, now, state.director, config)
    validator = calculate_validator(candles_2m, candles_1m, director, config)

    if candle_index is None and candles_1m:
        candle_index = candle_index_of(candles_1m[-1])

    if len(candles_1m) < config.trigger_min_bars:
        # Without a bar to date it against, the trap is left as it was
        trap = state.trap
        if candle_index is not None and not trap.is_live(candle_index):
            trap = TrapModeState.inactive()
        return CycleResult(
            alert=None,
            director=director,
            validator=validator,
            trap=trap,
            cooldown=state.cooldown,
            reason="Insufficient 1m history",
        )

    trap = detect_trap(candles_1m, candle_index, state.trap, config)

    _, highs, lows, closes, volumes = candle_arrays(candles_1m)
    vwap_1m = vwap(highs, lows, closes, volumes).value
    price = float(closes[-1])
    cooldown = observe_vwap_touch(state.cooldown, price, vwap_1m, config)

    def suppressed(reason: str) -> CycleResult:
        logger.debug(f"{symbol or 'cycle'} suppressed: {reason}")
        return CycleResult(
            alert=None,
            director=director,
            validator=validator,
            trap=trap,
            cooldown=cooldown,
            reason=reason,
        )

    # Trap fades take priority and bypass the cooldown gate
    if trap.active:
        fade = check_fade(candles_1m, trap, vwap_1m, config)
        if not fade.confirmed or fade.direction is None:
            return suppressed(f"Trap mode active ({trap.type.value})")

        atr_value = _latest_atr(candles_1m, config)
        direction = fade.direction
        if direction == Direction.LONG:
            stop_loss = (trap.wick_low or price) - atr_value * config.trap_stop_atr
            target = price + atr_value * config.trap_target_atr
        else:
            stop_loss = (trap.wick_high or price) + atr_value * config.trap_stop_atr
            target = price - atr_value * config.trap_target_atr

        alert = Alert(
            symbol=symbol,
            type=AlertType.trap_fade(direction),
            timestamp=now,
            confidence=config.trap_fade_confidence,
            should_push=True,
            director=director.state,
            validator=ValidatorState.NEUTRAL,
            trigger_reason=fade.reason,
            explanation=f"Director: {director.state.value} | Validator: n/a | Trigger: {fade.reason}",
            entry_price=price,
            stop_loss=stop_loss,
            target_price=target,
            hold_time=config.trap_hold_time,
        )
        logger.info(
            f"{alert.type.value} alert: {symbol} @ {price} conf={alert.confidence} "
            f"stop={stop_loss:.2f} target={target:.2f}"
        )
        return CycleResult(
            alert=alert,
            director=director,
            validator=validator,
            trap=TrapModeState.inactive(),
            cooldown=record_alert(direction, now),
        )

    chop = check_chop(candles_5m, candles_2m, candles_1m, director, config)
    if chop.is_chop:
        return suppressed(chop.reason)
    if director.state == DirectorState.CHOP:
        return suppressed("Director CHOP")

    trigger = evaluate_trigger(candles_1m, director, validator, trap, config)
    if not trigger.valid or trigger.direction is None:
        return suppressed("Trigger conditions not met")

    direction = trigger.direction
    gate = check_gate(direction, cooldown, now, config)
    if not gate.allowed:
        return suppressed(gate.reason)

    confidence = score_confidence(director, validator, trigger, config)
    atr_value = _latest_atr(candles_1m, config)
    if direction == Direction.LONG:
        stop_loss = price - atr_value * config.squeeze_stop_atr
        target = price + atr_value * config.squeeze_target_atr
        trigger_reason = f"VWAP hold + RVOL {trigger.rvol:.1f}x"
    else:
        stop_loss = price + atr_value * config.squeeze_stop_atr
        target = price - atr_value * config.squeeze_target_atr
        trigger_reason = f"VWAP loss + RVOL {trigger.rvol:.1f}x"

    alert = Alert(
        symbol=symbol,
        type=AlertType.squeeze(direction),
        timestamp=now,
        confidence=confidence,
        should_push=should_push(confidence, config),
        director=director.state,
        validator=validator.state,
        trigger_reason=trigger_reason,
        explanation=(
            f"Director: {director.state.value} | Validator: {validator.state.value} "
            f"| Trigger: {trigger_reason}"
        ),
        entry_price=price,
        stop_loss=stop_loss,
        target_price=target,
        hold_time=config.squeeze_hold_time,
    )
    logger.info(
        f"{alert.type.value} alert: {symbol} @ {price} conf={confidence} "
        f"stop={stop_loss:.2f} target={target:.2f}"
    )
    return CycleResult(
        alert=alert,
        director=director,
        validator=validator,
        trap=trap,
        cooldown=record_alert(direction, now),
    )
