"""Cooldown and re-alert gate.

Opposite-direction alerts are blocked for a fixed time after any alert.
Same-direction alerts stay blocked until price has retested VWAP since the
last alert. Trap fades are not gated but still update the state.
"""

import math
from datetime import datetime

from scalp_engine.models import CooldownCheck, CooldownState, Direction, EngineConfig


def observe_vwap_touch(
    state: CooldownState,
    price: float,
    vwap_value: float,
    config: EngineConfig | None = None,
) -> CooldownState:
    """Record a VWAP retest when ``price`` is within tolerance of VWAP.

    Only meaningful after an alert; before any alert the state is returned
    unchanged.
    """
    config = config or EngineConfig()

    if state.last_alert_direction is None or vwap_value <= 0:
        return state
    if abs(price - vwap_value) / vwap_value >= config.vwap_touch_tolerance:
        return state
    if state.vwap_retest_since_last_alert:
        return state

    return state.model_copy(
        update={"vwap_retest_since_last_alert": True, "same_direction_blocked": False}
    )


def check_gate(
    direction: Direction,
    state: CooldownState,
    now: datetime,
    config: EngineConfig | None = None,
) -> CooldownCheck:
    """Check whether an alert in ``direction`` may be emitted at ``now``."""
    config = config or EngineConfig()

    last_direction = state.last_alert_direction
    if last_direction is None:
        return CooldownCheck()

    if last_direction != direction and state.last_alert_timestamp is not None:
        elapsed = (now - state.last_alert_timestamp).total_seconds()
        cooldown = config.opposite_direction_cooldown_seconds
        if elapsed < cooldown:
            remaining = math.ceil(cooldown - elapsed)
            return CooldownCheck(
                allowed=False,
                reason=f"Opposite direction cooldown: {remaining}s remaining",
            )

    if last_direction == direction and not state.vwap_retest_since_last_alert:
        return CooldownCheck(allowed=False, reason="Same direction blocked until VWAP retest")

    return CooldownCheck()


def record_alert(direction: Direction, now: datetime) -> CooldownState:
    """State after emitting an alert in ``direction`` at ``now``."""
    return CooldownState(
        last_alert_direction=direction,
        last_alert_timestamp=now,
        vwap_retest_since_last_alert=False,
        same_direction_blocked=True,
    )
