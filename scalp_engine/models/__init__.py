"""Data models for the scalp signal engine."""

from scalp_engine.models.candle import Candle, CandleBuffer, Timeframe
from scalp_engine.models.config import EngineConfig
from scalp_engine.models.signal import (
    Alert,
    AlertType,
    Direction,
    DirectorState,
    TrapType,
    ValidatorState,
)
from scalp_engine.models.state import (
    ChopCheck,
    CooldownCheck,
    CooldownState,
    DirectorResult,
    DirectorVotes,
    EngineState,
    FadeConfirmation,
    TrapModeState,
    TriggerConditions,
    TriggerResult,
    ValidatorConditions,
    ValidatorResult,
)

__all__ = [
    "Alert",
    "AlertType",
    "Candle",
    "CandleBuffer",
    "ChopCheck",
    "CooldownCheck",
    "CooldownState",
    "Direction",
    "DirectorResult",
    "DirectorState",
    "DirectorVotes",
    "EngineConfig",
    "EngineState",
    "FadeConfirmation",
    "Timeframe",
    "TrapModeState",
    "TrapType",
    "TriggerConditions",
    "TriggerResult",
    "ValidatorConditions",
    "ValidatorResult",
    "ValidatorState",
]
