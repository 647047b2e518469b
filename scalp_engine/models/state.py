"""Per-cycle pipeline state.

Every object here is immutable. Stages return new instances and the caller
threads them into the next cycle; nothing is kept at module level.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from scalp_engine.models.candle import Candle
from scalp_engine.models.signal import (
    Direction,
    DirectorState,
    TrapType,
    ValidatorState,
)


class DirectorVotes(BaseModel):
    """Per-indicator votes, each in {-1, 0, +1}."""

    model_config = ConfigDict(frozen=True)

    super_trend: int = Field(default=0, ge=-1, le=1)
    vwap: int = Field(default=0, ge=-1, le=1)
    rsi: int = Field(default=0, ge=-1, le=1)
    ewo: int = Field(default=0, ge=-1, le=1)
    adx: int = Field(default=0, ge=-1, le=1)
    ichimoku: int = Field(default=0, ge=-1, le=1)

    @property
    def total(self) -> int:
        return self.super_trend + self.vwap + self.rsi + self.ewo + self.adx + self.ichimoku


class DirectorResult(BaseModel):
    """Cached 5-minute bias classification."""

    model_config = ConfigDict(frozen=True)

    state: DirectorState = DirectorState.CHOP
    bias_score: int = Field(default=0, ge=-6, le=6)
    votes: DirectorVotes = Field(default_factory=DirectorVotes)
    locked_until: datetime | None = None
    inside_cloud: bool = False

    @classmethod
    def neutral(cls) -> "DirectorResult":
        """Result used when there is not enough 5m history. Never cached."""
        return cls()

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and now < self.locked_until


class ValidatorConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    vwap_position: bool = False
    super_trend: bool = False
    rsi: bool = False
    ewo: bool = False
    adx: bool = False

    @property
    def all_met(self) -> bool:
        return self.vwap_position and self.super_trend and self.rsi and self.ewo and self.adx


class ValidatorResult(BaseModel):
    """2-minute confirmation, recomputed every cycle."""

    model_config = ConfigDict(frozen=True)

    state: ValidatorState = ValidatorState.NEUTRAL
    long_valid: bool = False
    short_valid: bool = False
    long_conditions: ValidatorConditions = Field(default_factory=ValidatorConditions)
    short_conditions: ValidatorConditions = Field(default_factory=ValidatorConditions)

    @classmethod
    def neutral(cls) -> "ValidatorResult":
        return cls()


class TrapModeState(BaseModel):
    """Lifecycle of a detected liquidity-sweep wick."""

    model_config = ConfigDict(frozen=True)

    active: bool = False
    type: TrapType | None = None
    expires_at_candle_index: int = 0
    wick_high: float | None = None
    wick_low: float | None = None
    trap_candle: Candle | None = None

    @classmethod
    def inactive(cls) -> "TrapModeState":
        return cls()

    def is_live(self, candle_index: int) -> bool:
        return self.active and candle_index < self.expires_at_candle_index


class FadeConfirmation(BaseModel):
    model_config = ConfigDict(frozen=True)

    confirmed: bool = False
    direction: Direction | None = None
    reason: str = ""


class ChopCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_chop: bool = False
    reason: str = ""


class TriggerConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    vwap_hysteresis: bool = False
    st_hysteresis: bool = False
    rvol: bool = False
    adx: bool = False
    rsi: bool = False
    ewo: bool = False
    not_in_cloud: bool = False
    pivot_confirm: bool = False
    boll_confirm: bool = False

    @property
    def all_met(self) -> bool:
        return all(self.model_dump().values())


class TriggerResult(BaseModel):
    """1-minute entry timing. Never cached."""

    model_config = ConfigDict(frozen=True)

    valid: bool = False
    direction: Direction | None = None
    conditions: TriggerConditions = Field(default_factory=TriggerConditions)
    rvol: float = 1.0
    adx: float = 0.0
    adx_rising: bool = False

    @classmethod
    def invalid(cls) -> "TriggerResult":
        return cls()


class CooldownState(BaseModel):
    """Cross-cycle re-alert gate state."""

    model_config = ConfigDict(frozen=True)

    last_alert_direction: Direction | None = None
    last_alert_timestamp: datetime | None = None
    vwap_retest_since_last_alert: bool = False
    same_direction_blocked: bool = False


class CooldownCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: bool = True
    reason: str = ""


class EngineState(BaseModel):
    """State carried from one orchestrator cycle to the next for one symbol."""

    model_config = ConfigDict(frozen=True)

    director: DirectorResult | None = None
    trap: TrapModeState = Field(default_factory=TrapModeState.inactive)
    cooldown: CooldownState = Field(default_factory=CooldownState)
