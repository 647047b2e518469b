"""Signal enums and the emitted alert record."""

import hashlib
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Direction(int, Enum):
    """Trade direction."""

    LONG = 1
    SHORT = -1

    @property
    def opposite(self) -> "Direction":
        return Direction.SHORT if self is Direction.LONG else Direction.LONG


class DirectorState(str, Enum):
    """5-minute bias classification."""

    BULL = "BULL"
    BEAR = "BEAR"
    CHOP = "CHOP"


class ValidatorState(str, Enum):
    """2-minute confirmation outcome."""

    BULL = "BULL"
    BEAR = "BEAR"
    NEUTRAL = "NEUTRAL"


class TrapType(str, Enum):
    """Which side of a liquidity-sweep candle carries the rejected wick."""

    UP_WICK = "UP_WICK"
    DOWN_WICK = "DOWN_WICK"


class AlertType(str, Enum):
    SQUEEZE_LONG = "SQUEEZE_LONG"
    SQUEEZE_SHORT = "SQUEEZE_SHORT"
    TRAP_FADE_LONG = "TRAP_FADE_LONG"
    TRAP_FADE_SHORT = "TRAP_FADE_SHORT"

    @property
    def direction(self) -> Direction:
        if self in (AlertType.SQUEEZE_LONG, AlertType.TRAP_FADE_LONG):
            return Direction.LONG
        return Direction.SHORT

    @property
    def is_trap_fade(self) -> bool:
        return self in (AlertType.TRAP_FADE_LONG, AlertType.TRAP_FADE_SHORT)

    @classmethod
    def squeeze(cls, direction: Direction) -> "AlertType":
        return cls.SQUEEZE_LONG if direction == Direction.LONG else cls.SQUEEZE_SHORT

    @classmethod
    def trap_fade(cls, direction: Direction) -> "AlertType":
        return cls.TRAP_FADE_LONG if direction == Direction.LONG else cls.TRAP_FADE_SHORT


def _generate_alert_id(symbol: str, alert_type: AlertType, timestamp: datetime) -> str:
    """Generate a deterministic alert ID.

    The same bar replayed twice yields the same ID, so downstream consumers
    can deduplicate after a restart.
    """
    ts_str = timestamp.strftime("%Y%m%d%H%M%S%f")
    key = f"{symbol}:{alert_type.value}:{ts_str}"
    return hashlib.sha256(key.encode()).hexdigest()[:32]


class Alert(BaseModel):
    """Actionable scalp alert produced by one orchestrator cycle."""

    model_config = ConfigDict(frozen=True)

    id: str = ""  # Will be set in model_post_init
    symbol: str = ""
    type: AlertType
    timestamp: datetime
    confidence: int = Field(ge=0, le=100)
    should_push: bool
    director: DirectorState
    validator: ValidatorState
    trigger_reason: str
    explanation: str
    entry_price: float
    stop_loss: float
    target_price: float
    hold_time: str

    def model_post_init(self, __context) -> None:
        """Generate deterministic ID after model initialization."""
        if not self.id:
            object.__setattr__(
                self, "id", _generate_alert_id(self.symbol, self.type, self.timestamp)
            )

    @property
    def direction(self) -> Direction:
        return self.type.direction

    @property
    def risk_amount(self) -> float:
        """Get the risk amount (distance to stop loss)."""
        if self.direction == Direction.LONG:
            return self.entry_price - self.stop_loss
        return self.stop_loss - self.entry_price

    @property
    def reward_amount(self) -> float:
        """Get the reward amount (distance to target)."""
        if self.direction == Direction.LONG:
            return self.target_price - self.entry_price
        return self.entry_price - self.target_price
