"""Candle (OHLCV bar) data models."""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Timeframe(str, Enum):
    """Bar intervals consumed by the engine."""

    M1 = "1m"
    M2 = "2m"
    M5 = "5m"

    @property
    def minutes(self) -> int:
        return int(self.value[:-1])

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.minutes)


class Candle(BaseModel):
    """A closed OHLCV bar. ``timestamp`` is the bar open time."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _check_prices(self) -> "Candle":
        if self.high < self.low:
            raise ValueError(f"high {self.high} below low {self.low}")
        if self.high < max(self.open, self.close):
            raise ValueError(f"high {self.high} below body top {max(self.open, self.close)}")
        if self.low > min(self.open, self.close):
            raise ValueError(f"low {self.low} above body bottom {min(self.open, self.close)}")
        return self

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (green) candle."""
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        """Check if this is a bearish (red) candle."""
        return self.close < self.open

    @property
    def body_size(self) -> float:
        return abs(self.close - self.open)

    @property
    def range_size(self) -> float:
        """Get the full range (high - low) of the candle."""
        return self.high - self.low

    @property
    def upper_wick(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_wick(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3

    @property
    def minute_index(self) -> int:
        """Whole minutes since the epoch at bar open."""
        return int(self.timestamp.timestamp() // 60)

    def close_time(self, timeframe: Timeframe) -> datetime:
        return self.timestamp + timeframe.duration


class CandleBuffer(BaseModel):
    """Rolling window of recent candles for one symbol and timeframe."""

    symbol: str
    timeframe: Timeframe
    candles: list[Candle] = Field(default_factory=list)
    max_size: int = 500

    def add(self, candle: Candle) -> None:
        """Append a candle, replacing the last one when timestamps match."""
        if self.candles and candle.timestamp <= self.candles[-1].timestamp:
            if candle.timestamp == self.candles[-1].timestamp:
                self.candles[-1] = candle
            return

        self.candles.append(candle)
        if len(self.candles) > self.max_size:
            self.candles = self.candles[-self.max_size :]

    def window(self, size: int | None = None) -> list[Candle]:
        """Get a copy of the last ``size`` candles (all when omitted)."""
        if size is None:
            return list(self.candles)
        return self.candles[-size:] if size > 0 else []

    @property
    def last(self) -> Candle | None:
        return self.candles[-1] if self.candles else None

    def __len__(self) -> int:
        return len(self.candles)
