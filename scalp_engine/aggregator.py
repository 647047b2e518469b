"""Candle aggregator for building 2m and 5m bars from closed 1m bars.

Periods are aligned to clock boundaries: a 5m bar covers minutes
[:00, :05), [:05, :10) and so on. A period that is missing any 1m bar is
discarded rather than emitted as a partial candle.
"""

import logging
from dataclasses import dataclass, field

from scalp_engine.models import Candle, Timeframe

logger = logging.getLogger(__name__)


@dataclass
class AggregationBuffer:
    """Accumulates 1m candles for one target timeframe."""

    timeframe: Timeframe
    candles_1m: list[Candle] = field(default_factory=list)

    @property
    def period_minutes(self) -> int:
        return self.timeframe.minutes

    def _period_start(self, candle: Candle) -> int:
        return candle.minute_index // self.period_minutes

    def add(self, candle: Candle) -> Candle | None:
        """Add a closed 1m candle.

        Returns:
            The aggregated candle when this candle closes a complete period,
            None otherwise
        """
        if self.candles_1m and self._period_start(self.candles_1m[0]) != self._period_start(candle):
            if len(self.candles_1m) < self.period_minutes:
                logger.debug(
                    f"Discarding incomplete {self.timeframe.value} period: "
                    f"had {len(self.candles_1m)}/{self.period_minutes} candles"
                )
            self.candles_1m.clear()

        self.candles_1m.append(candle)

        if (candle.minute_index + 1) % self.period_minutes != 0:
            return None

        if len(self.candles_1m) != self.period_minutes:
            logger.warning(
                f"Incomplete period at {self.timeframe.value} boundary: "
                f"expected {self.period_minutes}, got {len(self.candles_1m)} candles"
            )
            self.candles_1m.clear()
            return None

        return self._aggregate()

    def _aggregate(self) -> Candle:
        candles = self.candles_1m
        aggregated = Candle(
            timestamp=candles[0].timestamp,
            open=candles[0].open,
            high=max(c.high for c in candles),
            low=min(c.low for c in candles),
            close=candles[-1].close,
            volume=sum(c.volume for c in candles),
        )
        self.candles_1m = []
        return aggregated

    def reset(self) -> None:
        self.candles_1m.clear()


class CandleAggregator:
    """Aggregates 1m candles for one symbol into the higher timeframes.

    Usage:
        aggregator = CandleAggregator()
        for candle in candles_1m:
            for timeframe, bar in aggregator.add(candle).items():
                buffers[timeframe].add(bar)
    """

    def __init__(self, timeframes: list[Timeframe] | None = None):
        if timeframes is None:
            timeframes = [Timeframe.M2, Timeframe.M5]
        self._buffers = {
            tf: AggregationBuffer(timeframe=tf) for tf in timeframes if tf != Timeframe.M1
        }

    @property
    def timeframes(self) -> list[Timeframe]:
        return list(self._buffers)

    def add(self, candle: Candle) -> dict[Timeframe, Candle]:
        """Feed a closed 1m candle; return the bars it completed."""
        completed = {}
        for timeframe, buffer in self._buffers.items():
            aggregated = buffer.add(candle)
            if aggregated is not None:
                completed[timeframe] = aggregated
        return completed

    def reset(self) -> None:
        for buffer in self._buffers.values():
            buffer.reset()
