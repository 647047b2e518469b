"""Alert service: single-flight runner that owns per-symbol pipeline state.

The pipeline is pure; this module holds the state between bars, aligns
the three timeframe windows to the cycle time, substitutes the last-known
window for a stale timeframe and fans emitted alerts out to callbacks.
Persistence and notification are injected, so the same service runs live
and in replay.
"""

import asyncio
import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Sequence

from scalp_engine.config import Settings, get_settings
from scalp_engine.models import Alert, Candle, EngineConfig, EngineState, Timeframe, ValidatorResult
from scalp_engine.pipeline import CycleResult, run_cycle

logger = logging.getLogger(__name__)

# Type aliases for callbacks
AlertCallback = Callable[[Alert], Awaitable[None]]
SaveAlertCallback = Callable[[Alert], Awaitable[None]]


@dataclass
class SymbolState:
    """Everything the service remembers about one symbol between bars."""

    engine: EngineState = field(default_factory=EngineState)
    validator: ValidatorResult = field(default_factory=ValidatorResult.neutral)
    last_processed: datetime | None = None
    windows: dict[Timeframe, list[Candle]] = field(default_factory=dict)
    alerts: deque[Alert] = field(default_factory=deque)


@dataclass
class ProcessBarResult:
    """Result of one ``process_bar`` call."""

    alert: Alert | None = None
    skipped: bool = False
    reason: str = ""
    stale_timeframes: list[Timeframe] = field(default_factory=list)
    cycle: CycleResult | None = None


def align_window(candles: Sequence[Candle], timeframe: Timeframe, now: datetime) -> list[Candle]:
    """Drop trailing bars that have not closed by ``now``."""
    end = len(candles)
    while end > 0 and candles[end - 1].close_time(timeframe) > now:
        end -= 1
    return list(candles[:end])


def is_stale(
    candles: Sequence[Candle],
    timeframe: Timeframe,
    now: datetime,
    tolerance_bars: int,
) -> bool:
    """A window is stale when empty or when its last bar closed more than
    ``tolerance_bars`` intervals before ``now``.
    """
    if not candles:
        return True
    age = now - candles[-1].close_time(timeframe)
    return age > timeframe.duration * tolerance_bars


class AlertService:
    """Runs the pipeline once per 1m bar per symbol, never concurrently.

    Usage:
        service = AlertService(save_alert=repo.save)
        service.on_alert(notifier.push)

        result = await service.process_bar("SPY", bars_1m, bars_2m, bars_5m, now)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        settings: Settings | None = None,
        save_alert: SaveAlertCallback | None = None,
    ):
        self.settings = settings or get_settings()
        self.config = config or self.settings.engine_config()
        self._save_alert = save_alert
        self._callbacks: list[AlertCallback] = []
        self._states: dict[str, SymbolState] = {}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def on_alert(self, callback: AlertCallback) -> None:
        """Register a listener for emitted alerts."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_alert(self, callback: AlertCallback) -> None:
        """Unregister an alert listener."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _state(self, symbol: str) -> SymbolState:
        if symbol not in self._states:
            self._states[symbol] = SymbolState(
                alerts=deque(maxlen=self.settings.alert_history_size)
            )
        return self._states[symbol]

    def get_state(self, symbol: str) -> SymbolState | None:
        return self._states.get(symbol)

    def reset(self, symbol: str) -> None:
        """Forget all state for ``symbol``."""
        self._states.pop(symbol, None)

    def alert_history(self, symbol: str) -> list[Alert]:
        """Recent alerts for ``symbol``, oldest first."""
        state = self._states.get(symbol)
        return list(state.alerts) if state else []

    def _resolve_windows(
        self,
        state: SymbolState,
        windows: dict[Timeframe, Sequence[Candle]],
        now: datetime,
    ) -> tuple[dict[Timeframe, list[Candle]], list[Timeframe]]:
        resolved = {}
        stale = []
        for timeframe, candles in windows.items():
            aligned = align_window(candles, timeframe, now)
            if is_stale(aligned, timeframe, now, self.settings.staleness_tolerance_bars):
                stale.append(timeframe)
                resolved[timeframe] = state.windows.get(timeframe, aligned)
            else:
                resolved[timeframe] = aligned[-self.settings.buffer_size:]
        return resolved, stale

    async def process_bar(
        self,
        symbol: str,
        candles_1m: Sequence[Candle],
        candles_2m: Sequence[Candle],
        candles_5m: Sequence[Candle],
        now: datetime,
    ) -> ProcessBarResult:
        """
        Run one pipeline cycle for ``symbol``.

        A call arriving while another cycle for the same symbol is still
        running is dropped, as is a repeat of an already processed 1m bar.

        Args:
            symbol: Instrument symbol
            candles_1m: Closed 1m candles, oldest first
            candles_2m: Closed 2m candles, oldest first
            candles_5m: Closed 5m candles, oldest first
            now: Cycle time (the close time of the newest 1m bar)

        Returns:
            ProcessBarResult with the alert, if any
        """
        lock = self._locks[symbol]
        if lock.locked():
            logger.warning(f"Dropping {symbol} bar at {now}: previous cycle still running")
            return ProcessBarResult(skipped=True, reason="Cycle already in flight")

        async with lock:
            state = self._state(symbol)
            try:
                windows, stale = self._resolve_windows(
                    state,
                    {Timeframe.M1: candles_1m, Timeframe.M2: candles_2m, Timeframe.M5: candles_5m},
                    now,
                )
            except TypeError as e:
                # Naive and aware datetimes mixed between ``now`` and the bars
                logger.error(f"Cannot align {symbol} windows to {now}: {e}")
                return ProcessBarResult(skipped=True, reason="Cycle error")
            if stale:
                logger.warning(
                    f"{symbol} stale timeframes at {now}: {[tf.value for tf in stale]}"
                )

            bars_1m = windows[Timeframe.M1]
            last_bar = bars_1m[-1].timestamp if bars_1m else None
            if last_bar is not None and last_bar == state.last_processed:
                return ProcessBarResult(
                    skipped=True, reason="Bar already processed", stale_timeframes=stale
                )

            try:
                cycle = await asyncio.to_thread(
                    run_cycle,
                    bars_1m,
                    windows[Timeframe.M2],
                    windows[Timeframe.M5],
                    now,
                    state.engine,
                    symbol=symbol,
                    config=self.config,
                )
            except Exception as e:
                logger.exception(f"Pipeline cycle failed for {symbol}: {e}")
                return ProcessBarResult(
                    skipped=True, reason="Cycle error", stale_timeframes=stale
                )

            alert = cycle.alert
            next_state = cycle.state

            if alert is not None and self._save_alert:
                try:
                    await self._save_alert(alert)
                except Exception as e:
                    logger.error(
                        f"Failed to save alert {alert.id}: {e}. Alert will NOT be emitted."
                    )
                    alert = None
                    next_state = next_state.model_copy(
                        update={"cooldown": state.engine.cooldown}
                    )

            state.engine = next_state
            state.validator = cycle.validator
            state.last_processed = last_bar
            for timeframe, candles in windows.items():
                if timeframe not in stale:
                    state.windows[timeframe] = candles

            if alert is not None:
                state.alerts.append(alert)
                for callback in list(self._callbacks):
                    try:
                        await callback(alert)
                    except Exception as e:
                        logger.error(f"Alert callback error: {e}")

            return ProcessBarResult(
                alert=alert,
                reason=cycle.reason,
                stale_timeframes=stale,
                cycle=cycle,
            )
