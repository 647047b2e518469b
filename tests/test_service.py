"""Tests for the single-flight alert service."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from conftest import NOW, make_candle, squeeze_windows, trend_candles
from scalp_engine.config import Settings
from scalp_engine.models import AlertType, CooldownState, DirectorState, Timeframe
from scalp_engine.service import AlertService, align_window, is_stale


@pytest.fixture
def service():
    return AlertService(settings=Settings())


class TestWindows:
    """Tests for align_window and is_stale."""

    def test_align_drops_open_bars(self):
        """Bars still open at the cycle time are dropped."""
        candles = trend_candles(10, Timeframe.M5, end=NOW + timedelta(minutes=5))

        aligned = align_window(candles, Timeframe.M5, NOW)

        assert aligned == candles[:-1]
        assert aligned[-1].close_time(Timeframe.M5) == NOW

    def test_align_keeps_closed_bars(self):
        """Closed bars are kept."""
        candles = trend_candles(10, Timeframe.M2)

        assert align_window(candles, Timeframe.M2, NOW) == candles

    def test_empty_is_stale(self):
        """An empty window is stale."""
        assert is_stale([], Timeframe.M1, NOW, 2)

    def test_within_tolerance(self):
        """Test window inside the staleness tolerance."""
        candles = trend_candles(10, Timeframe.M5)

        assert not is_stale(candles, Timeframe.M5, NOW + timedelta(minutes=10), 2)

    def test_past_tolerance(self):
        """Test window past the staleness tolerance."""
        candles = trend_candles(10, Timeframe.M5)

        assert is_stale(candles, Timeframe.M5, NOW + timedelta(minutes=11), 2)


class TestProcessBar:
    """Tests for AlertService.process_bar."""

    @pytest.mark.asyncio
    async def test_emits_alert(self, service, bull_windows):
        """Test alert emission and stored state."""
        result = await service.process_bar("SPY", *bull_windows, NOW)

        assert not result.skipped
        assert result.alert is not None
        assert result.alert.type == AlertType.SQUEEZE_LONG
        assert result.stale_timeframes == []
        assert service.alert_history("SPY") == [result.alert]

        state = service.get_state("SPY")
        assert state.last_processed == bull_windows[0][-1].timestamp
        assert state.engine.cooldown.same_direction_blocked
        assert set(state.windows) == {Timeframe.M1, Timeframe.M2, Timeframe.M5}

    @pytest.mark.asyncio
    async def test_state_carries_between_bars(self, service, bull_windows):
        """State from one bar feeds the next."""
        await service.process_bar("SPY", *bull_windows, NOW)
        candles_1m, candles_2m, candles_5m = bull_windows
        next_bar = make_candle(NOW, open=106.4, high=106.5, low=106.3, close=106.45)

        result = await service.process_bar(
            "SPY", candles_1m + [next_bar], candles_2m, candles_5m, NOW + timedelta(minutes=1)
        )

        assert result.alert is None
        # Director stays locked until the next 5m boundary
        assert result.cycle.director == service.get_state("SPY").engine.director
        assert result.cycle.director.locked_until == NOW + timedelta(minutes=5)

    @pytest.mark.asyncio
    async def test_duplicate_bar_skipped(self, service, bull_windows):
        """A bar already processed is skipped."""
        await service.process_bar("SPY", *bull_windows, NOW)

        result = await service.process_bar("SPY", *bull_windows, NOW)

        assert result.skipped
        assert result.reason == "Bar already processed"
        assert len(service.alert_history("SPY")) == 1

    @pytest.mark.asyncio
    async def test_single_flight(self, service, bull_windows):
        """Concurrent calls for one symbol run once."""
        first, second = await asyncio.gather(
            service.process_bar("SPY", *bull_windows, NOW),
            service.process_bar("SPY", *bull_windows, NOW),
        )

        assert not first.skipped
        assert second.skipped
        assert second.reason == "Cycle already in flight"

    @pytest.mark.asyncio
    async def test_symbols_run_independently(self, service, bull_windows):
        """Different symbols run side by side."""
        spy, qqq = await asyncio.gather(
            service.process_bar("SPY", *bull_windows, NOW),
            service.process_bar("QQQ", *bull_windows, NOW),
        )

        assert spy.alert is not None
        assert qqq.alert is not None
        assert qqq.alert.symbol == "QQQ"

    @pytest.mark.asyncio
    async def test_stale_timeframe_uses_last_known(self, service, bull_windows):
        """A stale 5m window is replaced by the last known one."""
        candles_1m, candles_2m, candles_5m = bull_windows
        await service.process_bar("SPY", candles_1m, candles_2m, candles_5m, NOW)
        next_bar = make_candle(NOW, open=106.4, high=106.5, low=106.3, close=106.45)

        result = await service.process_bar(
            "SPY", candles_1m + [next_bar], candles_2m, [], NOW + timedelta(minutes=1)
        )

        assert result.stale_timeframes == [Timeframe.M5]
        assert result.cycle.director.state == DirectorState.BULL
        assert service.get_state("SPY").windows[Timeframe.M5] == candles_5m

    @pytest.mark.asyncio
    async def test_stale_without_history(self, service, bull_windows):
        """A stale window with no history stays empty."""
        candles_1m, candles_2m, _ = bull_windows

        result = await service.process_bar("SPY", candles_1m, candles_2m, [], NOW)

        assert result.stale_timeframes == [Timeframe.M5]
        assert result.alert is None
        assert result.cycle.director.state == DirectorState.CHOP

    @pytest.mark.asyncio
    async def test_cycle_error(self, service, bull_windows, monkeypatch):
        """A failing cycle is reported, not raised."""
        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("scalp_engine.service.run_cycle", explode)

        result = await service.process_bar("SPY", *bull_windows, NOW)

        assert result.skipped
        assert result.reason == "Cycle error"
        assert service.get_state("SPY").last_processed is None

    @pytest.mark.asyncio
    async def test_naive_cycle_time_does_not_raise(self, service, bull_windows):
        """A naive cycle time against aware bars is reported, not raised."""
        naive_now = NOW.replace(tzinfo=None)

        result = await service.process_bar("SPY", *bull_windows, naive_now)

        assert result.skipped
        assert result.reason == "Cycle error"
        assert result.alert is None
        assert service.get_state("SPY").last_processed is None

    @pytest.mark.asyncio
    async def test_reset(self, service, bull_windows):
        """Reset should forget the symbol."""
        await service.process_bar("SPY", *bull_windows, NOW)

        service.reset("SPY")

        assert service.get_state("SPY") is None
        assert service.alert_history("SPY") == []

    @pytest.mark.asyncio
    async def test_history_size(self, bull_windows):
        """History keeps only the configured number of alerts."""
        service = AlertService(settings=Settings(alert_history_size=1))
        later = NOW + timedelta(minutes=5)

        await service.process_bar("SPY", *bull_windows, NOW)
        result = await service.process_bar("SPY", *squeeze_windows(-1, end=later), later)

        assert result.alert is not None
        assert service.alert_history("SPY") == [result.alert]


class TestPersistence:
    """Tests for the save-before-emit contract."""

    @pytest.mark.asyncio
    async def test_saved_before_emit(self, bull_windows):
        """Alert is saved before it is emitted."""
        save = AsyncMock()
        service = AlertService(settings=Settings(), save_alert=save)

        result = await service.process_bar("SPY", *bull_windows, NOW)

        save.assert_awaited_once_with(result.alert)

    @pytest.mark.asyncio
    async def test_save_failure_drops_alert(self, bull_windows):
        """A failed save drops the alert and keeps the cooldown."""
        save = AsyncMock(side_effect=OSError("disk full"))
        callback = AsyncMock()
        service = AlertService(settings=Settings(), save_alert=save)
        service.on_alert(callback)

        result = await service.process_bar("SPY", *bull_windows, NOW)

        assert result.alert is None
        assert result.cycle.alert is not None
        callback.assert_not_awaited()
        assert service.alert_history("SPY") == []
        # Cooldown is not armed by an alert that was never emitted
        assert service.get_state("SPY").engine.cooldown == CooldownState()


class TestCallbacks:
    """Tests for alert listeners."""

    @pytest.mark.asyncio
    async def test_callback_receives_alert(self, service, bull_windows):
        """Listeners receive each alert once."""
        callback = AsyncMock()
        service.on_alert(callback)
        service.on_alert(callback)

        result = await service.process_bar("SPY", *bull_windows, NOW)

        callback.assert_awaited_once_with(result.alert)

    @pytest.mark.asyncio
    async def test_off_alert(self, service, bull_windows):
        """Removed listeners are not called."""
        callback = AsyncMock()
        service.on_alert(callback)
        service.off_alert(callback)

        await service.process_bar("SPY", *bull_windows, NOW)

        callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_block_others(self, service, bull_windows):
        """A failing listener does not stop the others."""
        failing = AsyncMock(side_effect=RuntimeError("push failed"))
        working = AsyncMock()
        service.on_alert(failing)
        service.on_alert(working)

        result = await service.process_bar("SPY", *bull_windows, NOW)

        assert result.alert is not None
        working.assert_awaited_once_with(result.alert)
