"""Tests for the 5-minute Director."""

from datetime import datetime, timedelta, timezone

from conftest import NOW, flat_candles, trend_candles
from scalp_engine.models import DirectorResult, DirectorState, EngineConfig, Timeframe
from scalp_engine.pipeline import calculate_director, next_boundary


class TestNextBoundary:
    def test_mid_period(self):
        """Test boundary from inside a period."""
        now = datetime(2025, 1, 6, 15, 2, 30, tzinfo=timezone.utc)

        assert next_boundary(now, 5) == datetime(2025, 1, 6, 15, 5, tzinfo=timezone.utc)

    def test_on_boundary_moves_to_next(self):
        """A time on a boundary moves to the following one."""
        now = datetime(2025, 1, 6, 15, 5, tzinfo=timezone.utc)

        assert next_boundary(now, 5) == datetime(2025, 1, 6, 15, 10, tzinfo=timezone.utc)

    def test_crosses_hour(self):
        """Test boundary rolling into the next hour."""
        now = datetime(2025, 1, 6, 15, 58, tzinfo=timezone.utc)

        assert next_boundary(now, 5) == datetime(2025, 1, 6, 16, 0, tzinfo=timezone.utc)


class TestDirector:
    """Tests for calculate_director."""

    def test_insufficient_history_is_chop_without_lock(self):
        """Short history gives an unlocked CHOP."""
        result = calculate_director(trend_candles(51, Timeframe.M5), NOW)

        assert result.state == DirectorState.CHOP
        assert result.bias_score == 0
        assert result.locked_until is None

    def test_uptrend_is_bull(self):
        """Test BULL bias on a steady uptrend."""
        result = calculate_director(trend_candles(60, Timeframe.M5), NOW)

        assert result.state == DirectorState.BULL
        assert result.bias_score >= 4
        assert result.votes.super_trend == 1
        assert result.votes.vwap == 1
        assert result.votes.rsi == 1
        assert result.votes.ichimoku == 1
        assert not result.inside_cloud

    def test_downtrend_is_bear(self):
        """Test BEAR bias on a steady downtrend."""
        result = calculate_director(trend_candles(60, Timeframe.M5, direction=-1), NOW)

        assert result.state == DirectorState.BEAR
        assert result.bias_score <= -4

    def test_adx_without_rising_does_not_vote(self):
        """Flat ADX gives no ADX vote."""
        # A perfectly one-sided trend pins ADX at 100, which is not rising
        result = calculate_director(trend_candles(60, Timeframe.M5), NOW)

        assert result.votes.adx == 0

    def test_inside_cloud_is_chop(self):
        """Price inside the cloud forces CHOP."""
        result = calculate_director(flat_candles(60, Timeframe.M5), NOW)

        assert result.inside_cloud
        assert result.state == DirectorState.CHOP

    def test_locked_until_next_boundary(self):
        """Result is locked until the next 5m boundary."""
        now = NOW + timedelta(minutes=2)
        result = calculate_director(trend_candles(60, Timeframe.M5), now)

        assert result.locked_until == NOW + timedelta(minutes=5)

    def test_cached_within_boundary(self):
        """Locked result is reused within the boundary."""
        first = calculate_director(trend_candles(60, Timeframe.M5), NOW + timedelta(minutes=1))
        bear = trend_candles(60, Timeframe.M5, direction=-1)

        for minute in range(2, 5):
            cached = calculate_director(bear, NOW + timedelta(minutes=minute), first)
            assert cached == first

    def test_recomputed_after_boundary(self):
        """Result is recomputed once the lock passes."""
        first = calculate_director(trend_candles(60, Timeframe.M5), NOW + timedelta(minutes=1))
        bear = trend_candles(60, Timeframe.M5, direction=-1)

        result = calculate_director(bear, NOW + timedelta(minutes=5), first)

        assert result.state == DirectorState.BEAR

    def test_insufficient_history_ignores_cache(self):
        """Short history wins over a cached result."""
        cached = DirectorResult(
            state=DirectorState.BULL, bias_score=4, locked_until=NOW + timedelta(minutes=5)
        )

        result = calculate_director(trend_candles(10, Timeframe.M5), NOW, cached)

        assert result.state == DirectorState.CHOP

    def test_custom_bias_threshold(self):
        """Test configured bias threshold."""
        config = EngineConfig(director_bias_threshold=6)

        result = calculate_director(trend_candles(60, Timeframe.M5), NOW, config=config)

        assert result.state == DirectorState.CHOP
