"""Tests for the candle aggregator."""

from datetime import timedelta

from conftest import NOW, make_candle
from scalp_engine.aggregator import AggregationBuffer, CandleAggregator
from scalp_engine.models import Timeframe


def make_1m_candle(minute: int, **kwargs):
    """Helper to create a 1m candle ``minute`` minutes after 15:00."""
    return make_candle(NOW + timedelta(minutes=minute), **kwargs)


class TestAggregationBuffer:
    """Tests for AggregationBuffer."""

    def test_add_single_candle_no_aggregation(self):
        """Adding one candle to a 5m buffer should not trigger aggregation."""
        buffer = AggregationBuffer(Timeframe.M5)

        result = buffer.add(make_1m_candle(0))

        assert result is None
        assert len(buffer.candles_1m) == 1

    def test_aggregate_5m_from_5_candles(self):
        """Five aligned 1m candles should produce one 5m candle."""
        buffer = AggregationBuffer(Timeframe.M5)

        buffer.add(make_1m_candle(0, open=100, high=102, low=99, close=101, volume=10))
        buffer.add(make_1m_candle(1, open=101, high=105, low=100, close=103, volume=20))
        buffer.add(make_1m_candle(2, open=103, high=104, low=98, close=99, volume=15))
        buffer.add(make_1m_candle(3, open=99, high=100, low=98.5, close=99.5, volume=5))
        result = buffer.add(make_1m_candle(4, open=99.5, high=101, low=99, close=100.5, volume=50))

        assert result is not None
        assert result.timestamp == NOW  # First candle's timestamp
        assert result.open == 100
        assert result.high == 105
        assert result.low == 98
        assert result.close == 100.5
        assert result.volume == 100
        assert len(buffer.candles_1m) == 0

    def test_aggregate_2m(self):
        """Two aligned 1m candles should produce one 2m candle."""
        buffer = AggregationBuffer(Timeframe.M2)

        assert buffer.add(make_1m_candle(0, high=100.5, close=100.2)) is None
        result = buffer.add(make_1m_candle(1, high=100.5, close=100.4))

        assert result is not None
        assert result.timestamp == NOW
        assert result.close == 100.4
        assert result.volume == 200

    def test_gap_discards_period(self):
        """A missing minute should discard the whole period."""
        buffer = AggregationBuffer(Timeframe.M5)

        for minute in (0, 1, 3):
            assert buffer.add(make_1m_candle(minute)) is None
        assert buffer.add(make_1m_candle(4)) is None
        assert len(buffer.candles_1m) == 0

        results = [buffer.add(make_1m_candle(minute)) for minute in range(5, 10)]

        assert results[:4] == [None] * 4
        assert results[4] is not None
        assert results[4].timestamp == NOW + timedelta(minutes=5)

    def test_late_start_discards_partial_period(self):
        """Starting mid-period should not emit a partial candle."""
        buffer = AggregationBuffer(Timeframe.M5)

        for minute in (2, 3):
            buffer.add(make_1m_candle(minute))
        results = [buffer.add(make_1m_candle(minute)) for minute in range(4, 10)]

        # Minutes 2-4 never make a full period
        assert results[0] is None
        assert results[-1] is not None
        assert results[-1].timestamp == NOW + timedelta(minutes=5)

    def test_reset(self):
        """Reset should clear the buffer."""
        buffer = AggregationBuffer(Timeframe.M5)
        buffer.add(make_1m_candle(0))
        buffer.add(make_1m_candle(1))

        buffer.reset()

        assert len(buffer.candles_1m) == 0


class TestCandleAggregator:
    """Tests for CandleAggregator."""

    def test_default_timeframes(self):
        """Default aggregator builds 2m and 5m."""
        assert CandleAggregator().timeframes == [Timeframe.M2, Timeframe.M5]

    def test_ignores_1m(self):
        """1m is the input timeframe and never aggregated."""
        aggregator = CandleAggregator([Timeframe.M1, Timeframe.M5])

        assert aggregator.timeframes == [Timeframe.M5]

    def test_completed_bars(self):
        """Each boundary returns only the timeframes it closed."""
        aggregator = CandleAggregator()

        completed = [aggregator.add(make_1m_candle(minute)) for minute in range(5)]

        assert list(completed[1]) == [Timeframe.M2]
        assert completed[2] == {}
        assert list(completed[3]) == [Timeframe.M2]
        assert list(completed[4]) == [Timeframe.M5]
        assert completed[4][Timeframe.M5].volume == 500

    def test_reset(self):
        """Reset should drop partial periods of every timeframe."""
        aggregator = CandleAggregator()
        aggregator.add(make_1m_candle(0))

        aggregator.reset()

        assert aggregator.add(make_1m_candle(1)) == {}
