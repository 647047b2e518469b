"""Tests for the 1-minute Trigger."""

import pytest

from conftest import squeeze_windows, trap_candles, trend_candles
from scalp_engine.models import (
    Direction,
    DirectorResult,
    DirectorState,
    TrapModeState,
    TrapType,
    ValidatorResult,
    ValidatorState,
)
from scalp_engine.pipeline import evaluate_trigger

BULL = DirectorResult(state=DirectorState.BULL, bias_score=4)
BEAR = DirectorResult(state=DirectorState.BEAR, bias_score=-4)
LONG_OK = ValidatorResult(state=ValidatorState.BULL, long_valid=True)
SHORT_OK = ValidatorResult(state=ValidatorState.BEAR, short_valid=True)
NO_TRAP = TrapModeState.inactive()


class TestTrigger:
    """Tests for evaluate_trigger."""

    def test_long_breakout(self):
        """Test LONG trigger on a breakout."""
        candles_1m, _, _ = squeeze_windows(direction=1)

        result = evaluate_trigger(candles_1m, BULL, LONG_OK, NO_TRAP)

        assert result.valid
        assert result.direction == Direction.LONG
        assert result.conditions.all_met
        assert result.rvol == pytest.approx(3.0)
        assert result.adx == pytest.approx(100.0)

    def test_short_breakdown(self):
        """Test SHORT trigger on a breakdown."""
        candles_1m, _, _ = squeeze_windows(direction=-1)

        result = evaluate_trigger(candles_1m, BEAR, SHORT_OK, NO_TRAP)

        assert result.valid
        assert result.direction == Direction.SHORT
        assert result.conditions.all_met

    def test_active_trap_blocks(self):
        """An active trap blocks the trigger."""
        candles_1m, _, _ = squeeze_windows()
        trap = TrapModeState(active=True, type=TrapType.UP_WICK, expires_at_candle_index=1)

        result = evaluate_trigger(candles_1m, BULL, LONG_OK, trap)

        assert not result.valid
        assert result.direction is None

    def test_requires_director(self):
        """Trigger needs a Director bias."""
        candles_1m, _, _ = squeeze_windows()

        result = evaluate_trigger(candles_1m, DirectorResult(), LONG_OK, NO_TRAP)

        assert not result.valid

    def test_requires_validator(self):
        """Trigger needs Validator agreement."""
        candles_1m, _, _ = squeeze_windows()

        result = evaluate_trigger(candles_1m, BULL, ValidatorResult.neutral(), NO_TRAP)

        assert not result.valid
        # The conditions themselves still hold
        assert result.conditions.all_met

    def test_requires_volume(self):
        """Trigger needs a volume spike."""
        result = evaluate_trigger(trend_candles(60), BULL, LONG_OK, NO_TRAP)

        assert not result.valid
        assert not result.conditions.rvol
        assert result.rvol == pytest.approx(1.0)

    def test_wrong_side_director(self):
        """Director on the wrong side blocks the trigger."""
        candles_1m, _, _ = squeeze_windows(direction=1)

        result = evaluate_trigger(candles_1m, BEAR, SHORT_OK, NO_TRAP)

        assert not result.valid
        assert not result.conditions.vwap_hysteresis

    def test_insufficient_history(self):
        """Test trigger with too few bars."""
        result = evaluate_trigger(trend_candles(29), BULL, LONG_OK, NO_TRAP)

        assert result == evaluate_trigger([], BULL, LONG_OK, NO_TRAP)
        assert not result.valid

    def test_flat_market(self):
        """Flat bars never trigger."""
        result = evaluate_trigger(trap_candles()[:-1], BULL, LONG_OK, NO_TRAP)

        assert not result.valid
        assert not result.conditions.adx
