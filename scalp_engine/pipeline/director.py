"""Director: 5-minute bias classifier.

Six indicator votes in {-1, 0, +1} are summed into a bias score. The
result is locked until the next 5-minute boundary so that intra-candle
invocations keep seeing the same bias.
"""

import logging
from datetime import datetime, timedelta
from typing import Sequence

from scalp_engine.indicators import IndicatorCalculator, TrendDirection
from scalp_engine.indicators.calculator import IndicatorSnapshot
from scalp_engine.models import (
    Candle,
    DirectorResult,
    DirectorState,
    DirectorVotes,
    EngineConfig,
)

logger = logging.getLogger(__name__)


def next_boundary(now: datetime, minutes: int) -> datetime:
    """First ``minutes``-aligned boundary strictly after ``now``."""
    floored = now.replace(second=0, microsecond=0) - timedelta(minutes=now.minute % minutes)
    return floored + timedelta(minutes=minutes)


def _sign(positive: bool, negative: bool) -> int:
    if positive:
        return 1
    if negative:
        return -1
    return 0


def _vote(snapshot: IndicatorSnapshot, config: EngineConfig) -> DirectorVotes:
    st = snapshot.supertrend
    super_trend = _sign(st.current == 1, st.current == -1)

    vwap_value = snapshot.vwap.value
    rsi_value = snapshot.rsi_current
    ewo = snapshot.ewo

    # ADX only confirms the SuperTrend side; a DI direction that contradicts
    # SuperTrend scores 0.
    adx = snapshot.adx
    contradicts = (super_trend == 1 and adx.direction == TrendDirection.BEARISH) or (
        super_trend == -1 and adx.direction == TrendDirection.BULLISH
    )
    trending = adx.current >= config.adx_trend_threshold and adx.rising
    adx_vote = super_trend if trending and not contradicts else 0

    cloud = snapshot.ichimoku
    ichimoku_vote = 0 if cloud.inside_cloud else _sign(cloud.above_cloud, cloud.below_cloud)

    return DirectorVotes(
        super_trend=super_trend,
        vwap=_sign(snapshot.close > vwap_value, snapshot.close < vwap_value),
        rsi=_sign(rsi_value > config.director_rsi_bull, rsi_value < config.director_rsi_bear),
        ewo=_sign(ewo.current > 0 and ewo.rising, ewo.current < 0 and ewo.falling),
        adx=adx_vote,
        ichimoku=ichimoku_vote,
    )


def calculate_director(
    candles_5m: Sequence[Candle],
    now: datetime,
    previous: DirectorResult | None = None,
    config: EngineConfig | None = None,
) -> DirectorResult:
    """
    Classify the 5-minute bias.

    Args:
        candles_5m: Closed 5m candles, oldest first
        now: Current time of the cycle
        previous: Result from the previous cycle, reused while locked
        config: Engine thresholds

    Returns:
        DirectorResult. With insufficient history the neutral CHOP result
        (no lock) is returned.
    """
    config = config or EngineConfig()

    if len(candles_5m) < config.director_min_bars:
        return DirectorResult.neutral()

    if previous is not None and previous.is_locked(now):
        return previous

    snapshot = IndicatorCalculator(config).calculate(
        candles_5m,
        supertrend_period=config.director_supertrend_period,
        supertrend_multiplier=config.director_supertrend_multiplier,
    )
    votes = _vote(snapshot, config)
    bias_score = votes.total
    inside_cloud = snapshot.ichimoku.inside_cloud

    if inside_cloud:
        state = DirectorState.CHOP
    elif bias_score >= config.director_bias_threshold:
        state = DirectorState.BULL
    elif bias_score <= -config.director_bias_threshold:
        state = DirectorState.BEAR
    else:
        state = DirectorState.CHOP

    result = DirectorResult(
        state=state,
        bias_score=bias_score,
        votes=votes,
        locked_until=next_boundary(now, config.director_lock_minutes),
        inside_cloud=inside_cloud,
    )
    logger.debug(
        f"Director {state.value} score={bias_score} inside_cloud={inside_cloud} "
        f"locked_until={result.locked_until}"
    )
    return result
