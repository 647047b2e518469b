"""Chop filter: cross-timeframe noise veto consulted before the Trigger."""

import logging
from typing import Sequence

from scalp_engine.indicators import adx, bollinger_bands, candle_arrays, vwap
from scalp_engine.models import Candle, ChopCheck, DirectorResult, EngineConfig, Timeframe

logger = logging.getLogger(__name__)


def _adx_chop(candles: Sequence[Candle], config: EngineConfig) -> bool:
    """ADX below the chop threshold and falling."""
    if len(candles) < config.adx_chop_min_bars:
        return False
    _, highs, lows, closes, _ = candle_arrays(candles)
    trend = adx(highs, lows, closes, config.adx_period)
    if not trend.adx:
        return False
    return trend.current < config.adx_chop_threshold and trend.falling


def count_vwap_crosses(closes: Sequence[float], vwap_value: float) -> int:
    """Number of times consecutive closes switch side of ``vwap_value``."""
    crosses = 0
    for prev, curr in zip(closes, closes[1:]):
        if (prev > vwap_value) != (curr > vwap_value):
            crosses += 1
    return crosses


def check_chop(
    candles_5m: Sequence[Candle],
    candles_2m: Sequence[Candle],
    candles_1m: Sequence[Candle],
    director: DirectorResult,
    config: EngineConfig | None = None,
) -> ChopCheck:
    """
    Decide whether the market is too noisy to alert on.

    Checks, in order: price inside the 5m cloud; ADX < 16 and falling on
    5m or 2m; three or more 1m VWAP crosses in the last 10 bars; tight 1m
    Bollinger bands with price sitting on VWAP. The first hit wins.
    """
    config = config or EngineConfig()

    if director.inside_cloud:
        return ChopCheck(is_chop=True, reason="Price inside 5m Ichimoku cloud")

    for timeframe, candles in ((Timeframe.M5, candles_5m), (Timeframe.M2, candles_2m)):
        if _adx_chop(candles, config):
            return ChopCheck(
                is_chop=True,
                reason=f"ADX < {config.adx_chop_threshold:g} and falling on {timeframe.value}",
            )

    if not candles_1m:
        return ChopCheck()

    _, highs, lows, closes, volumes = candle_arrays(candles_1m)
    session_vwap = vwap(highs, lows, closes, volumes).value

    if len(candles_1m) >= config.vwap_cross_lookback:
        recent = closes[-config.vwap_cross_lookback:].tolist()
        crosses = count_vwap_crosses(recent, session_vwap)
        if crosses >= config.vwap_cross_max:
            return ChopCheck(
                is_chop=True,
                reason=f"VWAP crossed {crosses} times in last {config.vwap_cross_lookback} min",
            )

    if len(candles_1m) >= config.bollinger_period:
        bands = bollinger_bands(closes, config.bollinger_period, config.bollinger_std)
        near_vwap = session_vwap > 0 and (
            abs(closes[-1] - session_vwap) / session_vwap < config.chop_vwap_proximity
        )
        if bands.middle and bands.bandwidth < config.chop_bandwidth_max and near_vwap:
            return ChopCheck(is_chop=True, reason="Tight Bollinger bands with VWAP oscillation")

    return ChopCheck()
