"""Technical indicators (pure math, no I/O)."""

from scalp_engine.indicators.calculator import IndicatorCalculator, IndicatorSnapshot
from scalp_engine.indicators.indicators import (
    atr,
    candle_arrays,
    ema,
    highest,
    lowest,
    rolling_mean,
    safe_div,
    sma,
    true_range,
)
from scalp_engine.indicators.levels import (
    BounceSignal,
    LevelProximity,
    PivotPoints,
    near_level,
    pivot_points,
    support_resistance,
)
from scalp_engine.indicators.momentum import Divergence, rsi, rsi_divergence
from scalp_engine.indicators.trend import (
    ADXResult,
    CrossSignal,
    EWOResult,
    HeikinAshiCandle,
    HeikinAshiSignal,
    IchimokuResult,
    MACDResult,
    SuperTrendResult,
    TrendDirection,
    TrendStrength,
    adx,
    ewo,
    heikin_ashi,
    ichimoku,
    macd,
    supertrend,
)
from scalp_engine.indicators.volatility import (
    ATRSlope,
    BollingerResult,
    atr_slope,
    bollinger_bands,
)
from scalp_engine.indicators.volume import RVOLResult, VWAPPosition, VWAPResult, rvol, vwap

__all__ = [
    "ADXResult",
    "ATRSlope",
    "BollingerResult",
    "BounceSignal",
    "CrossSignal",
    "Divergence",
    "EWOResult",
    "HeikinAshiCandle",
    "HeikinAshiSignal",
    "IchimokuResult",
    "IndicatorCalculator",
    "IndicatorSnapshot",
    "LevelProximity",
    "MACDResult",
    "PivotPoints",
    "RVOLResult",
    "SuperTrendResult",
    "TrendDirection",
    "TrendStrength",
    "VWAPPosition",
    "VWAPResult",
    "adx",
    "atr",
    "atr_slope",
    "bollinger_bands",
    "candle_arrays",
    "ema",
    "ewo",
    "heikin_ashi",
    "highest",
    "ichimoku",
    "lowest",
    "macd",
    "near_level",
    "pivot_points",
    "rolling_mean",
    "rsi",
    "rsi_divergence",
    "safe_div",
    "sma",
    "support_resistance",
    "supertrend",
    "true_range",
    "vwap",
]
