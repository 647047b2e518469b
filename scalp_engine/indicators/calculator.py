"""Per-timeframe indicator snapshot used by every pipeline stage."""

from dataclasses import dataclass, field
from typing import Sequence

from scalp_engine.indicators.indicators import atr, candle_arrays, latest, previous
from scalp_engine.indicators.levels import PivotPoints, pivot_points
from scalp_engine.indicators.momentum import RSI_NEUTRAL, rsi
from scalp_engine.indicators.trend import (
    ADXResult,
    EWOResult,
    IchimokuResult,
    SuperTrendResult,
    adx,
    ewo,
    ichimoku,
    supertrend,
)
from scalp_engine.indicators.volatility import BollingerResult, bollinger_bands
from scalp_engine.indicators.volume import RVOLResult, VWAPResult, rvol, vwap
from scalp_engine.models.candle import Candle
from scalp_engine.models.config import EngineConfig

# ATR used for stop/target sizing when the series is too short
ATR_FALLBACK = 1.0


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Indicator values for one candle window, recomputed every cycle."""

    bars: int = 0
    close: float = 0.0
    rsi: list[float] = field(default_factory=list)
    adx: ADXResult = field(default_factory=ADXResult)
    supertrend: SuperTrendResult = field(default_factory=SuperTrendResult)
    ewo: EWOResult = field(default_factory=EWOResult)
    bollinger: BollingerResult = field(default_factory=BollingerResult)
    vwap: VWAPResult = field(default_factory=VWAPResult)
    atr: list[float] = field(default_factory=list)
    ichimoku: IchimokuResult = field(default_factory=IchimokuResult)
    rvol: RVOLResult = field(default_factory=RVOLResult)
    pivots: PivotPoints = field(default_factory=PivotPoints)

    @property
    def rsi_current(self) -> float:
        return latest(self.rsi, default=RSI_NEUTRAL)

    @property
    def rsi_previous(self) -> float:
        return previous(self.rsi, default=RSI_NEUTRAL)

    @property
    def rsi_rising(self) -> bool:
        return self.rsi_current > self.rsi_previous

    @property
    def rsi_falling(self) -> bool:
        return self.rsi_current < self.rsi_previous

    @property
    def atr_current(self) -> float:
        value = latest(self.atr)
        return value if value > 0 else ATR_FALLBACK


class IndicatorCalculator:
    """Calculator for all indicators the pipeline reads from one timeframe.

    Periods come from :class:`EngineConfig`; the SuperTrend settings differ
    per timeframe and are passed per call.
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()

    def calculate(
        self,
        candles: Sequence[Candle],
        supertrend_period: int | None = None,
        supertrend_multiplier: float | None = None,
    ) -> IndicatorSnapshot:
        """
        Calculate every indicator for the given candle window.

        Args:
            candles: Ordered candles, oldest first
            supertrend_period: SuperTrend ATR period (fast setting by default)
            supertrend_multiplier: SuperTrend band multiplier

        Returns:
            IndicatorSnapshot; an empty window yields the neutral snapshot
        """
        if not candles:
            return IndicatorSnapshot()

        cfg = self.config
        _, highs, lows, closes, volumes = candle_arrays(candles)

        return IndicatorSnapshot(
            bars=len(candles),
            close=float(closes[-1]),
            rsi=rsi(closes, cfg.rsi_period),
            adx=adx(highs, lows, closes, cfg.adx_period),
            supertrend=supertrend(
                highs,
                lows,
                closes,
                supertrend_period or cfg.fast_supertrend_period,
                supertrend_multiplier or cfg.fast_supertrend_multiplier,
            ),
            ewo=ewo(closes, cfg.ewo_short_period, cfg.ewo_long_period),
            bollinger=bollinger_bands(closes, cfg.bollinger_period, cfg.bollinger_std),
            vwap=vwap(highs, lows, closes, volumes),
            atr=atr(highs, lows, closes, cfg.atr_period),
            ichimoku=ichimoku(
                highs,
                lows,
                closes,
                cfg.ichimoku_tenkan,
                cfg.ichimoku_kijun,
                cfg.ichimoku_senkou_b,
            ),
            rvol=rvol(volumes, cfg.rvol_lookback),
            pivots=pivot_points(candles[-2] if len(candles) >= 2 else None),
        )
