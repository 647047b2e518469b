"""Engine threshold configuration."""

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Thresholds and periods used by every pipeline stage.

    Defaults are the tuned values for 0DTE index scalping (5-15 minute holds).
    """

    # Alerting
    rvol_threshold: float = Field(default=1.7, gt=0)
    push_confidence_threshold: int = Field(default=72, ge=0, le=100)
    opposite_direction_cooldown_seconds: float = Field(default=180.0, ge=0)
    vwap_touch_tolerance: float = Field(default=0.001, gt=0)  # 0.1%

    # Trend strength
    adx_period: int = Field(default=14, gt=0)
    adx_trend_threshold: float = 18.0
    adx_chop_threshold: float = 16.0
    adx_chop_min_bars: int = Field(default=20, gt=0)

    # Director (5m)
    director_min_bars: int = Field(default=52, gt=0)
    director_lock_minutes: int = Field(default=5, gt=0)
    director_supertrend_period: int = Field(default=10, gt=0)
    director_supertrend_multiplier: float = Field(default=3.0, gt=0)
    director_rsi_bull: float = 55.0
    director_rsi_bear: float = 45.0
    director_bias_threshold: int = Field(default=3, gt=0)

    # Validator (2m) and Trigger (1m)
    validator_min_bars: int = Field(default=30, gt=0)
    trigger_min_bars: int = Field(default=30, gt=0)
    fast_supertrend_period: int = Field(default=7, gt=0)
    fast_supertrend_multiplier: float = Field(default=2.5, gt=0)
    rsi_long_threshold: float = 52.0
    rsi_short_threshold: float = 48.0
    hysteresis_candles: int = Field(default=2, gt=0)

    # Shared indicator periods
    rsi_period: int = Field(default=14, gt=0)
    ewo_short_period: int = Field(default=5, gt=0)
    ewo_long_period: int = Field(default=35, gt=0)
    rvol_lookback: int = Field(default=20, gt=0)
    bollinger_period: int = Field(default=20, gt=0)
    bollinger_std: float = Field(default=2.0, gt=0)
    bollinger_expansion_ratio: float = Field(default=1.1, gt=0)
    bollinger_expansion_lag: int = Field(default=4, gt=0)
    ichimoku_tenkan: int = Field(default=9, gt=0)
    ichimoku_kijun: int = Field(default=26, gt=0)
    ichimoku_senkou_b: int = Field(default=52, gt=0)
    atr_period: int = Field(default=14, gt=0)

    # Chop filter
    vwap_cross_lookback: int = Field(default=10, gt=1)
    vwap_cross_max: int = Field(default=3, gt=0)
    chop_bandwidth_max: float = Field(default=0.01, gt=0)
    chop_vwap_proximity: float = Field(default=0.001, gt=0)

    # Trap mode (1m)
    trap_duration_candles: int = Field(default=3, gt=0)
    trap_baseline_bars: int = Field(default=20, gt=0)
    trap_volume_multiplier: float = Field(default=2.0, gt=0)
    trap_range_multiplier: float = Field(default=1.6, gt=0)
    trap_wick_ratio: float = Field(default=0.3, gt=0, lt=1)
    trap_level_tolerance: float = Field(default=0.001, gt=0)
    trap_fade_confidence: int = Field(default=75, ge=0, le=100)

    # Risk levels in ATR multiples
    squeeze_stop_atr: float = Field(default=0.5, gt=0)
    squeeze_target_atr: float = Field(default=1.0, gt=0)
    trap_stop_atr: float = Field(default=0.3, gt=0)
    trap_target_atr: float = Field(default=0.8, gt=0)
    squeeze_hold_time: str = "5-15 min"
    trap_hold_time: str = "3-8 min"
