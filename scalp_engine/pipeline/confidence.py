"""Confidence scoring (0-100) over Director, Validator and Trigger."""

from scalp_engine.models import (
    DirectorResult,
    EngineConfig,
    TriggerResult,
    ValidatorResult,
    ValidatorState,
)

MAX_CONFIDENCE = 100

STRONG_BIAS_SCORE = 4

# Points per confirming condition
WEIGHTS = {
    "director_strong": 20,
    "validator_aligned": 15,
    "vwap_hysteresis": 15,
    "rvol": 10,
    "adx": 10,
    "rsi": 10,
    "ewo": 5,
    "pivot": 5,
    "bollinger": 5,
}


def confidence_factors(
    director: DirectorResult,
    validator: ValidatorResult,
    trigger: TriggerResult,
    config: EngineConfig,
) -> dict[str, bool]:
    """Which weighted conditions hold, keyed like :data:`WEIGHTS`."""
    conditions = trigger.conditions
    return {
        "director_strong": abs(director.bias_score) >= STRONG_BIAS_SCORE,
        "validator_aligned": validator.state != ValidatorState.NEUTRAL,
        "vwap_hysteresis": conditions.vwap_hysteresis,
        "rvol": trigger.rvol >= config.rvol_threshold,
        "adx": trigger.adx_rising or trigger.adx >= config.adx_trend_threshold,
        "rsi": conditions.rsi,
        "ewo": conditions.ewo,
        "pivot": conditions.pivot_confirm,
        "bollinger": conditions.boll_confirm,
    }


def score_confidence(
    director: DirectorResult,
    validator: ValidatorResult,
    trigger: TriggerResult,
    config: EngineConfig | None = None,
) -> int:
    """Additive score over the confirming conditions, capped at 100."""
    config = config or EngineConfig()
    factors = confidence_factors(director, validator, trigger, config)
    score = sum(WEIGHTS[name] for name, met in factors.items() if met)
    return min(score, MAX_CONFIDENCE)


def should_push(confidence: int, config: EngineConfig | None = None) -> bool:
    """Push-notify alerts at or above the configured confidence."""
    config = config or EngineConfig()
    return confidence >= config.push_confidence_threshold
