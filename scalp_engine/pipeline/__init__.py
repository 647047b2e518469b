"""Director -> Validator -> Trigger -> Trap decision pipeline."""

from scalp_engine.pipeline.chop_filter import check_chop, count_vwap_crosses
from scalp_engine.pipeline.confidence import score_confidence, should_push
from scalp_engine.pipeline.cooldown import check_gate, observe_vwap_touch, record_alert
from scalp_engine.pipeline.director import calculate_director, next_boundary
from scalp_engine.pipeline.orchestrator import CycleResult, run_cycle
from scalp_engine.pipeline.trap import candle_index_of, check_fade, detect_trap
from scalp_engine.pipeline.trigger import evaluate_trigger
from scalp_engine.pipeline.validator import calculate_validator

__all__ = [
    "CycleResult",
    "calculate_director",
    "calculate_validator",
    "candle_index_of",
    "check_chop",
    "check_fade",
    "check_gate",
    "count_vwap_crosses",
    "detect_trap",
    "evaluate_trigger",
    "next_boundary",
    "observe_vwap_touch",
    "record_alert",
    "run_cycle",
    "score_confidence",
    "should_push",
]
