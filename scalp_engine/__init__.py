"""Multi-timeframe scalp signal engine.

The indicator library and the Director -> Validator -> Trigger -> Trap
pipeline are pure computation with no I/O. Per-symbol state is passed in
and returned explicitly; the async service layer owns it between bars.
"""

__version__ = "0.1.0"
