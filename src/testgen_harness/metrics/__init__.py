"""
Metrics Layer

Numeric extraction rules and the per-item metrics fold.
"""

from testgen_harness.metrics.extraction import extract_first_integer, extract_last_decimal
from testgen_harness.metrics.reducer import MetricsReducer, reduce_events

__all__ = [
    "extract_first_integer",
    "extract_last_decimal",
    "MetricsReducer",
    "reduce_events",
]
