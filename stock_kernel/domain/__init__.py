"""
Domain layer - pure types and functions with no database access.

- clock: injectable time source
- thresholds: min/max classification of on-hand stock
- dtos: frozen snapshots returned by services and selectors
"""

from stock_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from stock_kernel.domain.thresholds import (
    ThresholdSignal,
    ThresholdStatus,
    classify_quantity,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "ThresholdSignal",
    "ThresholdStatus",
    "classify_quantity",
]
