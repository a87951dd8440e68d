"""
Thresholds -- advisory classification of on-hand stock against min/max.

Responsibility:
    Pure function from (product name, quantity, min, max) to a
    ThresholdSignal.  The signal is observational output for operators: it
    never blocks a movement and carries no side effects.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Rules:
    quantity < min  -> BELOW_MINIMUM, carrying the product name and min.
    quantity > max  -> ABOVE_MAXIMUM, carrying the product name and max.
    otherwise       -> WITHIN_RANGE.
The min check wins when min > max and quantity is below both.
"""

from dataclasses import dataclass
from enum import Enum


class ThresholdStatus(str, Enum):
    """Where a quantity sits relative to its configured bounds."""

    BELOW_MINIMUM = "below_minimum"
    ABOVE_MAXIMUM = "above_maximum"
    WITHIN_RANGE = "within_range"


@dataclass(frozen=True)
class ThresholdSignal:
    """
    Result of classifying a product's quantity.

    ``limit`` is the bound that was crossed (min or max), or None when the
    quantity is within range.
    """

    status: ThresholdStatus
    product_name: str
    quantity: int
    limit: int | None = None

    @property
    def is_out_of_range(self) -> bool:
        return self.status != ThresholdStatus.WITHIN_RANGE

    @property
    def message(self) -> str:
        """Operator-facing description of the signal."""
        if self.status == ThresholdStatus.BELOW_MINIMUM:
            return (
                f"Stock of {self.product_name} is too low: {self.quantity} "
                f"units, minimum is {self.limit} units"
            )
        if self.status == ThresholdStatus.ABOVE_MAXIMUM:
            return (
                f"Stock of {self.product_name} is too high: {self.quantity} "
                f"units, maximum is {self.limit} units"
            )
        return f"Stock of {self.product_name} is {self.quantity} units"


def classify_quantity(
    product_name: str,
    quantity: int,
    min_quantity: int,
    max_quantity: int,
) -> ThresholdSignal:
    """Classify ``quantity`` against ``min_quantity`` / ``max_quantity``."""
    if quantity < min_quantity:
        return ThresholdSignal(
            status=ThresholdStatus.BELOW_MINIMUM,
            product_name=product_name,
            quantity=quantity,
            limit=min_quantity,
        )
    if quantity > max_quantity:
        return ThresholdSignal(
            status=ThresholdStatus.ABOVE_MAXIMUM,
            product_name=product_name,
            quantity=quantity,
            limit=max_quantity,
        )
    return ThresholdSignal(
        status=ThresholdStatus.WITHIN_RANGE,
        product_name=product_name,
        quantity=quantity,
    )
