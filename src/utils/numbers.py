"""Numeric helpers shared by the aggregation and recommendation layers."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, 50.5 -> 51).

    Built-in ``round`` sends halves to the even neighbour, which moves
    percentage shares across the ``> 50`` style thresholds.
    """
    return int(math.floor(value + 0.5))
