"""Numeric helpers shared by the forecast and factor models."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves toward +infinity.

    Python's built-in ``round`` uses banker's rounding, which would make
    ``round(31.5)`` and ``round(32.5)`` both land on 32. Factor tables and
    published accuracy numbers are defined with half-up rounding.
    """
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def round_int(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
