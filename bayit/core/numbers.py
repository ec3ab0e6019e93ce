"""Numeric helpers shared by the scoring and stats services."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (Python's round() goes to even)."""
    return math.floor(value + 0.5)


def percentage(part: int, whole: int) -> int:
    """Rounded percentage of part in whole, 0 when whole is 0."""
    if whole == 0:
        return 0
    return round_half_up(part / whole * 100)
