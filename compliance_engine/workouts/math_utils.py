"""Rounding and clamping shared by the detector and the scorer."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values.

    Python's built-in ``round`` rounds halves to even, which would make a 72.5
    average score a 72.
    """
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round and clamp a score into [0, 100]."""
    return max(0, min(100, round_half_up(value)))
