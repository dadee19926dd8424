"""Numeric helpers shared by the scoring and pricing engines."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def round_to_cents(value: float) -> float:
    """Round to two decimal places, halves going up."""
    return math.floor(value * 100 + 0.5) / 100


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def clamp_score(value: float) -> int:
    """Round then clamp into the 0-100 score range."""
    return int(clamp(round_half_up(value)))
