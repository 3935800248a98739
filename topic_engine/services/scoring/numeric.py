"""Rounding, clamping and tier-table lookups used by the scorers."""

import math
from collections.abc import Mapping, Sequence


def round_half_up(value: float) -> int:
    """Round halves toward positive infinity (``2.5 -> 3``, ``-2.5 -> -2``)."""
    return math.floor(value + 0.5)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def points_at_least(value: float, tiers: Sequence[tuple[float, int]], default: int = 0) -> int:
    """Points for the first tier whose threshold ``value`` reaches.

    Tiers are ordered from the highest threshold down.
    """
    for threshold, points in tiers:
        if value >= threshold:
            return points
    return default


def points_at_most(value: float, tiers: Sequence[tuple[float, int]], default: int = 0) -> int:
    """Points for the first tier whose threshold ``value`` does not exceed.

    Tiers are ordered from the lowest threshold up.
    """
    for threshold, points in tiers:
        if value <= threshold:
            return points
    return default


def lookup_by_count(count: int, table: Mapping[int, float], long_value: float) -> float:
    """Value for an exact word count, or ``long_value`` past the table."""
    if count in table:
        return table[count]
    if count > max(table, default=-1):
        return long_value
    return table[min(table)]


def position_value(position: int, table: Sequence[int]) -> int:
    """Entry at ``position``; positions past the end reuse the last entry."""
    if position < 0:
        return table[0]
    return table[min(position, len(table) - 1)]
