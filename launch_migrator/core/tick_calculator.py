#!/usr/bin/env python3
"""
Tick Calculator

Pure integer arithmetic on tick boundaries and spacing: rounding ticks
onto the spacing grid and deriving full-range and one-sided position bounds.
"""

from dataclasses import dataclass
from enum import Enum

from .tick_math import MIN_TICK, MAX_TICK


class PositionSide(Enum):
    """Side of the current price a one-sided position sits on"""
    BELOW = "below"
    ABOVE = "above"


@dataclass(frozen=True)
class TickBounds:
    """Lower/upper tick of a position; (0, 0) means no viable range"""
    lower: int
    upper: int

    @property
    def is_empty(self) -> bool:
        return self.lower == 0 and self.upper == 0


EMPTY_BOUNDS = TickBounds(0, 0)


def _check_spacing(spacing: int):
    if spacing <= 0:
        raise ValueError(f"Tick spacing must be positive, got {spacing}")


def truncating_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero (Python's // rounds toward -inf)"""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def floor_tick(tick: int, spacing: int) -> int:
    """Round toward negative infinity onto a multiple of spacing"""
    _check_spacing(spacing)
    return (tick // spacing) * spacing


def strict_ceil_tick(tick: int, spacing: int) -> int:
    """Smallest multiple of spacing strictly greater than tick"""
    return floor_tick(tick, spacing) + spacing


def min_usable_tick(spacing: int) -> int:
    _check_spacing(spacing)
    return truncating_div(MIN_TICK, spacing) * spacing


def max_usable_tick(spacing: int) -> int:
    _check_spacing(spacing)
    return truncating_div(MAX_TICK, spacing) * spacing


def full_range_bounds(spacing: int) -> TickBounds:
    """
    Widest aligned range for a spacing.

    Truncating division narrows the negative side by up to one spacing unit
    compared to floor division; the result is always inside the global range.
    """
    return TickBounds(min_usable_tick(spacing), max_usable_tick(spacing))


def one_sided_bounds(current_tick: int, spacing: int, side: PositionSide) -> TickBounds:
    """
    Bounds for a single-asset position next to the current tick.

    Args:
        current_tick: Tick of the pool's initial price
        spacing: Pool tick spacing
        side: BELOW for [full-range lower, floor(current)],
              ABOVE for [strict_ceil(current), full-range upper]

    Returns:
        The bounds, or EMPTY_BOUNDS when less than one spacing unit remains
    """
    full_range = full_range_bounds(spacing)

    if side == PositionSide.BELOW:
        bounds = TickBounds(full_range.lower, floor_tick(current_tick, spacing))
    else:
        bounds = TickBounds(strict_ceil_tick(current_tick, spacing), full_range.upper)

    if bounds.upper - bounds.lower < spacing:
        return EMPTY_BOUNDS
    return bounds
