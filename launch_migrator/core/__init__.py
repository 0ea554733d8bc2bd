"""Core migration math: ticks, pricing, liquidity sizing and instruction plans"""

from .tick_math import (
    MIN_TICK, MAX_TICK, MIN_TICK_SPACING, MAX_TICK_SPACING,
    MIN_SQRT_PRICE, MAX_SQRT_PRICE, Q96, Q192, UINT128_MAX,
    get_sqrt_price_at_tick, get_tick_at_sqrt_price, max_liquidity_per_tick
)
from .tick_calculator import (
    PositionSide, TickBounds, EMPTY_BOUNDS,
    floor_tick, strict_ceil_tick, full_range_bounds, one_sided_bounds
)
from .token_pricing import SizedAmounts, convert_price, size_amounts, size_liquidity
from .actions import Action, CONTRACT_BALANCE
from .plan import (
    MAX_PLAN_SIZE, Plan, PoolKey, BasePositionParams,
    build_full_range, extend_one_sided, finalize
)

__all__ = [
    # Tick math
    "MIN_TICK", "MAX_TICK", "MIN_TICK_SPACING", "MAX_TICK_SPACING",
    "MIN_SQRT_PRICE", "MAX_SQRT_PRICE", "Q96", "Q192", "UINT128_MAX",
    "get_sqrt_price_at_tick", "get_tick_at_sqrt_price", "max_liquidity_per_tick",

    # Tick calculator
    "PositionSide", "TickBounds", "EMPTY_BOUNDS",
    "floor_tick", "strict_ceil_tick", "full_range_bounds", "one_sided_bounds",

    # Pricing
    "SizedAmounts", "convert_price", "size_amounts", "size_liquidity",

    # Plans
    "Action", "CONTRACT_BALANCE",
    "MAX_PLAN_SIZE", "Plan", "PoolKey", "BasePositionParams",
    "build_full_range", "extend_one_sided", "finalize"
]
