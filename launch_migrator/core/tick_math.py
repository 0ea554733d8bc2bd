#!/usr/bin/env python3
"""
Tick Math

Exact integer conversion between ticks and Q64.96 square-root prices,
bit-compatible with the pool's on-chain TickMath library.
"""

from typing import Tuple

# Pool constants
MIN_TICK = -887272
MAX_TICK = 887272
MIN_TICK_SPACING = 1
MAX_TICK_SPACING = 32767  # int16 max
MIN_SQRT_PRICE = 4295128739  # sqrt(1.0001^-887272) * 2^96
MAX_SQRT_PRICE = 1461446703485210103287273052203988822378723970342  # sqrt(1.0001^887272) * 2^96

Q96 = 2 ** 96
Q192 = 2 ** 192
UINT128_MAX = 2 ** 128 - 1
UINT256_MAX = 2 ** 256 - 1

# Q128.128 multipliers for each set bit of |tick|
_TICK_BIT_RATIOS: Tuple[Tuple[int, int], ...] = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)


def get_sqrt_price_at_tick(tick: int) -> int:
    """Convert tick to sqrt price in Q64.96 format using exact integer math"""
    if tick < MIN_TICK or tick > MAX_TICK:
        raise ValueError(f"Tick {tick} out of bounds [{MIN_TICK}, {MAX_TICK}]")

    abs_tick = abs(tick)
    ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001 if abs_tick & 0x1 else 1 << 128
    for bit, multiplier in _TICK_BIT_RATIOS:
        if abs_tick & bit:
            ratio = (ratio * multiplier) >> 128

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96, rounding up
    return (ratio >> 32) + (1 if ratio % (1 << 32) else 0)


def get_tick_at_sqrt_price(sqrt_price_x96: int) -> int:
    """
    Greatest tick whose sqrt price is less than or equal to the given price.

    Uses binary search over the exact tick -> price mapping.
    """
    if sqrt_price_x96 < MIN_SQRT_PRICE or sqrt_price_x96 >= MAX_SQRT_PRICE:
        raise ValueError(f"sqrt_price_x96 {sqrt_price_x96} out of bounds")

    tick_low = MIN_TICK
    tick_high = MAX_TICK

    while tick_high - tick_low > 1:
        tick_mid = (tick_low + tick_high) // 2
        if get_sqrt_price_at_tick(tick_mid) <= sqrt_price_x96:
            tick_low = tick_mid
        else:
            tick_high = tick_mid

    return tick_low


def is_valid_sqrt_price(sqrt_price_x96: int) -> bool:
    return MIN_SQRT_PRICE <= sqrt_price_x96 < MAX_SQRT_PRICE


def max_liquidity_per_tick(tick_spacing: int) -> int:
    """Per-tick liquidity ceiling the pool enforces for a given spacing"""
    if tick_spacing < MIN_TICK_SPACING:
        raise ValueError(f"Tick spacing must be positive, got {tick_spacing}")
    # compressed bounds: floor for the lower end, truncation for the upper end
    min_compressed = MIN_TICK // tick_spacing
    max_compressed = MAX_TICK // tick_spacing
    num_ticks = max_compressed - min_compressed + 1
    return UINT128_MAX // num_ticks
