#!/usr/bin/env python3
"""
Liquidity Amounts

Exact integer liquidity sizing for concentrated liquidity positions:
- Liquidity from token amounts (rounding down)
- Token amounts owed for a liquidity amount (rounding up when paying in)
- Next sqrt price after an exact input
"""

from typing import Tuple

from .tick_math import Q96, UINT128_MAX


# Safe math helpers
def mul_div(a: int, b: int, denominator: int) -> int:
    """Multiply two numbers and divide by denominator, rounding down"""
    if denominator == 0:
        raise ValueError("Division by zero")
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """Multiply and divide with rounding up"""
    if denominator == 0:
        raise ValueError("Division by zero")
    return (a * b + denominator - 1) // denominator


def to_uint128(value: int) -> int:
    """Checked downcast to uint128"""
    if value < 0 or value > UINT128_MAX:
        raise ValueError(f"Value {value} does not fit in uint128")
    return value


def _sorted_prices(sqrt_price_a_x96: int, sqrt_price_b_x96: int) -> Tuple[int, int]:
    if sqrt_price_a_x96 > sqrt_price_b_x96:
        return sqrt_price_b_x96, sqrt_price_a_x96
    return sqrt_price_a_x96, sqrt_price_b_x96


def get_liquidity_for_amount0(sqrt_price_a_x96: int, sqrt_price_b_x96: int, amount0: int) -> int:
    """Liquidity received for amount0 over [a, b]: amount0 * (sqrtA * sqrtB) / (sqrtB - sqrtA)"""
    sqrt_price_a_x96, sqrt_price_b_x96 = _sorted_prices(sqrt_price_a_x96, sqrt_price_b_x96)
    intermediate = mul_div(sqrt_price_a_x96, sqrt_price_b_x96, Q96)
    return mul_div(amount0, intermediate, sqrt_price_b_x96 - sqrt_price_a_x96)


def get_liquidity_for_amount1(sqrt_price_a_x96: int, sqrt_price_b_x96: int, amount1: int) -> int:
    """Liquidity received for amount1 over [a, b]: amount1 / (sqrtB - sqrtA)"""
    sqrt_price_a_x96, sqrt_price_b_x96 = _sorted_prices(sqrt_price_a_x96, sqrt_price_b_x96)
    return mul_div(amount1, Q96, sqrt_price_b_x96 - sqrt_price_a_x96)


def get_liquidity_for_amounts(
    sqrt_price_x96: int,
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    amount0: int,
    amount1: int
) -> int:
    """
    Maximum liquidity that the given amounts can back at the current price.

    Below the range only token0 counts, above it only token1, inside it the
    binding asset decides. The result is not downcast; callers check width.
    """
    sqrt_price_a_x96, sqrt_price_b_x96 = _sorted_prices(sqrt_price_a_x96, sqrt_price_b_x96)

    if sqrt_price_x96 <= sqrt_price_a_x96:
        return get_liquidity_for_amount0(sqrt_price_a_x96, sqrt_price_b_x96, amount0)
    elif sqrt_price_x96 < sqrt_price_b_x96:
        liquidity0 = get_liquidity_for_amount0(sqrt_price_x96, sqrt_price_b_x96, amount0)
        liquidity1 = get_liquidity_for_amount1(sqrt_price_a_x96, sqrt_price_x96, amount1)
        return min(liquidity0, liquidity1)
    return get_liquidity_for_amount1(sqrt_price_a_x96, sqrt_price_b_x96, amount1)


def get_amount0_delta(
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
    round_up: bool = False
) -> int:
    """Calculate amount0 delta for liquidity in price range with proper rounding"""
    sqrt_price_a_x96, sqrt_price_b_x96 = _sorted_prices(sqrt_price_a_x96, sqrt_price_b_x96)

    if liquidity == 0 or sqrt_price_a_x96 == sqrt_price_b_x96:
        return 0
    if sqrt_price_a_x96 == 0:
        raise ValueError("sqrt price cannot be zero")

    numerator1 = liquidity << 96  # liquidity * Q96
    numerator2 = sqrt_price_b_x96 - sqrt_price_a_x96

    if round_up:
        return mul_div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_price_b_x96), 1, sqrt_price_a_x96
        )
    return mul_div(numerator1, numerator2, sqrt_price_b_x96 * sqrt_price_a_x96)


def get_amount1_delta(
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
    round_up: bool = False
) -> int:
    """Calculate amount1 delta for liquidity in price range with proper rounding"""
    sqrt_price_a_x96, sqrt_price_b_x96 = _sorted_prices(sqrt_price_a_x96, sqrt_price_b_x96)

    if liquidity == 0 or sqrt_price_a_x96 == sqrt_price_b_x96:
        return 0

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_price_b_x96 - sqrt_price_a_x96, Q96)
    return mul_div(liquidity, sqrt_price_b_x96 - sqrt_price_a_x96, Q96)


def get_amounts_for_liquidity(
    sqrt_price_x96: int,
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
    round_up: bool = False
) -> Tuple[int, int]:
    """Token amounts backing a liquidity amount over [a, b] at the current price"""
    sqrt_price_a_x96, sqrt_price_b_x96 = _sorted_prices(sqrt_price_a_x96, sqrt_price_b_x96)

    if sqrt_price_x96 <= sqrt_price_a_x96:
        return get_amount0_delta(sqrt_price_a_x96, sqrt_price_b_x96, liquidity, round_up), 0
    elif sqrt_price_x96 < sqrt_price_b_x96:
        amount0 = get_amount0_delta(sqrt_price_x96, sqrt_price_b_x96, liquidity, round_up)
        amount1 = get_amount1_delta(sqrt_price_a_x96, sqrt_price_x96, liquidity, round_up)
        return amount0, amount1
    return 0, get_amount1_delta(sqrt_price_a_x96, sqrt_price_b_x96, liquidity, round_up)


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int
) -> int:
    """Next sqrt price after adding amount0: L * sqrt_P / (L + amount0 * sqrt_P)"""
    if amount == 0:
        return sqrt_price_x96
    if liquidity == 0:
        raise ValueError("Liquidity cannot be zero")

    numerator1 = liquidity << 96
    return mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 + amount * sqrt_price_x96)


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int
) -> int:
    """Next sqrt price after adding amount1: sqrt_P + amount1 / L"""
    if amount == 0:
        return sqrt_price_x96
    if liquidity == 0:
        raise ValueError("Liquidity cannot be zero")

    return sqrt_price_x96 + mul_div(amount, Q96, liquidity)


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool
) -> int:
    """Calculate next sqrt price from input amount"""
    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_in)
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in)
