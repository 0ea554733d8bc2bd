#!/usr/bin/env python3
"""
Token Pricing

Converts an auction clearing price into the pool's native price and sizes
the token/currency amounts and full-range liquidity of the migrated position.

Raw clearing prices are currency-per-token ratios in Q96 fixed point. The
pool quotes token1/token0, so the raw price is inverted when the currency
is currency0.
"""

import math
from dataclasses import dataclass
from typing import Tuple

from .exceptions import InvalidPrice
from .liquidity_amounts import get_liquidity_for_amounts, mul_div
from .tick_math import (
    Q96, Q192, UINT256_MAX, get_sqrt_price_at_tick, is_valid_sqrt_price
)


@dataclass(frozen=True)
class SizedAmounts:
    """Token and currency amounts committed to the full-range position"""
    token_amount: int
    currency_amount: int
    leftover_currency: int


def convert_to_price_x192(price: int, currency_is_currency0: bool) -> int:
    """Raw Q96 currency-per-token price -> Q192 token1/token0 price"""
    if price == 0:
        raise InvalidPrice(price)

    if currency_is_currency0:
        # 2^192 / price keeps the inverse in Q96
        price = mul_div(Q96, Q96, price)

    price_x192 = price << 96
    if price_x192 > UINT256_MAX:
        raise InvalidPrice(price_x192)
    return price_x192


def convert_to_sqrt_price_x96(price_x192: int) -> int:
    """Square root of a Q192 price, checked against the pool's valid range"""
    sqrt_price_x96 = math.isqrt(price_x192)
    if not is_valid_sqrt_price(sqrt_price_x96):
        raise InvalidPrice(price_x192)
    return sqrt_price_x96


def convert_price(price: int, currency_is_currency0: bool) -> Tuple[int, int]:
    """
    Convert a raw clearing price into pool-native fixed point.

    Args:
        price: Q96 currency-per-token clearing price
        currency_is_currency0: Whether the currency sorts before the token

    Returns:
        (price_x192, sqrt_price_x96)
    """
    price_x192 = convert_to_price_x192(price, currency_is_currency0)
    return price_x192, convert_to_sqrt_price_x96(price_x192)


def size_amounts(
    price_x192: int,
    currency_amount: int,
    reserve_supply: int,
    currency_is_currency0: bool
) -> SizedAmounts:
    """
    Size the token amount that spending the whole currency amount implies.

    When that exceeds the reserve supply, the token amount is clamped to the
    reserve and the currency actually needed at the same price is recomputed.
    The price itself is never adjusted.
    """
    if currency_is_currency0:
        token_amount = mul_div(price_x192, currency_amount, Q192)
    else:
        token_amount = mul_div(currency_amount, Q192, price_x192)

    if token_amount <= reserve_supply:
        return SizedAmounts(token_amount, currency_amount, 0)

    if currency_is_currency0:
        needed_currency = mul_div(reserve_supply, Q192, price_x192)
    else:
        needed_currency = mul_div(price_x192, reserve_supply, Q192)

    return SizedAmounts(reserve_supply, needed_currency, currency_amount - needed_currency)


def size_liquidity(
    sqrt_price_x96: int,
    lower_tick: int,
    upper_tick: int,
    amount0: int,
    amount1: int
) -> int:
    """Liquidity backed by amount0/amount1 over [lower_tick, upper_tick] at the given price"""
    return get_liquidity_for_amounts(
        sqrt_price_x96,
        get_sqrt_price_at_tick(lower_tick),
        get_sqrt_price_at_tick(upper_tick),
        amount0,
        amount1
    )
