#!/usr/bin/env python3
"""
Instruction Plan Builder

Builds the bounded (action, parameter) sequence submitted to the position
manager in one batch:
- Full-range position: MINT + SETTLE(currency) + SETTLE(token)
- Optional one-sided extension: one MINT on a single side of the price
- Finalization: TAKE_PAIR back to the orchestrator, truncated and encoded
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from eth_abi import encode
from eth_utils import keccak

from .actions import (
    CONTRACT_BALANCE, POOL_KEY_ABI, Action,
    encode_mint_position, encode_settle, encode_take_pair, encode_unlock_data
)
from .addresses import address_to_int, normalize_address
from .exceptions import PlanCapacityExceeded
from .tick_calculator import PositionSide, full_range_bounds, one_sided_bounds
from .tick_math import get_tick_at_sqrt_price, max_liquidity_per_tick
from .token_pricing import size_liquidity

logger = logging.getLogger(__name__)

# Largest plan any strategy emits: full range (3) + two one-sided mints + TAKE_PAIR,
# with headroom for variants that settle or sweep extra currencies
MAX_PLAN_SIZE = 8
FULL_RANGE_SIZE = 3
ONE_SIDED_SIZE = 1
FINAL_TAKE_PAIR_SIZE = 1


@dataclass(frozen=True)
class PoolKey:
    """Identifies a pool: ordered currency pair, fee, spacing and hook"""
    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str

    def __post_init__(self):
        if address_to_int(self.currency0) >= address_to_int(self.currency1):
            raise ValueError(f"Currencies out of order: {self.currency0} >= {self.currency1}")

    def to_abi_tuple(self) -> Tuple[str, str, int, int, str]:
        return (self.currency0, self.currency1, self.fee, self.tick_spacing, self.hooks)

    @property
    def pool_id(self) -> str:
        return "0x" + keccak(encode([POOL_KEY_ABI], [self.to_abi_tuple()])).hex()


@dataclass(frozen=True)
class BasePositionParams:
    """Everything shared by the positions of one migration"""
    currency: str
    pool_token: str
    fee: int
    tick_spacing: int
    initial_sqrt_price_x96: int
    liquidity: int
    position_recipient: str
    hooks: str

    @property
    def currency_is_currency0(self) -> bool:
        return address_to_int(self.currency) < address_to_int(self.pool_token)

    @property
    def currency0(self) -> str:
        return self.currency if self.currency_is_currency0 else self.pool_token

    @property
    def currency1(self) -> str:
        return self.pool_token if self.currency_is_currency0 else self.currency

    @property
    def pool_key(self) -> PoolKey:
        return PoolKey(
            normalize_address(self.currency0),
            normalize_address(self.currency1),
            self.fee,
            self.tick_spacing,
            normalize_address(self.hooks),
        )

    def side_for(self, asset: str) -> PositionSide:
        """Single-asset positions of currency0 sit above the price, currency1 below"""
        if normalize_address(asset) == normalize_address(self.currency0):
            return PositionSide.ABOVE
        return PositionSide.BELOW


class Plan:
    """
    Fixed-capacity action buffer with a separate logical length.

    Appending past capacity is a hard failure; the buffer never grows.
    """

    def __init__(self, capacity: int = MAX_PLAN_SIZE):
        if capacity <= 0:
            raise ValueError(f"Plan capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._actions = bytearray(capacity)
        self._params: List[bytes] = [b""] * capacity
        self.length = 0

    def append(self, action: Action, param: bytes) -> "Plan":
        if self.length >= self.capacity:
            raise PlanCapacityExceeded(self.capacity)
        self._actions[self.length] = int(action)
        self._params[self.length] = param
        self.length += 1
        return self

    def copy(self) -> "Plan":
        clone = Plan(self.capacity)
        clone._actions = bytearray(self._actions)
        clone._params = list(self._params)
        clone.length = self.length
        return clone

    @property
    def actions(self) -> bytes:
        return bytes(self._actions[:self.length])

    @property
    def params(self) -> List[bytes]:
        return self._params[:self.length]

    def truncated(self) -> Tuple[bytes, List[bytes]]:
        return self.actions, self.params

    def encode(self) -> bytes:
        return encode_unlock_data(*self.truncated())

    def __len__(self) -> int:
        return self.length

    def __eq__(self, other) -> bool:
        if not isinstance(other, Plan):
            return NotImplemented
        return self.truncated() == other.truncated()

    def __repr__(self) -> str:
        names = [Action(a).name for a in self.actions]
        return f"Plan({self.length}/{self.capacity}: {names})"


def build_full_range(
    base: BasePositionParams,
    token_amount: int,
    currency_amount: int,
    capacity: int = MAX_PLAN_SIZE
) -> Plan:
    """MINT the full-range position, then settle the currency and the token"""
    bounds = full_range_bounds(base.tick_spacing)

    if base.currency_is_currency0:
        amount0_max, amount1_max = currency_amount, token_amount
    else:
        amount0_max, amount1_max = token_amount, currency_amount

    plan = Plan(capacity)
    plan.append(Action.MINT_POSITION, encode_mint_position(
        base.pool_key.to_abi_tuple(),
        bounds.lower,
        bounds.upper,
        base.liquidity,
        amount0_max,
        amount1_max,
        base.position_recipient,
    ))
    plan.append(Action.SETTLE, encode_settle(base.currency, CONTRACT_BALANCE, False))
    plan.append(Action.SETTLE, encode_settle(base.pool_token, CONTRACT_BALANCE, False))
    return plan


def _one_sided_liquidity(
    base: BasePositionParams,
    lower: int,
    upper: int,
    amount0: int,
    amount1: int
) -> int:
    liquidity = size_liquidity(base.initial_sqrt_price_x96, lower, upper, amount0, amount1)
    if liquidity == 0:
        raise ValueError("Interval too narrow for any liquidity")
    # the range shares its outer tick with the full-range position
    if base.liquidity + liquidity > max_liquidity_per_tick(base.tick_spacing):
        raise ValueError(
            f"Liquidity {liquidity} on top of {base.liquidity} exceeds the per-tick maximum"
        )
    return liquidity


def extend_one_sided(
    base: BasePositionParams,
    amount: int,
    side: PositionSide,
    plan: Plan
) -> Optional[Plan]:
    """
    Try to add a single-asset position on one side of the initial price.

    Returns a new plan with exactly one extra MINT, or None when there is no
    viable range or the liquidity cannot be sized. The input plan is never
    modified.
    """
    current_tick = get_tick_at_sqrt_price(base.initial_sqrt_price_x96)
    bounds = one_sided_bounds(current_tick, base.tick_spacing, side)
    if bounds.is_empty:
        logger.debug("No one-sided range %s tick %d", side.value, current_tick)
        return None

    # above the price only currency0 is held, below only currency1
    amount0, amount1 = (amount, 0) if side == PositionSide.ABOVE else (0, amount)

    try:
        liquidity = _one_sided_liquidity(base, bounds.lower, bounds.upper, amount0, amount1)
    except ValueError as e:
        logger.debug("Skipping one-sided position %s: %s", side.value, e)
        return None

    extended = plan.copy()
    extended.append(Action.MINT_POSITION, encode_mint_position(
        base.pool_key.to_abi_tuple(),
        bounds.lower,
        bounds.upper,
        liquidity,
        amount0,
        amount1,
        base.position_recipient,
    ))
    return extended


def finalize(plan: Plan, base: BasePositionParams) -> bytes:
    """Append TAKE_PAIR to the orchestrator and encode the truncated plan"""
    final = plan.copy()
    final.append(Action.TAKE_PAIR, encode_take_pair(base.currency0, base.currency1, base.hooks))
    return final.encode()
