#!/usr/bin/env python3
"""
Simulated Pool Manager

Singleton-style pool registry with exact tick math:
- One-shot pool initialization with the before-initialize hook
- Tick-range liquidity accounting with the per-tick liquidity ceiling
- Exact-input swaps within the active range, gated by the before-swap hook
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..core.addresses import BEFORE_INITIALIZE_FLAG, BEFORE_SWAP_FLAG, has_permission, normalize_address
from ..core.exceptions import PoolAlreadyInitialized, PoolNotInitialized, SimulationError
from ..core.liquidity_amounts import (
    get_amount0_delta, get_amount1_delta, get_amounts_for_liquidity, get_next_sqrt_price_from_input
)
from ..core.plan import PoolKey
from ..core.tick_math import (
    MAX_TICK, MAX_TICK_SPACING, MIN_TICK, MIN_TICK_SPACING,
    get_sqrt_price_at_tick, get_tick_at_sqrt_price, is_valid_sqrt_price, max_liquidity_per_tick
)
from ..engine.interfaces import PoolManagerInterface

logger = logging.getLogger(__name__)

FEE_DENOMINATOR = 1_000_000


@dataclass
class TickInfo:
    """Liquidity referencing a tick"""
    liquidity_gross: int = 0
    liquidity_net: int = 0


@dataclass
class PoolState:
    """State of a single initialized pool"""
    key: PoolKey
    sqrt_price_x96: int
    tick: int
    liquidity: int = 0
    ticks: Dict[int, TickInfo] = field(default_factory=dict)
    positions: Dict[Tuple[str, int, int], int] = field(default_factory=dict)

    def active_range(self) -> Tuple[int, int]:
        """Nearest initialized ticks around the current tick"""
        below = [t for t in self.ticks if t <= self.tick]
        above = [t for t in self.ticks if t > self.tick]
        return (max(below) if below else MIN_TICK, min(above) if above else MAX_TICK)


class SimulatedPoolManager(PoolManagerInterface):
    """Holds every pool and the assets backing their liquidity"""

    def __init__(self, chain, address: str):
        self.chain = chain
        self.address = normalize_address(address)
        self.pools: Dict[str, PoolState] = {}
        chain.register(self.address, self)

    def snapshot(self) -> Dict[str, PoolState]:
        return copy.deepcopy(self.pools)

    def restore(self, snapshot: Dict[str, PoolState]):
        self.pools = snapshot

    def get_pool(self, key: PoolKey) -> PoolState:
        pool = self.pools.get(key.pool_id)
        if pool is None:
            raise PoolNotInitialized(key.pool_id)
        return pool

    def find_pool(self, pool_id: str) -> Optional[PoolState]:
        return self.pools.get(pool_id)

    def is_initialized(self, key: PoolKey) -> bool:
        return key.pool_id in self.pools

    def initialize(self, sender: str, key: PoolKey, sqrt_price_x96: int) -> int:
        if not MIN_TICK_SPACING <= key.tick_spacing <= MAX_TICK_SPACING:
            raise ValueError(f"Tick spacing {key.tick_spacing} out of bounds")
        if key.fee > FEE_DENOMINATOR:
            raise ValueError(f"Fee {key.fee} exceeds {FEE_DENOMINATOR}")
        if not is_valid_sqrt_price(sqrt_price_x96):
            raise ValueError(f"sqrt_price_x96 {sqrt_price_x96} out of bounds")

        if has_permission(key.hooks, BEFORE_INITIALIZE_FLAG):
            self.chain.contract_at(key.hooks).before_initialize(sender, key, sqrt_price_x96)

        pool_id = key.pool_id
        if pool_id in self.pools:
            raise PoolAlreadyInitialized(pool_id)

        tick = get_tick_at_sqrt_price(sqrt_price_x96)
        self.pools[pool_id] = PoolState(key=key, sqrt_price_x96=sqrt_price_x96, tick=tick)
        logger.debug("Initialized pool %s at tick %d", pool_id, tick)
        return tick

    def _update_tick(self, pool: PoolState, tick: int, liquidity: int, upper: bool):
        info = pool.ticks.setdefault(tick, TickInfo())
        info.liquidity_gross += liquidity
        info.liquidity_net += -liquidity if upper else liquidity

        ceiling = max_liquidity_per_tick(pool.key.tick_spacing)
        if info.liquidity_gross > ceiling:
            raise SimulationError(f"Tick {tick} liquidity {info.liquidity_gross} exceeds {ceiling}")

    def add_liquidity(self, key: PoolKey, owner: str, tick_lower: int, tick_upper: int,
                      liquidity: int) -> Tuple[int, int]:
        """
        Add liquidity to a range.

        Returns:
            (amount0, amount1) owed to the pool, rounded up
        """
        pool = self.get_pool(key)
        spacing = key.tick_spacing

        if tick_lower >= tick_upper:
            raise ValueError(f"Ticks misordered: {tick_lower} >= {tick_upper}")
        if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
            raise ValueError(f"Range [{tick_lower}, {tick_upper}] outside tick bounds")
        if tick_lower % spacing or tick_upper % spacing:
            raise ValueError(f"Range [{tick_lower}, {tick_upper}] not aligned to spacing {spacing}")
        if liquidity <= 0:
            raise SimulationError("Cannot add an empty position")

        self._update_tick(pool, tick_lower, liquidity, upper=False)
        self._update_tick(pool, tick_upper, liquidity, upper=True)

        position_key = (normalize_address(owner), tick_lower, tick_upper)
        pool.positions[position_key] = pool.positions.get(position_key, 0) + liquidity

        if tick_lower <= pool.tick < tick_upper:
            pool.liquidity += liquidity

        return get_amounts_for_liquidity(
            pool.sqrt_price_x96,
            get_sqrt_price_at_tick(tick_lower),
            get_sqrt_price_at_tick(tick_upper),
            liquidity,
            round_up=True
        )

    def swap(self, sender: str, key: PoolKey, zero_for_one: bool, amount_in: int) -> Tuple[int, int]:
        """
        Exact-input swap that stays inside the active liquidity range.

        Returns:
            (amount_in, amount_out)
        """
        if amount_in <= 0:
            raise ValueError("Swap amount must be positive")
        if has_permission(key.hooks, BEFORE_SWAP_FLAG):
            self.chain.contract_at(key.hooks).before_swap(sender, key, zero_for_one, amount_in)

        pool = self.get_pool(key)
        if pool.liquidity == 0:
            raise SimulationError("No active liquidity at the current price")

        amount_after_fee = amount_in * (FEE_DENOMINATOR - key.fee) // FEE_DENOMINATOR
        next_sqrt_price = get_next_sqrt_price_from_input(
            pool.sqrt_price_x96, pool.liquidity, amount_after_fee, zero_for_one
        )

        range_lower, range_upper = pool.active_range()
        if not get_sqrt_price_at_tick(range_lower) <= next_sqrt_price < get_sqrt_price_at_tick(range_upper):
            raise SimulationError("Swap would leave the active liquidity range")

        if zero_for_one:
            amount_out = get_amount1_delta(next_sqrt_price, pool.sqrt_price_x96, pool.liquidity)
            asset_in, asset_out = key.currency0, key.currency1
        else:
            amount_out = get_amount0_delta(pool.sqrt_price_x96, next_sqrt_price, pool.liquidity)
            asset_in, asset_out = key.currency1, key.currency0

        with self.chain.atomic():
            self.chain.transfer(asset_in, sender, self.address, amount_in)
            self.chain.transfer(asset_out, self.address, sender, amount_out)
            pool.sqrt_price_x96 = next_sqrt_price
            pool.tick = get_tick_at_sqrt_price(next_sqrt_price)

        logger.debug("Swap in pool %s: %d in, %d out", key.pool_id, amount_in, amount_out)
        return amount_in, amount_out

    def get_pool_summary(self, key: PoolKey) -> dict:
        pool = self.get_pool(key)
        return {
            "pool_id": key.pool_id,
            "sqrt_price_x96": pool.sqrt_price_x96,
            "tick": pool.tick,
            "liquidity": pool.liquidity,
            "positions": len(pool.positions),
            "initialized_ticks": sorted(pool.ticks)
        }
