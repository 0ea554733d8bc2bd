#!/usr/bin/env python3
"""
Simulated Collaborator Tests

Ledger and unit-of-work behaviour of the simulated chain, plus the pool
and position manager rules the migration relies on.
"""

import pytest

from launch_migrator.core.actions import CONTRACT_BALANCE, Action, encode_settle, encode_unlock_data
from launch_migrator.core.exceptions import (
    CurrencyNotSettled, DeadlinePassed, InsufficientBalance, PoolNotInitialized, SimulationError
)
from launch_migrator.core.plan import BasePositionParams, PoolKey, build_full_range, finalize
from launch_migrator.core.tick_math import Q96
from launch_migrator.simulation.chain import SimulatedChain
from launch_migrator.simulation.pool_manager import SimulatedPoolManager
from launch_migrator.simulation.position_manager import SimulatedPositionManager
from launch_migrator.simulation.scenario import POOL_MANAGER_ADDRESS, POSITION_MANAGER_ADDRESS

from .helpers import CURRENCY, OUTSIDER, RECIPIENT, TOKEN, TRADER

# No hook flags: the pool manager never calls back into this address
PLAIN_HOOKS = "0x0000000000000000000000000000000000004000"


class TestSimulatedChain:

    def setup_method(self):
        self.chain = SimulatedChain()

    def test_ledger(self):
        """Mint, transfer and burn keep balances consistent"""
        self.chain.mint(TOKEN, TRADER, 100)
        self.chain.transfer(TOKEN, TRADER, OUTSIDER, 40)
        self.chain.burn(TOKEN, OUTSIDER, 10)

        assert self.chain.balance_of(TOKEN, TRADER) == 60
        assert self.chain.balance_of(TOKEN, OUTSIDER) == 30
        assert self.chain.total_supply(TOKEN) == 90

        with pytest.raises(InsufficientBalance):
            self.chain.transfer(TOKEN, TRADER, OUTSIDER, 61)

    def test_clock(self):
        """Blocks advance forwards only"""
        start = self.chain.timestamp
        self.chain.advance_to_block(11)
        assert self.chain.block_number == 11
        assert self.chain.timestamp == start + 10 * 12

        self.chain.advance_to_block(5)
        assert self.chain.block_number == 11, "The clock never moves backwards"

    def test_atomic_rolls_back(self):
        """A failed unit of work restores ledger and registry"""
        self.chain.mint(TOKEN, TRADER, 100)

        with pytest.raises(InsufficientBalance):
            with self.chain.atomic():
                self.chain.transfer(TOKEN, TRADER, OUTSIDER, 50)
                self.chain.register(OUTSIDER, object())
                self.chain.transfer(TOKEN, TRADER, OUTSIDER, 51)

        assert self.chain.balance_of(TOKEN, TRADER) == 100
        assert self.chain.balance_of(TOKEN, OUTSIDER) == 0
        assert not self.chain.has_code(OUTSIDER)

        print("✅ Failed unit of work rolled back")

    def test_registry(self):
        """One contract per address"""
        marker = object()
        self.chain.register(OUTSIDER, marker)
        assert self.chain.contract_at(OUTSIDER) is marker

        with pytest.raises(ValueError):
            self.chain.register(OUTSIDER, object())
        with pytest.raises(KeyError):
            self.chain.contract_at(TRADER)


class TestPoolAndPositionManager:

    def setup_method(self):
        self.chain = SimulatedChain()
        self.pool_manager = SimulatedPoolManager(self.chain, POOL_MANAGER_ADDRESS)
        self.position_manager = SimulatedPositionManager(
            self.chain, POSITION_MANAGER_ADDRESS, self.pool_manager
        )
        self.key = PoolKey(TOKEN, CURRENCY, 3000, 60, PLAIN_HOOKS)
        self.base = BasePositionParams(
            currency=CURRENCY,
            pool_token=TOKEN,
            fee=3000,
            tick_spacing=60,
            initial_sqrt_price_x96=Q96,
            liquidity=1000,
            position_recipient=RECIPIENT,
            hooks=PLAIN_HOOKS
        )

    def fund_position_manager(self, amount: int):
        self.chain.mint(TOKEN, POSITION_MANAGER_ADDRESS, amount)
        self.chain.mint(CURRENCY, POSITION_MANAGER_ADDRESS, amount)

    def test_add_liquidity_requires_pool(self):
        """Liquidity needs an initialized pool"""
        with pytest.raises(PoolNotInitialized):
            self.pool_manager.add_liquidity(self.key, RECIPIENT, -60, 60, 1000)

    def test_add_liquidity_rules(self):
        """Tick order, alignment and liquidity bounds are enforced"""
        self.pool_manager.initialize(OUTSIDER, self.key, Q96)

        with pytest.raises(ValueError):
            self.pool_manager.add_liquidity(self.key, RECIPIENT, 60, -60, 1000)
        with pytest.raises(ValueError):
            self.pool_manager.add_liquidity(self.key, RECIPIENT, -50, 60, 1000)
        with pytest.raises(SimulationError):
            self.pool_manager.add_liquidity(self.key, RECIPIENT, -60, 60, 0)
        with pytest.raises(SimulationError):
            self.pool_manager.add_liquidity(self.key, RECIPIENT, -60, 60, 2 ** 127)

    def test_execute_full_range_plan(self):
        """A finalized plan mints and returns the surplus"""
        self.pool_manager.initialize(OUTSIDER, self.key, Q96)
        self.fund_position_manager(2000)

        payload = finalize(build_full_range(self.base, 2000, 2000), self.base)
        self.position_manager.modify_liquidities(OUTSIDER, payload, self.chain.timestamp)

        positions = self.position_manager.positions_of(RECIPIENT)
        assert len(positions) == 1
        position = positions[0]
        assert position.liquidity == 1000
        assert 0 < position.amount0 <= 2000 and 0 < position.amount1 <= 2000

        # the unused balance came back to the hooks address through TAKE_PAIR
        assert self.chain.balance_of(TOKEN, PLAIN_HOOKS) == 2000 - position.amount0
        assert self.chain.balance_of(CURRENCY, PLAIN_HOOKS) == 2000 - position.amount1
        assert self.chain.balance_of(TOKEN, POOL_MANAGER_ADDRESS) == position.amount0

        summary = self.pool_manager.get_pool_summary(self.key)
        assert summary["liquidity"] == 1000
        assert summary["initialized_ticks"] == [-887220, 887220]

        print(f"✅ Full range minted for ({position.amount0}, {position.amount1})")

    def test_unsettled_batch_rejected(self):
        """Open deltas fail the whole batch"""
        self.pool_manager.initialize(OUTSIDER, self.key, Q96)
        self.fund_position_manager(2000)

        plan = build_full_range(self.base, 2000, 2000)
        # no TAKE_PAIR: the surplus credit stays open
        payload = plan.encode()
        with pytest.raises(CurrencyNotSettled):
            self.position_manager.modify_liquidities(OUTSIDER, payload, self.chain.timestamp)

        assert self.position_manager.positions_of(RECIPIENT) == []
        assert self.chain.balance_of(TOKEN, POSITION_MANAGER_ADDRESS) == 2000

    def test_deadline(self):
        """Expired batches are rejected"""
        payload = encode_unlock_data(
            bytes([Action.SETTLE]), [encode_settle(TOKEN, CONTRACT_BALANCE, False)]
        )
        with pytest.raises(DeadlinePassed):
            self.position_manager.modify_liquidities(OUTSIDER, payload, self.chain.timestamp - 1)
