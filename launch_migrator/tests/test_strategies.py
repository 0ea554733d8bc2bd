#!/usr/bin/env python3
"""
Strategy Variant Tests

Plan shapes, transfer sizing and the hooks each strategy adds on top of
the full-range migration.
"""

import pytest

from launch_migrator.core.actions import Action, decode_mint_position, decode_unlock_data
from launch_migrator.core.addresses import BEFORE_INITIALIZE_FLAG, BEFORE_SWAP_FLAG
from launch_migrator.core.exceptions import NotGovernance, SwapsNotAllowed
from launch_migrator.core.state import MigrationData
from launch_migrator.core.tick_math import Q96, Q192
from launch_migrator.simulation.chain import SimulatedChain
from launch_migrator.simulation.virtual_token import SimulatedVirtualToken
from launch_migrator.strategies import (
    AdvancedStrategy, FullRangeStrategy, GovernedStrategy, VirtualTokenStrategy
)

from .helpers import GOVERNANCE, OUTSIDER, TOKEN, make_base

UNDERLYING = "0x9999999999999999999999999999999999999999"


def make_data(token_amount: int, currency_amount: int, leftover_currency: int,
              reserve_supply: int = 500) -> MigrationData:
    return MigrationData(
        price_x192=Q192,
        sqrt_price_x96=Q96,
        token_amount=token_amount,
        currency_amount=currency_amount,
        leftover_currency=leftover_currency,
        liquidity=min(token_amount, currency_amount),
        reserve_supply=reserve_supply,
        raised_amount=currency_amount + leftover_currency
    )


def plan_actions(payload: bytes) -> list:
    actions, _ = decode_unlock_data(payload)
    return [Action(a).name for a in actions]


class TestMigrationData:
    """Sized amounts are checked on construction"""

    def test_valid_data(self):
        """Reserve and raised amounts bound the sized amounts"""
        data = make_data(500, 250, 250)
        assert data.unused_reserve == 0
        assert data.to_dict()["raised_amount"] == 500

    def test_token_amount_above_reserve(self):
        """More tokens than the reserve holds is rejected"""
        with pytest.raises(ValueError):
            make_data(501, 250, 250)

    def test_currency_amount_above_raised(self):
        """More currency than was raised is rejected"""
        with pytest.raises(ValueError):
            MigrationData(
                price_x192=Q192, sqrt_price_x96=Q96, token_amount=500, currency_amount=501,
                leftover_currency=0, liquidity=500, reserve_supply=500, raised_amount=500
            )

    def test_negative_leftover(self):
        """Leftover currency cannot go negative"""
        with pytest.raises(ValueError):
            MigrationData(
                price_x192=Q192, sqrt_price_x96=Q96, token_amount=500, currency_amount=250,
                leftover_currency=-1, liquidity=250, reserve_supply=500, raised_amount=500
            )

        print("✅ MigrationData invariants enforced")


class TestFullRangeStrategy:

    def test_plan_and_transfers(self):
        """Four actions; only the sized amounts are transferred"""
        strategy = FullRangeStrategy()
        data = make_data(500, 250, 250)

        payload = strategy.build_plan(data, make_base())
        assert plan_actions(payload) == ["MINT_POSITION", "SETTLE", "SETTLE", "TAKE_PAIR"]
        assert strategy.token_transfer_amount(data) == 500
        assert strategy.currency_transfer_amount(data) == 250, "Leftover stays with the orchestrator"
        assert strategy.hook_permissions == BEFORE_INITIALIZE_FLAG

        print("✅ Full range: 4 actions, exact transfers")


class TestAdvancedStrategy:
    """Optimistic transfers and up to two one-sided extensions"""

    def test_both_extensions(self):
        """Unused reserve above, leftover currency below"""
        strategy = AdvancedStrategy(True, True)
        data = make_data(250, 250, 250)
        base = make_base(tick_spacing=60)

        payload = strategy.build_plan(data, base)
        actions, params = decode_unlock_data(payload)

        assert len(actions) == 6
        assert plan_actions(payload) == [
            "MINT_POSITION", "SETTLE", "SETTLE", "MINT_POSITION", "MINT_POSITION", "TAKE_PAIR"
        ]

        token_mint = decode_mint_position(params[3])
        currency_mint = decode_mint_position(params[4])
        # token is currency0, so it sits above the price; currency below
        assert token_mint["tick_lower"] == 60 and token_mint["amount0_max"] == 250
        assert currency_mint["tick_upper"] == 0 and currency_mint["amount1_max"] == 250

        print("✅ Advanced: full range + token above + currency below")

    def test_optimistic_transfer_amounts(self):
        """Transfers assume every enabled extension succeeds"""
        strategy = AdvancedStrategy(True, True)
        unused_reserve = make_data(250, 500, 0)
        leftover = make_data(500, 250, 250)

        assert strategy.token_transfer_amount(unused_reserve) == 500, "Whole reserve is sent"
        assert strategy.currency_transfer_amount(unused_reserve) == 500
        assert strategy.token_transfer_amount(leftover) == 500
        assert strategy.currency_transfer_amount(leftover) == 500, "Leftover is sent too"

    def test_toggles_off(self):
        """Disabled extensions behave like the full-range strategy"""
        strategy = AdvancedStrategy(False, False)
        data = make_data(250, 250, 250)

        assert plan_actions(strategy.build_plan(data, make_base())) == [
            "MINT_POSITION", "SETTLE", "SETTLE", "TAKE_PAIR"
        ]
        assert strategy.token_transfer_amount(data) == 250
        assert strategy.currency_transfer_amount(data) == 250

    def test_nothing_to_extend(self):
        """Reserve fully used and no leftover: identical to the full-range plan"""
        data = make_data(500, 500, 0)
        base = make_base()

        advanced = AdvancedStrategy(True, True).build_plan(data, base)
        full_range = FullRangeStrategy().build_plan(data, base)
        assert advanced == full_range

    def test_dropped_extension(self, caplog):
        """An extension that cannot be sized is skipped, not fatal"""
        strategy = AdvancedStrategy(True, False)
        data = make_data(500, 500, 0, reserve_supply=500 + 2 ** 200)

        with caplog.at_level("INFO"):
            payload = strategy.build_plan(data, make_base())
        assert len(plan_actions(payload)) == 4
        assert "dropped" in caplog.text
        # transfers are still sized before the plan is known
        assert strategy.token_transfer_amount(data) == data.reserve_supply

    def test_describe(self):
        """Description lists both toggles"""
        description = AdvancedStrategy(True, False).describe()
        assert description["strategy"] == "advanced"
        assert description["create_one_sided_token_position"] is True
        assert description["create_one_sided_currency_position"] is False


class TestGovernedStrategy:
    """Swaps stay blocked until governance approves trading"""

    def setup_method(self):
        self.strategy = GovernedStrategy(GOVERNANCE)

    def test_hook_permissions(self):
        """Governed pools also need the before-swap flag"""
        assert self.strategy.hook_permissions == BEFORE_INITIALIZE_FLAG | BEFORE_SWAP_FLAG

    def test_swaps_blocked_until_approved(self):
        """Only governance can open trading, and only once"""
        with pytest.raises(SwapsNotAllowed):
            self.strategy.before_swap(OUTSIDER)

        with pytest.raises(NotGovernance):
            self.strategy.approve_trading(OUTSIDER)
        assert not self.strategy.trading_approved

        self.strategy.approve_trading(GOVERNANCE)
        self.strategy.before_swap(OUTSIDER)

        # one-way and repeatable
        self.strategy.approve_trading(GOVERNANCE)
        assert self.strategy.trading_approved

        print("✅ Trading gate opens only for governance")

    def test_plan_matches_full_range(self):
        """The trading gate does not change the plan"""
        data = make_data(500, 500, 0)
        base = make_base()
        assert self.strategy.build_plan(data, base) == FullRangeStrategy().build_plan(data, base)


class TestVirtualTokenStrategy:
    """Pool trades the underlying; planning is delegated"""

    def setup_method(self):
        self.chain = SimulatedChain()
        self.virtual_token = SimulatedVirtualToken(self.chain, TOKEN, UNDERLYING)
        self.strategy = VirtualTokenStrategy(GovernedStrategy(GOVERNANCE), self.virtual_token)

    def test_pool_token_is_underlying(self):
        """The pool trades the underlying, not the virtual token"""
        assert self.strategy.pool_token(TOKEN) == UNDERLYING
        assert self.strategy.hook_permissions == BEFORE_INITIALIZE_FLAG | BEFORE_SWAP_FLAG

    def test_delegates_swap_gate(self):
        """Swap gating comes from the inner strategy"""
        with pytest.raises(SwapsNotAllowed):
            self.strategy.before_swap(OUTSIDER)

    def test_unwrap_before_transfer(self):
        """Transferred amounts are unwrapped first"""
        self.virtual_token.mint_backed(OUTSIDER, 100)
        self.strategy.prepare_token_transfer(OUTSIDER, 60)

        assert self.chain.balance_of(TOKEN, OUTSIDER) == 40
        assert self.chain.balance_of(UNDERLYING, OUTSIDER) == 60
        assert self.virtual_token.backing() == 40

        print("✅ Virtual tokens unwrapped into the underlying")

    def test_describe(self):
        """Description names the inner strategy and the underlying"""
        description = self.strategy.describe()
        assert description["strategy"] == "virtual"
        assert description["inner"] == "governed"
        assert description["underlying"] == UNDERLYING
