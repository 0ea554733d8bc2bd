#!/usr/bin/env python3
"""
Instruction Plan Tests

Bounded plan buffer, full-range construction, one-sided extensions and
the final TAKE_PAIR encoding.
"""

from dataclasses import replace

import pytest

from launch_migrator.core.actions import (
    CONTRACT_BALANCE, Action, decode_mint_position, decode_settle, decode_take_pair,
    decode_unlock_data, encode_settle
)
from launch_migrator.core.exceptions import PlanCapacityExceeded
from launch_migrator.core.plan import (
    MAX_PLAN_SIZE, Plan, PoolKey,
    build_full_range, extend_one_sided, finalize
)
from launch_migrator.core.tick_calculator import PositionSide
from launch_migrator.core.tick_math import get_sqrt_price_at_tick, max_liquidity_per_tick

from .helpers import CURRENCY, HOOK, RECIPIENT, TOKEN, make_base


class TestPoolKey:

    def test_currency_ordering(self):
        """The smaller address is always currency0"""
        base = make_base()
        assert not base.currency_is_currency0, "0x22.. sorts after 0x11.."
        assert base.currency0 == TOKEN and base.currency1 == CURRENCY
        assert base.side_for(TOKEN) == PositionSide.ABOVE
        assert base.side_for(CURRENCY) == PositionSide.BELOW

    def test_misordered_key_rejected(self):
        """A pool key with currencies out of order cannot be built"""
        with pytest.raises(ValueError):
            PoolKey(CURRENCY, TOKEN, 3000, 60, HOOK)

    def test_pool_id_depends_on_every_field(self):
        """Pool id changes with fee and tick spacing"""
        key = make_base().pool_key
        assert key.pool_id.startswith("0x") and len(key.pool_id) == 66
        assert key.pool_id == PoolKey(TOKEN, CURRENCY, 3000, 60, HOOK).pool_id
        assert key.pool_id != PoolKey(TOKEN, CURRENCY, 500, 60, HOOK).pool_id
        assert key.pool_id != PoolKey(TOKEN, CURRENCY, 3000, 10, HOOK).pool_id


class TestPlanBuffer:
    """Fixed capacity with a separate logical length"""

    def test_capacity_is_hard(self):
        """Appending past capacity raises and leaves the plan untouched"""
        plan = Plan(2)
        settle = encode_settle(CURRENCY, CONTRACT_BALANCE, False)
        plan.append(Action.SETTLE, settle)
        plan.append(Action.SETTLE, settle)

        with pytest.raises(PlanCapacityExceeded):
            plan.append(Action.SETTLE, settle)
        assert len(plan) == 2, "A failed append leaves the plan untouched"

        print("✅ Appending past capacity fails")

    def test_truncation(self):
        """Only the logical entries are handed out"""
        plan = Plan()
        plan.append(Action.SETTLE, b"\x01")
        actions, params = plan.truncated()

        assert plan.capacity == MAX_PLAN_SIZE
        assert actions == bytes([Action.SETTLE])
        assert params == [b"\x01"]

    def test_copy_is_independent(self):
        """Appending to a copy does not touch the original"""
        plan = Plan(4).append(Action.SETTLE, b"\x01")
        clone = plan.copy()
        clone.append(Action.SETTLE, b"\x02")

        assert len(plan) == 1 and len(clone) == 2
        assert plan != clone

    def test_invalid_capacity(self):
        """Zero capacity is rejected"""
        with pytest.raises(ValueError):
            Plan(0)


class TestFullRange:

    def test_full_range_actions(self):
        """MINT plus one SETTLE per currency"""
        base = make_base()
        plan = build_full_range(base, token_amount=500, currency_amount=400)

        assert plan.actions == bytes([0x02, 0x0B, 0x0B])

        mint = decode_mint_position(plan.params[0])
        assert (mint["tick_lower"], mint["tick_upper"]) == (-887220, 887220)
        assert mint["liquidity"] == 500
        assert mint["amount0_max"] == 500, "Token is currency0"
        assert mint["amount1_max"] == 400
        assert mint["owner"] == RECIPIENT
        assert mint["pool_key"] == base.pool_key.to_abi_tuple()

        currency_settle = decode_settle(plan.params[1])
        token_settle = decode_settle(plan.params[2])
        assert currency_settle == {"currency": CURRENCY, "amount": CONTRACT_BALANCE, "payer_is_user": False}
        assert token_settle["currency"] == TOKEN

        print(f"✅ Full range plan: {plan}")

    def test_full_range_needs_three_slots(self):
        """A plan too small for the full range fails loudly"""
        with pytest.raises(PlanCapacityExceeded):
            build_full_range(make_base(), 500, 500, capacity=2)


class TestOneSidedExtension:
    """Extensions return a new plan or None, never a modified input"""

    def setup_method(self):
        self.base = make_base()
        self.plan = build_full_range(self.base, 500, 500)
        self.snapshot = self.plan.truncated()

    def test_extension_above(self):
        """Currency0 goes into a range starting above the current tick"""
        extended = extend_one_sided(self.base, 1000, PositionSide.ABOVE, self.plan)

        assert extended is not None
        assert len(extended) == len(self.plan) + 1, "One extension adds exactly one MINT"
        assert extended.actions[:3] == self.plan.actions
        assert extended.params[:3] == self.plan.params
        assert self.plan.truncated() == self.snapshot

        mint = decode_mint_position(extended.params[3])
        assert (mint["tick_lower"], mint["tick_upper"]) == (60, 887220)
        assert mint["amount0_max"] == 1000 and mint["amount1_max"] == 0
        assert mint["liquidity"] > 0

        print(f"✅ Above extension: liquidity {mint['liquidity']}")

    def test_extension_below(self):
        """Currency1 goes into a range ending at the current tick"""
        extended = extend_one_sided(self.base, 1000, PositionSide.BELOW, self.plan)

        mint = decode_mint_position(extended.params[3])
        assert (mint["tick_lower"], mint["tick_upper"]) == (-887220, 0)
        assert mint["amount0_max"] == 0 and mint["amount1_max"] == 1000

    def test_zero_amount_dropped(self):
        """No liquidity means no extension"""
        assert extend_one_sided(self.base, 0, PositionSide.ABOVE, self.plan) is None
        assert self.plan.truncated() == self.snapshot

    def test_excess_liquidity_dropped(self):
        """Liquidity above the per-tick ceiling is skipped"""
        assert extend_one_sided(self.base, 2 ** 200, PositionSide.ABOVE, self.plan) is None
        assert self.plan.truncated() == self.snapshot

    def test_shared_tick_ceiling_dropped(self):
        """The outer tick carries the full-range liquidity too"""
        ceiling = max_liquidity_per_tick(self.base.tick_spacing)
        crowded = replace(self.base, liquidity=ceiling)
        plan = build_full_range(crowded, 500, 500)

        assert extend_one_sided(self.base, 1000, PositionSide.ABOVE, self.plan) is not None
        assert extend_one_sided(crowded, 1000, PositionSide.ABOVE, plan) is None
        assert extend_one_sided(crowded, 1000, PositionSide.BELOW, plan) is None

        print("✅ Extensions respect the liquidity already on the boundary tick")

    def test_no_room_dropped(self):
        """A price next to the global boundary leaves no range above it"""
        base = make_base(sqrt_price_x96=get_sqrt_price_at_tick(887250))
        plan = build_full_range(base, 500, 500)
        assert extend_one_sided(base, 1000, PositionSide.ABOVE, plan) is None

        print("✅ Non-viable extensions return None")

    def test_two_extensions_and_finalize(self):
        """Both extensions plus TAKE_PAIR fit within capacity"""
        plan = extend_one_sided(self.base, 1000, PositionSide.ABOVE, self.plan)
        plan = extend_one_sided(self.base, 1000, PositionSide.BELOW, plan)
        payload = finalize(plan, self.base)

        actions, params = decode_unlock_data(payload)
        assert actions == bytes([0x02, 0x0B, 0x0B, 0x02, 0x02, 0x11])
        assert len(actions) <= MAX_PLAN_SIZE

        take_pair = decode_take_pair(params[-1])
        assert take_pair == {"currency0": TOKEN, "currency1": CURRENCY, "recipient": HOOK}
        assert len(plan) == 5, "Finalizing does not touch the plan"


class TestFinalize:

    def test_finalized_full_range(self):
        """A finalized full range is four actions"""
        base = make_base()
        payload = finalize(build_full_range(base, 500, 500), base)
        actions, params = decode_unlock_data(payload)

        assert [Action(a) for a in actions] == [
            Action.MINT_POSITION, Action.SETTLE, Action.SETTLE, Action.TAKE_PAIR
        ]
        assert len(params) == 4
