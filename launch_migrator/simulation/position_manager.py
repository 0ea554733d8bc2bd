#!/usr/bin/env python3
"""
Simulated Position Manager

Executes encoded instruction plans against the pool manager. Each batch
tracks a per-currency delta: MINT debits what the position needs, SETTLE
credits what the manager pays in, TAKE_PAIR pays out credits. Every delta
must be zero when the batch ends.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Dict, List

from ..core.actions import (
    CONTRACT_BALANCE, OPEN_DELTA, Action,
    decode_mint_position, decode_settle, decode_take_pair, decode_unlock_data
)
from ..core.addresses import NATIVE_CURRENCY, normalize_address
from ..core.exceptions import (
    CurrencyNotSettled, DeadlinePassed, MaximumAmountExceeded, SimulationError
)
from ..core.plan import PoolKey
from ..engine.interfaces import PositionManagerInterface

logger = logging.getLogger(__name__)


@dataclass
class PositionInfo:
    """A minted liquidity position"""
    token_id: int
    owner: str
    pool_key: PoolKey
    tick_lower: int
    tick_upper: int
    liquidity: int
    amount0: int
    amount1: int

    def to_dict(self) -> dict:
        return {
            "token_id": self.token_id,
            "owner": self.owner,
            "pool_id": self.pool_key.pool_id,
            "tick_lower": self.tick_lower,
            "tick_upper": self.tick_upper,
            "liquidity": self.liquidity,
            "amount0": self.amount0,
            "amount1": self.amount1
        }


class SimulatedPositionManager(PositionManagerInterface):
    """Batch executor for MINT_POSITION, SETTLE and TAKE_PAIR"""

    def __init__(self, chain, address: str, pool_manager):
        self.chain = chain
        self.address = normalize_address(address)
        self.pool_manager = pool_manager
        self.positions: Dict[int, PositionInfo] = {}
        self.next_token_id = 1
        chain.register(self.address, self)

    def snapshot(self) -> tuple:
        return copy.copy(self.positions), self.next_token_id

    def restore(self, snapshot: tuple):
        self.positions, self.next_token_id = snapshot

    def positions_of(self, owner: str) -> List[PositionInfo]:
        owner = normalize_address(owner)
        return [p for p in self.positions.values() if p.owner == owner]

    def modify_liquidities(self, sender: str, unlock_data: bytes, deadline: int, value: int = 0):
        if self.chain.timestamp > deadline:
            raise DeadlinePassed(deadline, self.chain.timestamp)

        actions, params = decode_unlock_data(unlock_data)
        if len(actions) != len(params):
            raise SimulationError(f"{len(actions)} actions for {len(params)} params")

        with self.chain.atomic():
            if value > 0:
                self.chain.transfer(NATIVE_CURRENCY, sender, self.address, value)

            deltas: Dict[str, int] = {}
            for action, param in zip(actions, params):
                self._execute(Action(action), param, deltas)

            for currency, delta in deltas.items():
                if delta != 0:
                    raise CurrencyNotSettled(currency, delta)

        logger.debug("Executed %d actions for %s", len(actions), sender)

    def _execute(self, action: Action, param: bytes, deltas: Dict[str, int]):
        if action == Action.MINT_POSITION:
            self._mint_position(decode_mint_position(param), deltas)
        elif action == Action.SETTLE:
            self._settle(decode_settle(param), deltas)
        elif action == Action.TAKE_PAIR:
            self._take_pair(decode_take_pair(param), deltas)
        else:
            raise SimulationError(f"Unsupported action {action!r}")

    def _mint_position(self, params: dict, deltas: Dict[str, int]):
        key = PoolKey(*params["pool_key"])
        amount0, amount1 = self.pool_manager.add_liquidity(
            key, self.address, params["tick_lower"], params["tick_upper"], params["liquidity"]
        )
        if amount0 > params["amount0_max"]:
            raise MaximumAmountExceeded(params["amount0_max"], amount0)
        if amount1 > params["amount1_max"]:
            raise MaximumAmountExceeded(params["amount1_max"], amount1)

        deltas[key.currency0] = deltas.get(key.currency0, 0) - amount0
        deltas[key.currency1] = deltas.get(key.currency1, 0) - amount1

        token_id = self.next_token_id
        self.positions[token_id] = PositionInfo(
            token_id=token_id,
            owner=params["owner"],
            pool_key=key,
            tick_lower=params["tick_lower"],
            tick_upper=params["tick_upper"],
            liquidity=params["liquidity"],
            amount0=amount0,
            amount1=amount1
        )
        self.next_token_id += 1
        logger.debug("Minted position %d [%d, %d] liquidity %d",
                     token_id, params["tick_lower"], params["tick_upper"], params["liquidity"])

    def _settle(self, params: dict, deltas: Dict[str, int]):
        currency = params["currency"]
        if params["payer_is_user"]:
            raise SimulationError("Settling from the user is not supported")

        amount = params["amount"]
        if amount == CONTRACT_BALANCE:
            amount = self.chain.balance_of(currency, self.address)
        elif amount == OPEN_DELTA:
            amount = max(0, -deltas.get(currency, 0))

        self.chain.transfer(currency, self.address, self.pool_manager.address, amount)
        deltas[currency] = deltas.get(currency, 0) + amount

    def _take_pair(self, params: dict, deltas: Dict[str, int]):
        for currency in (params["currency0"], params["currency1"]):
            credit = deltas.get(currency, 0)
            if credit < 0:
                raise CurrencyNotSettled(currency, credit)
            if credit > 0:
                self.chain.transfer(currency, self.pool_manager.address, params["recipient"], credit)
            deltas[currency] = 0
