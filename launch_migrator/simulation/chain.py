#!/usr/bin/env python3
"""
Simulated Chain

In-memory host ledger: block clock, per-asset balances, a contract
registry and an all-or-nothing unit of work for state-changing calls.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Tuple

from ..core.addresses import normalize_address
from ..core.exceptions import InsufficientBalance

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_TIME = 12  # seconds


class SimulatedChain:
    """Balances, clock and contract registry shared by every simulated component"""

    def __init__(self, block_number: int = 1, timestamp: int = 1_700_000_000,
                 block_time: int = DEFAULT_BLOCK_TIME):
        self.block_number = block_number
        self.timestamp = timestamp
        self.block_time = block_time

        self.balances: Dict[Tuple[str, str], int] = {}
        self.total_supplies: Dict[str, int] = {}
        self.contracts: Dict[str, Any] = {}
        self._atomic_depth = 0

    # Clock

    def advance_blocks(self, blocks: int = 1):
        if blocks < 0:
            raise ValueError("Cannot move the clock backwards")
        self.block_number += blocks
        self.timestamp += blocks * self.block_time

    def advance_to_block(self, block_number: int):
        if block_number > self.block_number:
            self.advance_blocks(block_number - self.block_number)

    # Ledger

    def balance_of(self, asset: str, holder: str) -> int:
        return self.balances.get((normalize_address(asset), normalize_address(holder)), 0)

    def total_supply(self, asset: str) -> int:
        return self.total_supplies.get(normalize_address(asset), 0)

    def _set_balance(self, asset: str, holder: str, amount: int):
        key = (asset, holder)
        if amount == 0:
            self.balances.pop(key, None)
        else:
            self.balances[key] = amount

    def mint(self, asset: str, to: str, amount: int):
        if amount < 0:
            raise ValueError(f"Cannot mint negative amount {amount}")
        asset, to = normalize_address(asset), normalize_address(to)
        self._set_balance(asset, to, self.balance_of(asset, to) + amount)
        self.total_supplies[asset] = self.total_supply(asset) + amount

    def burn(self, asset: str, holder: str, amount: int):
        asset, holder = normalize_address(asset), normalize_address(holder)
        balance = self.balance_of(asset, holder)
        if balance < amount:
            raise InsufficientBalance(asset, holder, balance, amount)
        self._set_balance(asset, holder, balance - amount)
        self.total_supplies[asset] = self.total_supply(asset) - amount

    def transfer(self, asset: str, sender: str, recipient: str, amount: int):
        if amount < 0:
            raise ValueError(f"Cannot transfer negative amount {amount}")
        asset = normalize_address(asset)
        sender, recipient = normalize_address(sender), normalize_address(recipient)

        balance = self.balance_of(asset, sender)
        if balance < amount:
            raise InsufficientBalance(asset, sender, balance, amount)
        if amount == 0 or sender == recipient:
            return

        self._set_balance(asset, sender, balance - amount)
        self._set_balance(asset, recipient, self.balance_of(asset, recipient) + amount)

    # Contracts

    def register(self, address: str, contract: Any):
        address = normalize_address(address)
        if address in self.contracts:
            raise ValueError(f"Address {address} already has code")
        self.contracts[address] = contract

    def contract_at(self, address: str) -> Any:
        address = normalize_address(address)
        if address not in self.contracts:
            raise KeyError(f"No contract at {address}")
        return self.contracts[address]

    def has_code(self, address: str) -> bool:
        return normalize_address(address) in self.contracts

    # Unit of work

    def snapshot(self) -> dict:
        return {
            "balances": dict(self.balances),
            "total_supplies": dict(self.total_supplies),
            "contracts": dict(self.contracts)
        }

    def restore(self, snapshot: dict):
        self.balances = snapshot["balances"]
        self.total_supplies = snapshot["total_supplies"]
        self.contracts = snapshot["contracts"]

    def _participants(self) -> List[Any]:
        return [c for c in self.contracts.values() if hasattr(c, "snapshot") and hasattr(c, "restore")]

    @contextmanager
    def atomic(self):
        """
        Run a block as one transaction.

        Ledger, registry and every registered contract exposing
        snapshot()/restore() are rolled back if the block raises.
        """
        participants = self._participants()
        saved = [(c, c.snapshot()) for c in participants]
        chain_state = self.snapshot()
        self._atomic_depth += 1
        try:
            yield self
        except Exception:
            self.restore(chain_state)
            for contract, state in saved:
                contract.restore(state)
            logger.debug("Rolled back transaction at depth %d", self._atomic_depth)
            raise
        finally:
            self._atomic_depth -= 1
