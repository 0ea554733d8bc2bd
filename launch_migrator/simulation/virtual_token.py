#!/usr/bin/env python3
"""
Simulated Virtual Token

Distributed token backed 1:1 by an underlying token held in the virtual
token's own account. Holders unwrap by burning virtual tokens.
"""

import logging

from ..core.addresses import normalize_address
from ..core.exceptions import InsufficientBalance

logger = logging.getLogger(__name__)


class SimulatedVirtualToken:
    """Virtual wrapper around an underlying token"""

    def __init__(self, chain, address: str, underlying: str):
        self.chain = chain
        self.address = normalize_address(address)
        self.underlying = normalize_address(underlying)
        chain.register(self.address, self)

    def mint_backed(self, to: str, amount: int):
        """Mint virtual tokens together with their underlying backing"""
        with self.chain.atomic():
            self.chain.mint(self.underlying, self.address, amount)
            self.chain.mint(self.address, to, amount)

    def backing(self) -> int:
        return self.chain.balance_of(self.underlying, self.address)

    def unwrap(self, holder: str, amount: int):
        """Burn `amount` virtual tokens from holder and release the underlying"""
        if self.backing() < amount:
            raise InsufficientBalance(self.underlying, self.address, self.backing(), amount)

        with self.chain.atomic():
            self.chain.burn(self.address, holder, amount)
            self.chain.transfer(self.underlying, self.address, holder, amount)
        logger.debug("Unwrapped %d for %s", amount, holder)
