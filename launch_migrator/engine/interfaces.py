#!/usr/bin/env python3
"""
Collaborator Interfaces

What the orchestrator consumes from the auction, the auction factory,
the pool manager and the position manager.
"""

from abc import ABC, abstractmethod

from ..core.plan import PoolKey


class AuctionInterface(ABC):
    """Read side of a deployed auction"""

    address: str
    token: str
    currency: str
    funds_recipient: str
    end_block: int

    @abstractmethod
    def on_tokens_received(self):
        """Notify the auction that its token share has arrived"""
        pass

    @abstractmethod
    def currency_raised(self) -> int:
        pass

    @abstractmethod
    def clearing_price(self) -> int:
        """Q96 currency-per-token clearing price"""
        pass


class AuctionFactoryInterface(ABC):

    @abstractmethod
    def initialize_distribution(self, sender: str, token: str, amount: int,
                                config_data: bytes, salt: bytes) -> AuctionInterface:
        """Deploy an auction for `amount` of `token` and return it"""
        pass


class PoolManagerInterface(ABC):

    @abstractmethod
    def initialize(self, sender: str, key: PoolKey, sqrt_price_x96: int) -> int:
        """One-shot pool initialization; returns the initial tick"""
        pass


class PositionManagerInterface(ABC):

    address: str

    @abstractmethod
    def modify_liquidities(self, sender: str, unlock_data: bytes, deadline: int, value: int = 0):
        """Execute an encoded plan in one batch"""
        pass
