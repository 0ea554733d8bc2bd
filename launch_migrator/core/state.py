#!/usr/bin/env python3
"""
Migration State

Lifecycle states of the orchestrator and the transient data derived for
a single migration attempt.
"""

from dataclasses import dataclass
from enum import Enum


class MigrationState(Enum):
    """Orchestrator lifecycle; transitions are one-directional"""
    CREATED = "created"
    AUCTION_LIVE = "auction_live"
    MIGRATED = "migrated"
    SWEPT = "swept"


@dataclass(frozen=True)
class MigrationData:
    """
    Derived once per migration attempt and discarded afterwards.

    Construction fails unless token_amount <= reserve_supply,
    currency_amount <= raised_amount and leftover_currency >= 0.
    """
    price_x192: int
    sqrt_price_x96: int
    token_amount: int
    currency_amount: int
    leftover_currency: int
    liquidity: int
    reserve_supply: int
    raised_amount: int

    def __post_init__(self):
        if self.token_amount > self.reserve_supply:
            raise ValueError(
                f"Token amount {self.token_amount} exceeds reserve supply {self.reserve_supply}"
            )
        if self.currency_amount > self.raised_amount:
            raise ValueError(
                f"Currency amount {self.currency_amount} exceeds raised amount {self.raised_amount}"
            )
        if self.leftover_currency < 0:
            raise ValueError(f"Negative leftover currency: {self.leftover_currency}")

    @property
    def unused_reserve(self) -> int:
        return self.reserve_supply - self.token_amount

    def to_dict(self) -> dict:
        return {
            "price_x192": self.price_x192,
            "sqrt_price_x96": self.sqrt_price_x96,
            "token_amount": self.token_amount,
            "currency_amount": self.currency_amount,
            "leftover_currency": self.leftover_currency,
            "liquidity": self.liquidity,
            "reserve_supply": self.reserve_supply,
            "raised_amount": self.raised_amount
        }
