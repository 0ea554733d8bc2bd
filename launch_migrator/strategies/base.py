#!/usr/bin/env python3
"""
Position Plan Strategy Interface

A strategy decides which positions a migration creates and how much of
each asset the orchestrator hands to the position manager.
"""

from abc import ABC, abstractmethod

from ..core.addresses import BEFORE_INITIALIZE_FLAG
from ..core.plan import BasePositionParams, build_full_range, finalize
from ..core.state import MigrationData


class PositionPlanStrategy(ABC):
    """Base class for migration strategy variants"""

    name = "base"

    @property
    def hook_permissions(self) -> int:
        """Hook flags the orchestrator's address must encode"""
        return BEFORE_INITIALIZE_FLAG

    def pool_token(self, token: str) -> str:
        """Asset identity the pool trades in place of the distributed token"""
        return token

    @abstractmethod
    def build_plan(self, data: MigrationData, base: BasePositionParams) -> bytes:
        """Encoded, finalized instruction plan for the position manager"""
        pass

    def token_transfer_amount(self, data: MigrationData) -> int:
        return data.token_amount

    def currency_transfer_amount(self, data: MigrationData) -> int:
        return data.currency_amount

    def prepare_token_transfer(self, holder: str, amount: int):
        """Hook for variants that must convert the token before it is transferred"""
        pass

    def before_swap(self, sender: str):
        """Called by the pool before a swap when the before-swap flag is set"""
        pass

    def describe(self) -> dict:
        return {"strategy": self.name, "hook_permissions": self.hook_permissions}


class FullRangeStrategy(PositionPlanStrategy):
    """Single full-range position from the sized amounts"""

    name = "full_range"

    def build_plan(self, data: MigrationData, base: BasePositionParams) -> bytes:
        plan = build_full_range(base, data.token_amount, data.currency_amount)
        return finalize(plan, base)
