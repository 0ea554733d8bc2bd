#!/usr/bin/env python3
"""
Governed Strategy

Full-range migration whose pool rejects every swap until a fixed
governance identity approves trading. Approval is one-way.
"""

import logging

from ..core.addresses import BEFORE_SWAP_FLAG, normalize_address
from ..core.exceptions import NotGovernance, SwapsNotAllowed
from .base import FullRangeStrategy

logger = logging.getLogger(__name__)


class GovernedStrategy(FullRangeStrategy):
    """Full range with a governance-controlled trading gate"""

    name = "governed"

    def __init__(self, governance: str):
        self.governance = normalize_address(governance)
        self.trading_approved = False

    @property
    def hook_permissions(self) -> int:
        return super().hook_permissions | BEFORE_SWAP_FLAG

    def approve_trading(self, caller: str):
        if normalize_address(caller) != self.governance:
            raise NotGovernance(caller, self.governance)
        if not self.trading_approved:
            self.trading_approved = True
            logger.info("Trading approved by %s", self.governance)

    def before_swap(self, sender: str):
        if not self.trading_approved:
            raise SwapsNotAllowed()

    def describe(self) -> dict:
        description = super().describe()
        description.update({"governance": self.governance, "trading_approved": self.trading_approved})
        return description
